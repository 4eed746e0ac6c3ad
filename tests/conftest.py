"""Shared test fixtures for devicefit."""

from datetime import datetime

import pytest
from devicefit.config import get_config, reset_config
from devicefit.scheduler.cycle_state import CycleState
from devicefit.scheduler.inventory import InMemoryInventoryStore
from devicefit.types import Device, DeviceInventory, ResourceRequest, Workload


@pytest.fixture(autouse=True)
def _reset_global_config(monkeypatch):
    """Reset global config and clear devicefit environment overrides for all tests."""
    for var in (
        "DEVICEFIT_COUNT_WEIGHT",
        "DEVICEFIT_MEMORY_WEIGHT",
        "DEVICEFIT_CLOCK_WEIGHT",
        "DEVICEFIT_SCORE_SCALE",
        "DEVICEFIT_OUTPUT_MAX",
        "DEVICEFIT_ZERO_COUNT_POLICY",
        "DEVICEFIT_MAX_PARALLELISM",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Return the default DeviceFitConfig."""
    return get_config()


@pytest.fixture
def request_small():
    """The request used throughout the end-to-end example."""
    return ResourceRequest(count=1, memory_per_unit=4, clock_per_unit=2)


@pytest.fixture
def example_inventories():
    """M1 fits, M2 lacks devices, M3 lacks memory and clock."""
    return [
        DeviceInventory("m1", [Device(count=2, memory_per_unit=8, clock_per_unit=4)]),
        DeviceInventory("m2", [Device(count=0, memory_per_unit=16, clock_per_unit=8)]),
        DeviceInventory("m3", [Device(count=1, memory_per_unit=2, clock_per_unit=1)]),
    ]


@pytest.fixture
def example_store(example_inventories):
    return InMemoryInventoryStore(example_inventories)


@pytest.fixture
def cycle_state():
    return CycleState(workload="default/test")


@pytest.fixture
def make_workload():
    """Factory for workloads with fixed timestamps."""

    def _make(name, priority=0, created_at=None, uid=None, request=None):
        return Workload(
            name=name,
            priority=priority,
            created_at=created_at or datetime(2026, 1, 1, 12, 0, 0),
            uid=uid or f"uid-{name}",
            request=request or ResourceRequest(),
        )

    return _make
