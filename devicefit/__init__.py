"""
devicefit - device-aware node selection for workload scheduling.

This package decides which machine should run a workload that asks for a
number of devices with a minimum memory and clock per device: it filters
machines that cannot satisfy the request, scores the rest relative to the
cluster, normalizes the scores and orders the pending queue.
"""

from .config import DeviceFitConfig, ZeroCountPolicy
from .errors import (
    AggregationMissingError,
    ConfigurationError,
    DeviceFitError,
    InventoryLookupError,
    NoCandidatesError,
    ScoringError,
    ValidationError,
)
from .types import Device, DeviceInventory, Dimension, NodeScore, ResourceRequest, Workload

__version__ = "0.1.0"

__all__ = [
    "DeviceFitConfig",
    "ZeroCountPolicy",
    "Device",
    "DeviceInventory",
    "Dimension",
    "NodeScore",
    "ResourceRequest",
    "Workload",
    "DeviceFitError",
    "InventoryLookupError",
    "AggregationMissingError",
    "NoCandidatesError",
    "ScoringError",
    "ConfigurationError",
    "ValidationError",
]
