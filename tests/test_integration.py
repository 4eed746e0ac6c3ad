"""
End-to-end tests for a complete scheduling cycle.

Covers the flow from maxima collection through filtering, scoring and
normalization for one workload, and isolation between cycles.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from devicefit.config import CycleConfig, DeviceFitConfig, ScoringConfig
from devicefit.errors import InventoryLookupError, NoCandidatesError
from devicefit.scheduler.framework import StatusCode
from devicefit.scheduler.inventory import InMemoryInventoryStore
from devicefit.scheduler.plugin import DeviceFitPlugin, run_cycle
from devicefit.types import Device, DeviceInventory, ResourceRequest, Workload


class TestExampleCluster:
    def test_only_m1_survives_and_gets_max_score(self, example_store, request_small):
        result = run_cycle(DeviceFitPlugin(example_store), Workload(name="w", request=request_small))

        assert result.statuses["m1"].is_success()
        assert result.statuses["m2"].code is StatusCode.UNSCHEDULABLE
        assert "device count" in result.statuses["m2"].reason
        assert result.statuses["m3"].code is StatusCode.UNSCHEDULABLE
        assert "memory" in result.statuses["m3"].reason
        assert "clock" in result.statuses["m3"].reason

        assert result.feasible_nodes == ["m1"]
        assert result.scores[0].score == 100
        assert result.best_node == "m1"

    def test_maxima_cover_relevant_devices(self, example_store, request_small):
        result = run_cycle(DeviceFitPlugin(example_store), Workload(name="w", request=request_small))
        # m2 has no free device, so its memory/clock do not raise the maxima
        assert {d.value: v for d, v in result.maxima.items()} == {
            "device-count": 2,
            "memory": 8,
            "clock": 4,
        }


def gpu_cluster():
    return InMemoryInventoryStore(
        [
            DeviceInventory("small", [Device(count=1, memory_per_unit=8192, clock_per_unit=1200)]),
            DeviceInventory("medium", [Device(count=2, memory_per_unit=16384, clock_per_unit=1500)]),
            DeviceInventory("large", [Device(count=4, memory_per_unit=32768, clock_per_unit=1800)]),
        ]
    )


class TestRanking:
    def test_larger_machine_ranks_higher(self):
        result = run_cycle(
            DeviceFitPlugin(gpu_cluster()),
            Workload(name="w", request=ResourceRequest(count=1, memory_per_unit=4096)),
        )
        scores = {s.name: s.score for s in result.scores}
        assert scores["large"] == 100
        assert scores["small"] == 0
        assert scores["small"] < scores["medium"] < scores["large"]

    def test_parallel_matches_sequential(self):
        workload = Workload(name="w", request=ResourceRequest(count=1))
        sequential = run_cycle(DeviceFitPlugin(gpu_cluster()), workload, max_parallelism=1)
        parallel = run_cycle(DeviceFitPlugin(gpu_cluster()), workload, max_parallelism=4)
        assert [(s.name, s.score) for s in parallel.scores] == [
            (s.name, s.score) for s in sequential.scores
        ]

    def test_parallelism_from_config(self):
        config = DeviceFitConfig(cycle=CycleConfig(max_parallelism=3))
        result = run_cycle(DeviceFitPlugin(gpu_cluster(), config), Workload(name="w"))
        assert len(result.scores) == 3

    def test_output_max_from_config(self):
        config = DeviceFitConfig(scoring=ScoringConfig(output_max=10))
        result = run_cycle(DeviceFitPlugin(gpu_cluster(), config), Workload(name="w"))
        assert max(s.score for s in result.scores) == 10

    def test_no_feasible_nodes(self):
        result = run_cycle(
            DeviceFitPlugin(gpu_cluster()), Workload(name="w", request=ResourceRequest(count=8))
        )
        assert result.scores == []
        assert result.best_node is None


class TestFailures:
    def test_empty_cluster(self):
        with pytest.raises(NoCandidatesError):
            run_cycle(DeviceFitPlugin(InMemoryInventoryStore()), Workload(name="w"))

    def test_listing_failure_propagates(self):
        store = gpu_cluster()
        store.set_unavailable()
        with pytest.raises(InventoryLookupError):
            run_cycle(DeviceFitPlugin(store), Workload(name="w"))

    def test_unknown_candidate_is_lookup_failure(self):
        result = run_cycle(
            DeviceFitPlugin(gpu_cluster()), Workload(name="w"), node_names=["small", "ghost"]
        )
        assert result.statuses["ghost"].code is StatusCode.LOOKUP_FAILED
        assert result.lookup_failures == ["ghost"]
        assert result.feasible_nodes == ["small"]


class TestCycleIsolation:
    def test_concurrent_cycles_for_different_workloads(self):
        plugin = DeviceFitPlugin(gpu_cluster())
        workloads = [
            Workload(name="one", request=ResourceRequest(count=1)),
            Workload(name="four", request=ResourceRequest(count=4)),
        ] * 4

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(lambda w: run_cycle(plugin, w), workloads))

        for result in results:
            if result.workload.name == "one":
                assert len(result.scores) == 3
            else:
                assert result.feasible_nodes == ["large"]
                assert result.scores[0].score == 100

        assert len({r.cycle_id for r in results}) == len(results)
