"""Tests for node scoring."""

from fractions import Fraction

import pytest
from devicefit.config import ScoringConfig
from devicefit.errors import AggregationMissingError, ScoringError
from devicefit.scheduler.cycle_state import CycleState
from devicefit.scheduler.score import (
    INT64_MAX,
    calculate_score,
    combine_ratios,
    dimension_ratio,
    score_resolution,
    to_signed_score,
)
from devicefit.types import Device, DeviceInventory, Dimension, ResourceRequest


@pytest.fixture
def state():
    s = CycleState(workload="default/w")
    s.write_all({Dimension.COUNT: 4, Dimension.MEMORY: 16, Dimension.CLOCK: 8})
    return s


def node(count, memory, clock, name="n"):
    return DeviceInventory(name, [Device(count=count, memory_per_unit=memory, clock_per_unit=clock)])


class TestDimensionRatio:
    def test_ratio(self):
        assert dimension_ratio(2, 8) == Fraction(1, 4)

    def test_zero_maximum(self):
        assert dimension_ratio(5, 0) == 0

    def test_capped_at_one(self):
        assert dimension_ratio(10, 8) == 1


class TestCalculateScore:
    def test_default_weights(self, state):
        # ratios 1/2 each, weights 1/2/1, lcm of maxima 16
        assert calculate_score(node(2, 8, 4), state, ResourceRequest(count=1)) == 32

    def test_machine_at_cluster_maximum(self, state):
        assert calculate_score(node(4, 16, 8), state, ResourceRequest(count=1)) == 64

    def test_custom_weights(self, state):
        config = ScoringConfig(count_weight=3, memory_weight=1, clock_weight=1, score_scale=100)
        assert calculate_score(node(4, 0, 0), state, ResourceRequest(count=1), config) == 4800

    def test_deterministic(self, state):
        inv = node(3, 11, 7)
        results = {calculate_score(inv, state, ResourceRequest(count=1)) for _ in range(20)}
        assert len(results) == 1

    @pytest.mark.parametrize(
        "lower,higher",
        [
            ((1, 8, 4), (2, 8, 4)),
            ((2, 8, 4), (2, 9, 4)),
            ((2, 8, 4), (2, 8, 5)),
        ],
    )
    def test_strictly_increasing_in_each_dimension(self, state, lower, higher):
        request = ResourceRequest(count=1)
        assert calculate_score(node(*higher), state, request) > calculate_score(
            node(*lower), state, request
        )

    def test_zero_maxima_score_zero(self):
        s = CycleState()
        s.write_all({Dimension.COUNT: 0, Dimension.MEMORY: 0, Dimension.CLOCK: 0})
        assert calculate_score(node(0, 0, 0), s, ResourceRequest(count=0)) == 0

    def test_uses_matched_entry(self, state):
        inv = DeviceInventory(
            "n",
            [
                Device(count=1, memory_per_unit=16, clock_per_unit=8),
                Device(count=2, memory_per_unit=8, clock_per_unit=4),
            ],
        )
        assert calculate_score(inv, state, ResourceRequest(count=2)) == 32

    def test_missing_maxima_raise(self):
        with pytest.raises(AggregationMissingError):
            calculate_score(node(2, 8, 4), CycleState(), ResourceRequest(count=1))

    def test_partially_collected_state_raises(self):
        s = CycleState()
        s.write(Dimension.COUNT, 4)
        with pytest.raises(AggregationMissingError, match="memory"):
            calculate_score(node(2, 8, 4), s, ResourceRequest(count=1))

    def test_infeasible_machine_raises(self, state):
        with pytest.raises(ScoringError, match="no device entry"):
            calculate_score(node(1, 8, 4), state, ResourceRequest(count=3))


class TestToSignedScore:
    def test_passthrough(self):
        assert to_signed_score(42) == 42

    def test_clamped(self):
        assert to_signed_score(2**64 - 1) == INT64_MAX


class TestScoreResolution:
    def test_lcm_of_maxima(self):
        maxima = {Dimension.COUNT: 8, Dimension.MEMORY: 81920, Dimension.CLOCK: 1980}
        assert score_resolution(maxima) == 8110080

    def test_zero_maxima_ignored(self):
        maxima = {Dimension.COUNT: 0, Dimension.MEMORY: 12, Dimension.CLOCK: 0}
        assert score_resolution(maxima) == 12

    def test_all_zero(self):
        assert score_resolution({d: 0 for d in Dimension}) == 1

    def test_combine_rejects_inexact_scale(self):
        ratios = {Dimension.COUNT: Fraction(1, 3), Dimension.MEMORY: 0, Dimension.CLOCK: 0}
        weights = {d: 1 for d in Dimension}
        with pytest.raises(ValueError, match="denominators"):
            combine_ratios(ratios, weights, 2)


class TestMonotonicityAtRealisticSizes:
    @pytest.fixture
    def gpu_state(self):
        s = CycleState(workload="default/w")
        s.write_all({Dimension.COUNT: 8, Dimension.MEMORY: 81920, Dimension.CLOCK: 1980})
        return s

    @pytest.mark.parametrize(
        "lower,higher",
        [
            ((4, 40960, 990), (5, 40960, 990)),
            ((4, 40960, 990), (4, 40961, 990)),
            ((4, 40960, 990), (4, 40960, 991)),
            ((7, 81919, 1979), (8, 81919, 1979)),
            ((1, 1, 1), (1, 2, 1)),
        ],
    )
    def test_one_unit_increase_raises_score(self, gpu_state, lower, higher):
        request = ResourceRequest(count=1)
        assert calculate_score(node(*higher), gpu_state, request) > calculate_score(
            node(*lower), gpu_state, request
        )

    def test_scale_multiplies_exact_score(self, gpu_state):
        request = ResourceRequest(count=1)
        base = calculate_score(node(4, 40961, 990), gpu_state, request)
        scaled = calculate_score(
            node(4, 40961, 990), gpu_state, request, ScoringConfig(score_scale=7)
        )
        assert scaled == 7 * base
