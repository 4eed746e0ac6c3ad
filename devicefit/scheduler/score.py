"""
Cluster-relative node scoring.

Each machine is scored on the device entry the filter matched: its free count,
memory per unit and clock per unit are divided by the cycle maxima, weighted
and summed. The sum is scaled by the least common multiple of the maxima, so
the integer score is exact and any increase along one dimension raises it.
"""

import math
from fractions import Fraction
from typing import Dict, Optional

from ..config import ScoringConfig, ZeroCountPolicy, get_config
from ..errors import ScoringError
from ..types import DeviceInventory, Dimension, ResourceRequest
from .cycle_state import CycleState
from .filter import fits_count

INT64_MAX = 2**63 - 1


def dimension_ratio(value: int, maximum: int) -> Fraction:
    """Return value/maximum capped to [0, 1], or 0 when the maximum is 0."""
    if maximum <= 0:
        return Fraction(0)
    return min(Fraction(value, maximum), Fraction(1))


def weights_from_config(config: ScoringConfig) -> Dict[Dimension, int]:
    return {
        Dimension.COUNT: config.count_weight,
        Dimension.MEMORY: config.memory_weight,
        Dimension.CLOCK: config.clock_weight,
    }


def score_resolution(maxima: Dict[Dimension, int]) -> int:
    """Smallest multiplier that turns every ratio against these maxima into an integer."""
    return math.lcm(*(m for m in maxima.values() if m > 0))


def combine_ratios(
    ratios: Dict[Dimension, Fraction], weights: Dict[Dimension, int], scale: int
) -> int:
    """Weighted sum of the ratios multiplied by scale.

    Raises ValueError if the scale does not clear every ratio's denominator.
    """
    total = sum((weights[d] * ratios[d] for d in Dimension), Fraction(0)) * scale
    if total.denominator != 1:
        raise ValueError(f"scale {scale} does not clear the ratio denominators")
    return total.numerator


def calculate_score(
    inventory: DeviceInventory,
    state: CycleState,
    request: ResourceRequest,
    config: Optional[ScoringConfig] = None,
    policy: Optional[ZeroCountPolicy] = None,
) -> int:
    """Score one filtered machine against the cycle maxima.

    Raises AggregationMissingError if the cycle maxima were never collected,
    and ScoringError if no device entry on the machine satisfies the request's
    count (the machine should have been filtered out).
    """
    config = config or get_config().scoring
    maxima = {dimension: state.read(dimension) for dimension in Dimension}

    ok, index = fits_count(request, inventory, policy)
    if not ok:
        raise ScoringError(
            inventory.node_name,
            "no device entry satisfies the requested count",
            requested_count=request.count,
        )

    device = inventory.devices[index]
    ratios = {
        dimension: dimension_ratio(device.value(dimension), maxima[dimension])
        for dimension in Dimension
    }
    return combine_ratios(
        ratios,
        weights_from_config(config),
        config.score_scale * score_resolution(maxima),
    )


def to_signed_score(value: int) -> int:
    """Clamp an unsigned score into the signed 64-bit range used by node scores."""
    if value > INT64_MAX:
        return INT64_MAX
    return value
