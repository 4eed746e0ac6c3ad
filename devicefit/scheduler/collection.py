"""
Cluster-wide maxima collection.

Records, for the workload being scheduled, the largest free device count,
memory per unit and clock per unit advertised anywhere in the cluster. The
scorer divides each machine's values by these maxima.
"""

from typing import Dict, Iterable, Optional

from ..config import ZeroCountPolicy
from ..errors import NoCandidatesError
from ..logging import get_logger
from ..types import DeviceInventory, Dimension, ResourceRequest
from .cycle_state import CycleState
from .filter import relevant_devices

logger = get_logger(__name__)


def compute_maxima(
    request: ResourceRequest,
    inventories: Iterable[DeviceInventory],
    policy: Optional[ZeroCountPolicy] = None,
) -> Dict[Dimension, int]:
    """Return the per-dimension maxima over all entries relevant to the request."""
    maxima = {dimension: 0 for dimension in Dimension}
    seen = 0

    for inventory in inventories:
        seen += 1
        for device in relevant_devices(request, inventory, policy):
            for dimension in Dimension:
                value = device.value(dimension)
                if value > maxima[dimension]:
                    maxima[dimension] = value

    if seen == 0:
        raise NoCandidatesError()

    return maxima


def collect_maxima(
    state: CycleState,
    request: ResourceRequest,
    inventories: Iterable[DeviceInventory],
    policy: Optional[ZeroCountPolicy] = None,
) -> Dict[Dimension, int]:
    """Compute the cluster maxima and store them in the cycle state.

    Calling this again for the same cycle replaces the stored values. An empty
    cluster raises NoCandidatesError and leaves the state untouched.
    """
    try:
        maxima = compute_maxima(request, inventories, policy)
    except NoCandidatesError:
        raise NoCandidatesError(state.workload, cycle_id=state.cycle_id) from None

    state.write_all(maxima)

    logger.debug(
        "Collected cluster maxima",
        cycle_id=state.cycle_id,
        workload=state.workload,
        **{dimension.value: value for dimension, value in maxima.items()},
    )
    return maxima
