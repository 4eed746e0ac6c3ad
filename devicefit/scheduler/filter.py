"""
Fitness filter.

Decides whether a machine's advertised devices can satisfy a workload's
request. The device count is checked first and selects the entry whose memory
and clock are then compared; a machine without a matching entry is rejected
without looking at memory or clock.
"""

from typing import Iterator, NamedTuple, Optional, Tuple

from ..config import ZeroCountPolicy, get_config
from ..types import Device, DeviceInventory, ResourceRequest

NO_MATCH = -1


class FitResult(NamedTuple):
    """Outcome of filtering one machine for one request."""

    fits: bool
    matched_index: int
    reason: str = ""


def _resolve_policy(policy: Optional[ZeroCountPolicy]) -> ZeroCountPolicy:
    if policy is None:
        return get_config().filter.zero_count_policy
    return ZeroCountPolicy(policy)


def device_satisfies_count(
    device: Device, request: ResourceRequest, policy: Optional[ZeroCountPolicy] = None
) -> bool:
    """Check whether a single entry can provide the requested number of devices."""
    if not device.healthy:
        return False
    if request.count == 0 and _resolve_policy(policy) is ZeroCountPolicy.REJECT:
        return False
    return device.count >= request.count


def relevant_devices(
    request: ResourceRequest,
    inventory: DeviceInventory,
    policy: Optional[ZeroCountPolicy] = None,
) -> Iterator[Device]:
    """Yield the entries of an inventory that could serve the request's count."""
    policy = _resolve_policy(policy)
    for device in inventory.devices:
        if device_satisfies_count(device, request, policy):
            yield device


def fits_count(
    request: ResourceRequest,
    inventory: DeviceInventory,
    policy: Optional[ZeroCountPolicy] = None,
) -> Tuple[bool, int]:
    """Return whether some entry has enough free devices, and the first such index."""
    policy = _resolve_policy(policy)
    for index, device in enumerate(inventory.devices):
        if device_satisfies_count(device, request, policy):
            return True, index
    return False, NO_MATCH


def fits_memory(index: int, request: ResourceRequest, inventory: DeviceInventory) -> bool:
    """Check the matched entry's memory per unit against the request."""
    return inventory.devices[index].memory_per_unit >= request.memory_per_unit


def fits_clock(index: int, request: ResourceRequest, inventory: DeviceInventory) -> bool:
    """Check the matched entry's clock per unit against the request."""
    return inventory.devices[index].clock_per_unit >= request.clock_per_unit


def check_fit(
    request: ResourceRequest,
    inventory: DeviceInventory,
    policy: Optional[ZeroCountPolicy] = None,
) -> FitResult:
    """Filter one machine, returning the decision with a reason on failure."""
    ok, index = fits_count(request, inventory, policy)
    if not ok:
        return FitResult(
            False,
            NO_MATCH,
            f"Node:{inventory.node_name} insufficient device count "
            f"(requested {request.count})",
        )

    failed = []
    if not fits_memory(index, request, inventory):
        failed.append(
            f"memory {inventory.devices[index].memory_per_unit} < {request.memory_per_unit}"
        )
    if not fits_clock(index, request, inventory):
        failed.append(
            f"clock {inventory.devices[index].clock_per_unit} < {request.clock_per_unit}"
        )

    if failed:
        return FitResult(
            False, index, f"Node:{inventory.node_name} insufficient " + ", ".join(failed)
        )
    return FitResult(True, index)


def fits(
    request: ResourceRequest,
    inventory: DeviceInventory,
    policy: Optional[ZeroCountPolicy] = None,
) -> Tuple[bool, int]:
    """Return ``(fits, matched_index)`` for one machine and one request."""
    result = check_fit(request, inventory, policy)
    return result.fits, result.matched_index
