"""
Queue ordering for pending workloads.

Workloads with a higher priority go first; ties fall back to submission time,
then to namespace/name and uid so that no two distinct workloads compare equal
by accident.
"""

from datetime import datetime
from typing import Iterable, List, Tuple

from ..types import Workload


def sort_key(workload: Workload) -> Tuple[int, datetime, str, str]:
    return (-workload.priority, workload.created_at, workload.key, workload.uid)


def less(a: Workload, b: Workload) -> bool:
    """Return True if ``a`` should be considered before ``b``."""
    return sort_key(a) < sort_key(b)


def sort_queue(workloads: Iterable[Workload]) -> List[Workload]:
    """Return the workloads in the order the scheduling queue should pop them."""
    return sorted(workloads, key=sort_key)
