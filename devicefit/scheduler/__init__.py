"""
Scheduler Components for devicefit

This package contains the per-cycle decision core: the fitness filter, the
cluster maxima collection, node scoring, score normalization and queue
ordering, plus the plugin facade that composes them.
"""

from .collection import collect_maxima, compute_maxima
from .cycle_state import CycleState
from .filter import FitResult, check_fit, fits, fits_clock, fits_count, fits_memory
from .framework import Status, StatusCode
from .inventory import InMemoryInventoryStore, InventoryStore
from .normalize import normalize_scores
from .plugin import CycleResult, DeviceFitPlugin, run_cycle
from .queue_sort import less, sort_queue
from .score import calculate_score, to_signed_score

__all__ = [
    "CycleState",
    "FitResult",
    "check_fit",
    "fits",
    "fits_count",
    "fits_memory",
    "fits_clock",
    "collect_maxima",
    "compute_maxima",
    "calculate_score",
    "to_signed_score",
    "normalize_scores",
    "less",
    "sort_queue",
    "Status",
    "StatusCode",
    "InventoryStore",
    "InMemoryInventoryStore",
    "DeviceFitPlugin",
    "CycleResult",
    "run_cycle",
]
