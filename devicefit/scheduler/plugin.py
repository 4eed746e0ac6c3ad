"""
Scheduling plugin facade.

DeviceFitPlugin exposes the core through the extension points an
orchestration runtime calls (filter, post_filter, score, normalize_score,
less). run_cycle composes them for one workload: collect maxima, filter every
candidate, score the survivors and normalize the scores.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import DeviceFitConfig, get_config
from ..errors import (
    DeviceFitError,
    InventoryLookupError,
    NoCandidatesError,
)
from ..logging import correlation_scope, get_logger, trace_operation
from ..types import DeviceInventory, Dimension, NodeScore, Workload
from .collection import collect_maxima
from .cycle_state import CycleState
from .filter import check_fit
from .framework import Status, StatusCode
from .inventory import InventoryStore
from .normalize import normalize_scores
from .queue_sort import less as queue_less
from .score import calculate_score, to_signed_score

logger = get_logger(__name__)

NAME = "devicefit"


class DeviceFitPlugin:
    """Filter, score and queue-sort extension points backed by an inventory store."""

    name = NAME

    def __init__(self, store: InventoryStore, config: Optional[DeviceFitConfig] = None):
        self.store = store
        self.config = config or get_config()

    # Raising primitives

    def collect(self, state: CycleState, workload: Workload) -> Dict[Dimension, int]:
        """Collect cluster maxima for the workload into the cycle state."""
        return collect_maxima(
            state,
            workload.request,
            self.store.list(),
            self.config.filter.zero_count_policy,
        )

    def filter_inventory(self, workload: Workload, inventory: DeviceInventory) -> Status:
        result = check_fit(workload.request, inventory, self.config.filter.zero_count_policy)
        if result.fits:
            return Status.success()
        logger.debug(
            "Node does not fit workload",
            workload=workload.key,
            node=inventory.node_name,
            reason=result.reason,
        )
        return Status.unschedulable(result.reason)

    def score_inventory(
        self, state: CycleState, workload: Workload, inventory: DeviceInventory
    ) -> int:
        raw = calculate_score(
            inventory,
            state,
            workload.request,
            self.config.scoring,
            self.config.filter.zero_count_policy,
        )
        return to_signed_score(raw)

    # Extension points

    def filter(self, state: CycleState, workload: Workload, node_name: str) -> Status:
        """Decide whether a machine can run the workload."""
        try:
            inventory = self.store.get(node_name)
        except InventoryLookupError as e:
            logger.error("Inventory lookup failed", workload=workload.key, node=node_name, error=str(e))
            return Status.lookup_failed(f"Node:{node_name} {e.reason}")
        return self.filter_inventory(workload, inventory)

    def post_filter(self, state: CycleState, workload: Workload) -> Status:
        """Collect the cluster maxima the score step divides by."""
        try:
            self.collect(state, workload)
        except InventoryLookupError as e:
            logger.error("Inventory listing failed", workload=workload.key, error=str(e))
            return Status.error(str(e))
        except NoCandidatesError as e:
            logger.warning("No candidate machines", workload=workload.key)
            return Status.error(str(e))
        return Status.success()

    def score(self, state: CycleState, workload: Workload, node_name: str) -> Tuple[int, Status]:
        """Score one machine that passed the filter."""
        try:
            inventory = self.store.get(node_name)
        except InventoryLookupError as e:
            logger.error("Inventory lookup failed", workload=workload.key, node=node_name, error=str(e))
            return 0, Status.error(f"Score Node Error: {e}")

        try:
            return self.score_inventory(state, workload, inventory), Status.success()
        except DeviceFitError as e:
            logger.error("Score node error", workload=workload.key, node=node_name, error=str(e))
            return 0, Status.error(f"Score Node Error: {e}")

    def normalize_score(
        self, state: CycleState, workload: Workload, scores: List[NodeScore]
    ) -> Status:
        """Rescale the cycle's scores to the configured output range."""
        normalize_scores(scores, self.config.scoring.output_max)
        return Status.success()

    def less(self, a: Workload, b: Workload) -> bool:
        return queue_less(a, b)


@dataclass
class CycleResult:
    """Decisions made for one workload in one scheduling cycle."""

    workload: Workload
    cycle_id: str
    maxima: Dict[Dimension, int]
    statuses: Dict[str, Status] = field(default_factory=dict)
    scores: List[NodeScore] = field(default_factory=list)

    @property
    def feasible_nodes(self) -> List[str]:
        return [s.name for s in self.scores]

    @property
    def lookup_failures(self) -> List[str]:
        return [n for n, s in self.statuses.items() if s.code is StatusCode.LOOKUP_FAILED]

    @property
    def best_node(self) -> Optional[str]:
        """Highest scoring node; ties go to the earlier candidate."""
        best = None
        for node_score in self.scores:
            if best is None or node_score.score > best.score:
                best = node_score
        return best.name if best else None


def _evaluate_node(
    plugin: DeviceFitPlugin, state: CycleState, workload: Workload, node_name: str
) -> Tuple[Status, Optional[int]]:
    with correlation_scope(state.cycle_id):
        try:
            inventory = plugin.store.get(node_name)
        except InventoryLookupError as e:
            logger.error(
                "Inventory lookup failed", workload=workload.key, node=node_name, error=str(e)
            )
            return Status.lookup_failed(f"Node:{node_name} {e.reason}"), None

        status = plugin.filter_inventory(workload, inventory)
        if not status.is_success():
            return status, None

        return status, plugin.score_inventory(state, workload, inventory)


@trace_operation("scheduling_cycle")
def run_cycle(
    plugin: DeviceFitPlugin,
    workload: Workload,
    node_names: Optional[Sequence[str]] = None,
    max_parallelism: Optional[int] = None,
) -> CycleResult:
    """Run collect → filter → score → normalize for one workload.

    Each machine's inventory is read once and the same snapshot is used for
    filtering and scoring. Raises NoCandidatesError for an empty cluster,
    InventoryLookupError if the cluster listing fails, and
    AggregationMissingError if scoring finds no maxima.
    """
    state = CycleState(workload=workload.key)
    max_parallelism = max_parallelism or plugin.config.cycle.max_parallelism

    with correlation_scope(state.cycle_id):
        maxima = plugin.collect(state, workload)
        if node_names is None:
            node_names = [inventory.node_name for inventory in plugin.store.list()]

        if max_parallelism > 1 and len(node_names) > 1:
            with ThreadPoolExecutor(
                max_workers=max_parallelism, thread_name_prefix="DeviceFitWorker"
            ) as executor:
                outcomes = list(
                    executor.map(
                        lambda name: _evaluate_node(plugin, state, workload, name), node_names
                    )
                )
        else:
            outcomes = [_evaluate_node(plugin, state, workload, name) for name in node_names]

        result = CycleResult(workload=workload, cycle_id=state.cycle_id, maxima=maxima)
        for node_name, (status, score) in zip(node_names, outcomes):
            result.statuses[node_name] = status
            if score is not None:
                result.scores.append(NodeScore(name=node_name, score=score))

        plugin.normalize_score(state, workload, result.scores)

        logger.info(
            "Scheduling cycle completed",
            workload=workload.key,
            candidates=len(node_names),
            feasible=len(result.scores),
            lookup_failures=len(result.lookup_failures),
            best_node=result.best_node,
        )

    return result

