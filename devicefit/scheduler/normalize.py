"""Min-max normalization of node scores."""

from typing import List

from ..config import MAX_NODE_SCORE
from ..logging import get_logger
from ..types import NodeScore

logger = get_logger(__name__)


def normalize_scores(scores: List[NodeScore], output_max: int = MAX_NODE_SCORE) -> None:
    """Rescale scores in place to ``[0, output_max]``.

    When every node scored the same, the lowest value is lowered by one so the
    denominator stays positive and every node ends up at ``output_max``.
    """
    if not scores:
        return

    lowest = min(s.score for s in scores)
    highest = max(s.score for s in scores)

    if highest == lowest:
        lowest -= 1

    for node_score in scores:
        node_score.score = (node_score.score - lowest) * output_max // (highest - lowest)
        logger.debug("Normalized node score", node=node_score.name, score=node_score.score)
