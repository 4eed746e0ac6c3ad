"""
Per-cycle shared state.

A CycleState is created for each workload's scheduling cycle, written once by
the maxima collection step and read by every score call of the same cycle.
"""

import threading
import uuid
from typing import Dict, Mapping, Optional

from ..errors import AggregationMissingError
from ..types import Dimension


class CycleState:
    """Dimension maxima for one scheduling cycle."""

    def __init__(self, workload: Optional[str] = None, cycle_id: Optional[str] = None):
        self.workload = workload
        self.cycle_id = cycle_id or str(uuid.uuid4())[:8]
        self._maxima: Dict[Dimension, int] = {}
        self._lock = threading.Lock()

    def write(self, dimension: Dimension, value: int):
        """Record the maximum for one dimension, replacing any earlier value."""
        with self._lock:
            self._maxima[Dimension(dimension)] = value

    def write_all(self, maxima: Mapping[Dimension, int]):
        """Replace the maxima for several dimensions in one step."""
        with self._lock:
            for dimension, value in maxima.items():
                self._maxima[Dimension(dimension)] = value

    def read(self, dimension: Dimension) -> int:
        """Return the recorded maximum, raising if the collection step never ran."""
        with self._lock:
            try:
                return self._maxima[Dimension(dimension)]
            except KeyError:
                raise AggregationMissingError(
                    Dimension(dimension).value, cycle_id=self.cycle_id
                ) from None

    def has(self, dimension: Dimension) -> bool:
        with self._lock:
            return Dimension(dimension) in self._maxima

    def snapshot(self) -> Dict[Dimension, int]:
        """Return a copy of the recorded maxima."""
        with self._lock:
            return dict(self._maxima)

    def __repr__(self) -> str:
        maxima = {d.value: v for d, v in self.snapshot().items()}
        return f"CycleState(cycle_id={self.cycle_id!r}, workload={self.workload!r}, maxima={maxima})"
