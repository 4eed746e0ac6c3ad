"""
Status values returned to the orchestration runtime.

Mirrors the result codes of a scheduling framework's extension points so the
runtime can tell a machine that does not fit apart from one whose inventory
could not be read.
"""

from dataclasses import dataclass
from enum import Enum, auto


class StatusCode(Enum):
    """Result of one extension point call."""

    SUCCESS = auto()  # Machine fits / step completed
    UNSCHEDULABLE = auto()  # Machine answered but cannot satisfy the request
    LOOKUP_FAILED = auto()  # Machine inventory could not be read
    ERROR = auto()  # Internal failure, fatal to the cycle


@dataclass(frozen=True)
class Status:
    code: StatusCode = StatusCode.SUCCESS
    reason: str = ""

    @classmethod
    def success(cls) -> "Status":
        return cls(StatusCode.SUCCESS)

    @classmethod
    def unschedulable(cls, reason: str) -> "Status":
        return cls(StatusCode.UNSCHEDULABLE, reason)

    @classmethod
    def lookup_failed(cls, reason: str) -> "Status":
        return cls(StatusCode.LOOKUP_FAILED, reason)

    @classmethod
    def error(cls, reason: str) -> "Status":
        return cls(StatusCode.ERROR, reason)

    def is_success(self) -> bool:
        return self.code is StatusCode.SUCCESS

    def is_unschedulable(self) -> bool:
        """True for both an infeasible machine and a failed inventory lookup."""
        return self.code in (StatusCode.UNSCHEDULABLE, StatusCode.LOOKUP_FAILED)

    def __str__(self) -> str:
        if self.reason:
            return f"{self.code.name}: {self.reason}"
        return self.code.name
