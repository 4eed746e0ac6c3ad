"""
Core Type Definitions for devicefit

This module defines the data types shared by the scheduling core: advertised
device inventories, parsed resource requests, pending workloads and node
scores.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .errors import ValidationError

# Workload labels carrying the device request
LABEL_NUMBER = "devicefit/number"
LABEL_MEMORY = "devicefit/memory"
LABEL_CLOCK = "devicefit/clock"
LABEL_PRIORITY = "devicefit/priority"


class Dimension(str, Enum):
    """Resource dimensions tracked per scheduling cycle."""

    COUNT = "device-count"
    MEMORY = "memory"
    CLOCK = "clock"


@dataclass(frozen=True)
class Device:
    """One device entry advertised by a machine."""

    count: int  # Free units of this device type
    memory_per_unit: int  # MiB per unit
    clock_per_unit: int  # MHz per unit
    healthy: bool = True

    def __post_init__(self):
        """Validate device entry."""
        if self.count < 0:
            raise ValueError("count cannot be negative")

        if self.memory_per_unit < 0:
            raise ValueError("memory_per_unit cannot be negative")

        if self.clock_per_unit < 0:
            raise ValueError("clock_per_unit cannot be negative")

    def value(self, dimension: Dimension) -> int:
        """Return this entry's value along a resource dimension."""
        if dimension is Dimension.COUNT:
            return self.count
        if dimension is Dimension.MEMORY:
            return self.memory_per_unit
        return self.clock_per_unit


@dataclass(frozen=True)
class DeviceInventory:
    """A machine's advertised device state, as returned by the inventory store."""

    node_name: str
    devices: List[Device] = field(default_factory=list)

    def __post_init__(self):
        if not self.node_name:
            raise ValueError("node_name cannot be empty")

    @classmethod
    def from_dict(cls, node_name: str, entries: List[Mapping[str, Any]]) -> "DeviceInventory":
        """Build an inventory from plain mappings with count/memory/clock keys."""
        devices = [
            Device(
                count=int(entry.get("count", 0)),
                memory_per_unit=int(entry.get("memory", 0)),
                clock_per_unit=int(entry.get("clock", 0)),
                healthy=bool(entry.get("healthy", True)),
            )
            for entry in entries
        ]
        return cls(node_name=node_name, devices=devices)

    def to_dict(self) -> Dict[str, Any]:
        """Convert inventory to dictionary representation."""
        return {
            "node_name": self.node_name,
            "devices": [
                {
                    "count": d.count,
                    "memory": d.memory_per_unit,
                    "clock": d.clock_per_unit,
                    "healthy": d.healthy,
                }
                for d in self.devices
            ],
        }


def _parse_label(labels: Mapping[str, str], key: str, default: int) -> int:
    raw = labels.get(key)
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ValidationError(key, raw, "must be an integer")
    if value < 0:
        raise ValidationError(key, raw, "must be non-negative")
    return value


@dataclass(frozen=True)
class ResourceRequest:
    """Device requirements of one workload."""

    count: int = 1
    memory_per_unit: int = 0
    clock_per_unit: int = 0

    def __post_init__(self):
        """Validate resource request."""
        if self.count < 0:
            raise ValueError("count cannot be negative")

        if self.memory_per_unit < 0:
            raise ValueError("memory_per_unit cannot be negative")

        if self.clock_per_unit < 0:
            raise ValueError("clock_per_unit cannot be negative")

    @classmethod
    def from_labels(cls, labels: Mapping[str, str]) -> "ResourceRequest":
        """Parse a request from workload labels, defaulting to one device."""
        return cls(
            count=_parse_label(labels, LABEL_NUMBER, 1),
            memory_per_unit=_parse_label(labels, LABEL_MEMORY, 0),
            clock_per_unit=_parse_label(labels, LABEL_CLOCK, 0),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "count": self.count,
            "memory": self.memory_per_unit,
            "clock": self.clock_per_unit,
        }


@dataclass(frozen=True)
class Workload:
    """A pending submission waiting to be matched to a machine."""

    name: str
    request: ResourceRequest = field(default_factory=ResourceRequest)
    namespace: str = "default"
    uid: str = field(default_factory=lambda: str(uuid.uuid4()))
    priority: int = 0  # Higher numbers = scheduled first
    created_at: datetime = field(default_factory=datetime.utcnow)
    labels: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not self.name:
            raise ValueError("name cannot be empty")

        # created_at is stored as naive UTC
        if self.created_at.tzinfo is not None:
            naive = self.created_at.astimezone(timezone.utc).replace(tzinfo=None)
            object.__setattr__(self, "created_at", naive)

    @classmethod
    def from_labels(
        cls,
        name: str,
        labels: Mapping[str, str],
        namespace: str = "default",
        uid: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "Workload":
        """Create a workload whose request and priority come from its labels."""
        priority_raw = labels.get(LABEL_PRIORITY)
        try:
            priority = int(str(priority_raw).strip()) if priority_raw is not None else 0
        except ValueError:
            raise ValidationError(LABEL_PRIORITY, priority_raw, "must be an integer")

        return cls(
            name=name,
            request=ResourceRequest.from_labels(labels),
            namespace=namespace,
            uid=uid or str(uuid.uuid4()),
            priority=priority,
            created_at=created_at or datetime.utcnow(),
            labels=dict(labels),
        )

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert workload to dictionary representation."""
        return {
            "name": self.name,
            "namespace": self.namespace,
            "uid": self.uid,
            "priority": self.priority,
            "created_at": self.created_at.isoformat(),
            "request": self.request.to_dict(),
        }


@dataclass
class NodeScore:
    """Score of one machine for the workload being scheduled."""

    name: str
    score: int


# Type aliases for convenience
NodeName = str
