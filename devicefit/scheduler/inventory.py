"""
Inventory store interface.

The scheduling core never owns device inventories; it asks a store for them by
machine name. Stores signal an unanswerable lookup with InventoryLookupError
and never retry on the core's behalf.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Any

from ..errors import InventoryLookupError
from ..types import DeviceInventory


class InventoryStore(ABC):
    """Abstract base class for advertised device inventory sources."""

    @abstractmethod
    def get(self, node_name: str) -> DeviceInventory:
        """Return the current inventory of one machine.

        Raises:
            InventoryLookupError: if the machine is unknown or the store is unavailable
        """
        pass

    @abstractmethod
    def list(self) -> List[DeviceInventory]:
        """Return the current inventory of every machine in the cluster."""
        pass


class InMemoryInventoryStore(InventoryStore):
    """Inventory store backed by a dictionary, refreshed by calling ``update``."""

    def __init__(self, inventories: Iterable[DeviceInventory] = ()):
        self._inventories: Dict[str, DeviceInventory] = {}
        self._unavailable = False
        self._lock = threading.Lock()
        for inventory in inventories:
            self._inventories[inventory.node_name] = inventory

    @classmethod
    def from_mapping(cls, machines: Mapping[str, List[Mapping[str, Any]]]) -> "InMemoryInventoryStore":
        """Build a store from ``{node_name: [{count, memory, clock}, ...]}``."""
        return cls(
            DeviceInventory.from_dict(name, entries or []) for name, entries in machines.items()
        )

    def update(self, inventory: DeviceInventory):
        """Replace the stored inventory of one machine."""
        with self._lock:
            self._inventories[inventory.node_name] = inventory

    def remove(self, node_name: str):
        with self._lock:
            self._inventories.pop(node_name, None)

    def set_unavailable(self, unavailable: bool = True):
        """Make every lookup fail, as if the backing store were unreachable."""
        with self._lock:
            self._unavailable = unavailable

    def get(self, node_name: str) -> DeviceInventory:
        with self._lock:
            if self._unavailable:
                raise InventoryLookupError(node_name, "inventory store unavailable")
            try:
                return self._inventories[node_name]
            except KeyError:
                raise InventoryLookupError(node_name, "not found") from None

    def list(self) -> List[DeviceInventory]:
        with self._lock:
            if self._unavailable:
                raise InventoryLookupError("*", "inventory store unavailable")
            return list(self._inventories.values())

    def node_names(self) -> List[str]:
        with self._lock:
            return list(self._inventories)
