"""Combat-facing repositories.

The propagator and the session engine only talk to these protocols; the
in-memory implementations below back the HTTP app, the CLI and the tests.
Persistence proper (save files, browser storage) belongs to the caller.
"""
from __future__ import annotations

import copy
import logging
from typing import Dict, Iterable, List, Optional, Protocol

from .models.character import Familiar, InventoryItem

logger = logging.getLogger(__name__)


class FamiliarRepository(Protocol):
    def load_familiar(self, familiar_id: str) -> Optional[Familiar]: ...

    def save_familiar(self, familiar: Familiar) -> None: ...

    def list_familiars(self) -> List[Familiar]: ...


class InventoryRepository(Protocol):
    def load_inventory(self) -> List[InventoryItem]: ...

    def save_inventory(self, items: List[InventoryItem]) -> None: ...


class LocationOwnership(Protocol):
    """Collaborator that owns territory ownership changes."""

    def change_owner(self, location_id: str, new_owner_id: str) -> None: ...

    def location_name(self, location_id: str) -> Optional[str]: ...


# ------------------------------------------------------------------
# In-memory implementations
# ------------------------------------------------------------------


class InMemoryFamiliarRepository:
    """Familiars keyed by id; returns copies so callers must save explicitly."""

    def __init__(self, familiars: Optional[Iterable[Familiar]] = None) -> None:
        self._familiars: Dict[str, Familiar] = {}
        for familiar in familiars or []:
            self._familiars[familiar.id] = copy.deepcopy(familiar)

    def load_familiar(self, familiar_id: str) -> Optional[Familiar]:
        familiar = self._familiars.get(familiar_id)
        return copy.deepcopy(familiar) if familiar else None

    def save_familiar(self, familiar: Familiar) -> None:
        if familiar.is_active:
            # only one familiar may be active
            for other in self._familiars.values():
                if other.id != familiar.id:
                    other.is_active = False
        self._familiars[familiar.id] = copy.deepcopy(familiar)

    def list_familiars(self) -> List[Familiar]:
        return [copy.deepcopy(f) for f in self._familiars.values()]


class InMemoryInventoryRepository:
    def __init__(self, items: Optional[Iterable[InventoryItem]] = None) -> None:
        self._items: List[InventoryItem] = copy.deepcopy(list(items or []))

    def load_inventory(self) -> List[InventoryItem]:
        return copy.deepcopy(self._items)

    def save_inventory(self, items: List[InventoryItem]) -> None:
        self._items = copy.deepcopy(list(items))


class InMemoryLocationRegistry:
    """Location names and current owners."""

    def __init__(
        self,
        names: Optional[Dict[str, str]] = None,
        owners: Optional[Dict[str, str]] = None,
    ) -> None:
        self.names: Dict[str, str] = dict(names or {})
        self.owners: Dict[str, str] = dict(owners or {})

    def change_owner(self, location_id: str, new_owner_id: str) -> None:
        previous = self.owners.get(location_id)
        self.owners[location_id] = new_owner_id
        logger.info("location %s: owner %s -> %s", location_id, previous, new_owner_id)

    def location_name(self, location_id: str) -> Optional[str]:
        return self.names.get(location_id)


def add_item_to_inventory(items: List[InventoryItem], item: InventoryItem) -> List[InventoryItem]:
    """Stack onto an existing entry with the same id, otherwise append.

    A grant always counts for at least one unit.
    """
    quantity = max(1, item.quantity)
    result = [copy.copy(i) for i in items]
    for existing in result:
        if existing.id == item.id:
            existing.quantity += quantity
            return result
    added = copy.deepcopy(item)
    added.quantity = quantity
    result.append(added)
    return result
