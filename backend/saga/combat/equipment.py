"""
装备栏位管理

Equip / unequip return fresh copies of the loadout and inventory; the caller
stores them and recomputes effective stats.
"""
import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .models.character import EquipmentSlot, InventoryItem

logger = logging.getLogger(__name__)

Loadout = Dict[EquipmentSlot, Optional[str]]


def empty_loadout() -> Loadout:
    return {slot: None for slot in EquipmentSlot}


def equipped_items(
    loadout: Mapping[EquipmentSlot, Optional[str]], inventory: Sequence[InventoryItem]
) -> Dict[EquipmentSlot, InventoryItem]:
    """Resolve slot -> item id into slot -> item, skipping dangling ids."""
    by_id = {item.id: item for item in inventory}
    resolved: Dict[EquipmentSlot, InventoryItem] = {}
    for slot, item_id in loadout.items():
        if item_id and item_id in by_id:
            resolved[EquipmentSlot(slot)] = by_id[item_id]
    return resolved


def equip_item(
    loadout: Mapping[EquipmentSlot, Optional[str]],
    inventory: Sequence[InventoryItem],
    item_id: str,
) -> Tuple[Loadout, List[InventoryItem]]:
    """
    装备物品

    The item goes into the slot matching its type; whatever occupied that
    slot is unequipped. Unknown, non-equippable or exhausted items leave
    everything unchanged.
    """
    new_loadout: Loadout = {**empty_loadout(), **dict(loadout)}
    new_inventory = [replace(item) for item in inventory]

    item = next((i for i in new_inventory if i.id == item_id), None)
    if item is None or item.quantity <= 0:
        logger.warning("Cannot equip %s: not in inventory", item_id)
        return new_loadout, new_inventory
    slot = item.slot
    if slot is None:
        logger.warning("Cannot equip %s: %s items have no slot", item_id, item.item_type.value)
        return new_loadout, new_inventory

    previous_id = new_loadout.get(slot)
    if previous_id and previous_id != item.id:
        for other in new_inventory:
            if other.id == previous_id:
                other.is_equipped = False

    new_loadout[slot] = item.id
    item.is_equipped = True
    return new_loadout, new_inventory


def unequip_slot(
    loadout: Mapping[EquipmentSlot, Optional[str]],
    inventory: Sequence[InventoryItem],
    slot: EquipmentSlot,
) -> Tuple[Loadout, List[InventoryItem]]:
    """卸下栏位中的装备（空栏位时不做任何事）"""
    new_loadout: Loadout = {**empty_loadout(), **dict(loadout)}
    new_inventory = [replace(item) for item in inventory]

    item_id = new_loadout.get(slot)
    if not item_id:
        return new_loadout, new_inventory

    new_loadout[slot] = None
    for item in new_inventory:
        if item.id == item_id:
            item.is_equipped = False
    return new_loadout, new_inventory
