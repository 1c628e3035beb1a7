# backend/arithmancy/engine/systems/inventory.py
"""
InventorySystem - Item stacks, consumption and equipment.

Consumables heal (capped at max health) and are used up one unit at a time;
an empty stack is removed. Equipment toggles on and off with no slot rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from ...logging import get_logger
from ...models import InventoryEntry, Item, ItemType
from ..errors import InvalidOperationError, NotFoundError
from ..repository import GameRepository, InventoryPatch

if TYPE_CHECKING:
    from .context import GameContext

logger = get_logger(__name__)


@dataclass
class ItemUseResult:
    item_consumed: bool
    remaining_quantity: int
    effect: str | None = None
    health_restored: int = 0


class InventorySystem:
    def __init__(self, ctx: "GameContext") -> None:
        self.ctx = ctx

    async def use_item(self, character_id: int, item_id: int) -> ItemUseResult:
        """
        Use one unit of a consumable.

        The unit is taken off the stack before health is read, so two requests
        cannot spend the same last unit and the heal cap sees current health.
        """
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id, for_update=True)
            entry = await self._get_entry(repo, character.id, item_id)
            item = entry.item

            if not item.is_consumable:
                raise InvalidOperationError("This item cannot be used", "ITEM_NOT_CONSUMABLE")

            remaining = await repo.consume_inventory_unit(entry)
            await repo.reload(character)

            effect = None
            healed = 0
            if item.type == ItemType.CONSUMABLE and item.health_bonus > 0:
                before = character.current_health
                await repo.heal_character(character, item.health_bonus)
                healed = character.current_health - before
                effect = f"Restored {healed} health" if healed > 0 else "Health is already full"

        logger.info(
            "Character %s used %s (%d left, +%d health)",
            character_id, item.name, remaining, healed,
        )
        return ItemUseResult(
            item_consumed=remaining == 0,
            remaining_quantity=remaining,
            effect=effect,
            health_restored=healed,
        )

    async def toggle_equip(self, character_id: int, item_id: int) -> InventoryEntry:
        async with self.ctx.transaction() as repo:
            await repo.require_character(character_id)
            entry = await self._get_entry(repo, character_id, item_id)
            if entry.item.type != ItemType.EQUIPMENT:
                raise InvalidOperationError("This item cannot be equipped", "ITEM_NOT_EQUIPMENT")
            await repo.update_inventory_entry(
                entry, InventoryPatch(is_equipped=not entry.is_equipped)
            )

        logger.debug(
            "Character %s %s item %s",
            character_id, "equipped" if entry.is_equipped else "unequipped", item_id,
        )
        return entry

    async def add_item(self, character_id: int, item_id: int, quantity: int = 1) -> InventoryEntry:
        if quantity < 1:
            raise InvalidOperationError("Quantity must be at least 1", "INVALID_QUANTITY")
        async with self.ctx.transaction() as repo:
            await repo.require_character(character_id)
            item = await repo.get_item(item_id)
            if item is None:
                raise NotFoundError("Item not found", "ITEM_NOT_FOUND")
            return await repo.add_to_inventory(character_id, item, quantity)

    async def catalog(self) -> List[Item]:
        """Tradeable items, cheapest first."""
        async with self.ctx.transaction() as repo:
            return await repo.tradeable_items()

    async def inventory(self, character_id: int) -> List[InventoryEntry]:
        async with self.ctx.transaction() as repo:
            await repo.require_character(character_id)
            return await repo.inventory(character_id)

    async def equipped_items(self, character_id: int) -> List[InventoryEntry]:
        async with self.ctx.transaction() as repo:
            await repo.require_character(character_id)
            return await repo.inventory(character_id, equipped_only=True)

    # ---------- Helpers ----------

    async def _get_entry(self, repo: GameRepository, character_id: int, item_id: int) -> InventoryEntry:
        entry = await repo.get_inventory_entry(character_id, item_id, for_update=True)
        if entry is None:
            raise NotFoundError("Item not found in inventory", "ITEM_NOT_IN_INVENTORY")
        return entry
