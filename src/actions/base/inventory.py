# src/actions/base/inventory.py

"""
Inventory handlers: eat, dropItems, equip, unequip, craft.

All are one-shot. A missing item is reported as a non-fatal
ActionRuntimeError (the goal skips the action). A missing recipe is fatal:
the rest of a crafting goal cannot make sense without it.
"""

from __future__ import annotations

import logging

from actions.context import ActionContext
from actions.errors import ActionRuntimeError
from actions.params import CraftParams, DropItemsParams, EatParams, EquipParams, UnequipParams
from actions.registry import ActionHandlerBase, builtin_action
from spec.types import ActionOutcome, InventoryItem


log = logging.getLogger(__name__)


def _require_item(ctx: ActionContext, name: str) -> InventoryItem:
    item = ctx.world.find_inventory_item(name)
    if item is None:
        log.warning("%s not found in inventory", name)
        raise ActionRuntimeError(f"{name} not found in inventory", action_type=ctx.action_type)
    return item


@builtin_action
class EatAction(ActionHandlerBase):
    """Hold a food item and consume it."""

    action_type = "eat"
    params_model = EatParams

    def execute(self, params: EatParams, ctx: ActionContext) -> ActionOutcome:
        log.info("Attempting to eat %s", params.food_name)
        _require_item(ctx, params.food_name)
        ctx.world.equip(params.food_name, "mainhand")
        ctx.world.consume()
        log.info("Successfully ate %s", params.food_name)
        return ActionOutcome.completed()


@builtin_action
class DropItemsAction(ActionHandlerBase):
    """Toss a number of items of one kind."""

    action_type = "dropItems"
    params_model = DropItemsParams

    def execute(self, params: DropItemsParams, ctx: ActionContext) -> ActionOutcome:
        log.info("Attempting to drop %d %s", params.quantity, params.item_name)
        item = _require_item(ctx, params.item_name)
        quantity = min(params.quantity, item.count)
        ctx.world.toss(params.item_name, quantity)
        log.info("Successfully dropped %d %s", quantity, params.item_name)
        return ActionOutcome.completed(dropped=quantity)


@builtin_action
class EquipAction(ActionHandlerBase):
    """Move an inventory item into an equipment slot."""

    action_type = "equip"
    params_model = EquipParams

    def execute(self, params: EquipParams, ctx: ActionContext) -> ActionOutcome:
        log.info("Attempting to equip %s to %s", params.item_name, params.destination)
        _require_item(ctx, params.item_name)
        ctx.world.equip(params.item_name, params.destination)
        return ActionOutcome.completed()


@builtin_action
class UnequipAction(ActionHandlerBase):
    """Empty an equipment slot."""

    action_type = "unequip"
    params_model = UnequipParams

    def execute(self, params: UnequipParams, ctx: ActionContext) -> ActionOutcome:
        log.info("Attempting to unequip item from %s", params.destination)
        ctx.world.unequip(params.destination)
        return ActionOutcome.completed()


@builtin_action
class CraftAction(ActionHandlerBase):
    """Craft `quantity` of an item using the first known recipe."""

    action_type = "craft"
    params_model = CraftParams

    def execute(self, params: CraftParams, ctx: ActionContext) -> ActionOutcome:
        log.info("Attempting to craft %d %s", params.quantity, params.item_name)
        if not ctx.world.has_recipe(params.item_name):
            log.warning("No recipe found for %s", params.item_name)
            raise ActionRuntimeError(
                f"No recipe found for {params.item_name}",
                action_type=self.action_type,
                fatal=True,
            )
        ctx.world.craft(params.item_name, params.quantity)
        log.info("Successfully crafted %d %s", params.quantity, params.item_name)
        return ActionOutcome.completed(crafted=params.quantity)
