# GameWorld interface definition
# src/spec/world.py

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from .types import EntityInfo, InventoryItem, Position


class GameWorld(Protocol):
    """Abstract interface for the live game session a bot is attached to.

    This is the "body" the action handlers drive. The scheduler never calls
    any of these methods itself; it only passes the handle through to
    handlers untouched.

    Blocking calls (goto, dig, craft, ...) raise on failure. Everything that
    takes real time in-game should be short enough that handlers can check
    their cancellation token between calls.
    """

    # --- perception -----------------------------------------------------

    def bot_position(self) -> Position:
        """Current position of the bot itself."""
        ...

    def bot_health(self) -> float:
        """Current bot health (0..20)."""
        ...

    def player_position(self, username: str) -> Optional[Position]:
        """Position of a visible player, or None if not in range/offline."""
        ...

    def find_blocks(
        self,
        block_names: Sequence[str],
        max_distance: float,
        count: int,
    ) -> List[Position]:
        """Up to `count` positions of blocks matching any of `block_names`."""
        ...

    def find_entity(self, name: str, max_distance: float) -> Optional[EntityInfo]:
        """Nearest entity with the given name within `max_distance`."""
        ...

    def get_entity(self, entity_id: int) -> Optional[EntityInfo]:
        """Fresh snapshot of a known entity, or None once it is gone."""
        ...

    def find_inventory_item(self, name: str) -> Optional[InventoryItem]:
        """First inventory stack with the given item name."""
        ...

    def has_recipe(self, item_name: str) -> bool:
        """Whether the bot knows a craftable recipe for `item_name`."""
        ...

    # --- movement -------------------------------------------------------

    def set_movement_goal(self, target: Position, radius: float) -> None:
        """Start (or retarget) background pathfinding towards `target`."""
        ...

    def clear_movement_goal(self) -> None:
        """Drop the current pathfinding goal and stand still."""
        ...

    def goto(self, target: Position, radius: float) -> None:
        """Walk to `target` and block until within `radius`."""
        ...

    def jump(self) -> None:
        ...

    # --- interaction ----------------------------------------------------

    def dig(self, position: Position) -> None:
        ...

    def place_block(self, block_name: str, position: Position) -> None:
        ...

    def attack(self, entity_id: int) -> None:
        ...

    def look_at(self, position: Position) -> None:
        ...

    def chat(self, message: str) -> None:
        ...

    # --- inventory ------------------------------------------------------

    def equip(self, item_name: str, slot: str) -> None:
        ...

    def unequip(self, slot: str) -> None:
        ...

    def consume(self) -> None:
        """Eat/drink whatever is currently held."""
        ...

    def toss(self, item_name: str, quantity: int) -> None:
        ...

    def craft(self, item_name: str, quantity: int) -> None:
        ...
