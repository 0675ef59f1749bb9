# src/actions/base/collection.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from actions.context import ActionContext
from actions.params import CollectBlockParams
from actions.registry import ActionHandlerBase, builtin_action
from spec.types import ActionOutcome


log = logging.getLogger(__name__)


# General terms the intent layer uses -> concrete block names.
DEFAULT_BLOCK_ALIASES: Dict[str, List[str]] = {
    "wood": ["oak_log", "birch_log", "spruce_log", "jungle_log", "acacia_log", "dark_oak_log"],
    "dirt": ["dirt", "grass_block", "podzol"],
    "stone": ["stone", "cobblestone", "granite", "diorite", "andesite"],
    "sand": ["sand", "red_sand"],
    "gravel": ["gravel"],
}


@builtin_action
class CollectBlockAction(ActionHandlerBase):
    """
    Mine up to `quantity` blocks of a kind.

    `blockType` is expanded through the alias table ("wood" -> every log
    variant); each concrete variant is searched in turn until enough blocks
    have been dug. Individual dig failures are logged and skipped. Finding
    nothing is a normal outcome with collected=0, not an error.
    """

    action_type = "collectBlock"
    params_model = CollectBlockParams

    max_distance = 32.0

    def __init__(self, block_aliases: Optional[Mapping[str, List[str]]] = None) -> None:
        self.block_aliases: Dict[str, List[str]] = dict(DEFAULT_BLOCK_ALIASES)
        if block_aliases:
            self.block_aliases.update({k: list(v) for k, v in block_aliases.items()})

    @classmethod
    def from_config(cls, options: Mapping[str, Any]) -> "CollectBlockAction":
        return cls(block_aliases=options.get("block_aliases"))

    def expand(self, block_type: str) -> List[str]:
        return self.block_aliases.get(block_type, [block_type])

    def execute(self, params: CollectBlockParams, ctx: ActionContext) -> ActionOutcome:
        world = ctx.world
        wanted = params.quantity
        collected = 0

        for variant in self.expand(params.block_type):
            if ctx.should_stop():
                log.info("Stopping block collection as requested.")
                return ActionOutcome.was_stopped(collected=collected)

            positions = world.find_blocks([variant], self.max_distance, wanted - collected)
            if not positions:
                log.info("No %s blocks found nearby. Trying next type if available.", variant)
                continue
            log.info("Found %d %s blocks. Collecting...", len(positions), variant)

            for pos in positions:
                if ctx.should_stop():
                    log.info("Stopping block collection as requested.")
                    return ActionOutcome.was_stopped(collected=collected)
                if collected >= wanted:
                    break
                try:
                    world.goto(pos, 1.0)
                    world.dig(pos)
                except Exception as exc:
                    log.error("Failed to collect %s at %s: %s", variant, pos, exc)
                    continue
                collected += 1
                log.info("Collected %s (%d/%d)", variant, collected, wanted)

            if collected >= wanted:
                break

        if collected == 0:
            log.warning("No %s blocks found nearby.", params.block_type)
        elif collected < wanted:
            log.info(
                "Partially completed %s collection. Collected %d/%d",
                params.block_type,
                collected,
                wanted,
            )
        else:
            log.info("Finished collecting %s", params.block_type)
        return ActionOutcome.completed(collected=collected)
