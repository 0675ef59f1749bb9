# src/actions/base/building.py

from __future__ import annotations

import logging

from actions.context import ActionContext
from actions.params import BuildStructureParams
from actions.registry import ActionHandlerBase, builtin_action
from spec.types import ActionOutcome


log = logging.getLogger(__name__)


@builtin_action
class BuildStructureAction(ActionHandlerBase):
    """Place a solid cube of building blocks with one corner at `location`."""

    action_type = "buildStructure"
    params_model = BuildStructureParams

    building_block = "stone"
    size = 3

    def execute(self, params: BuildStructureParams, ctx: ActionContext) -> ActionOutcome:
        world = ctx.world
        origin = params.location.to_position()
        log.info("Building structure: %s at %s", params.structure_type, origin)

        placed = 0
        failed = 0
        for dx in range(self.size):
            for dy in range(self.size):
                for dz in range(self.size):
                    if ctx.should_stop():
                        return ActionOutcome.was_stopped(placed=placed, failed=failed)
                    pos = origin.offset(dx, dy, dz)
                    try:
                        world.place_block(self.building_block, pos)
                    except Exception as exc:
                        failed += 1
                        log.error("Failed to place block at %s: %s", pos, exc)
                        continue
                    placed += 1

        log.info("Finished building %s (%d placed, %d failed)", params.structure_type, placed, failed)
        return ActionOutcome.completed(placed=placed, failed=failed)
