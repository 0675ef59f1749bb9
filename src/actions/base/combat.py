# src/actions/base/combat.py

from __future__ import annotations

import logging
import time
from typing import Optional

from actions.context import ActionContext
from actions.params import AttackEntityParams
from actions.registry import ActionHandlerBase, builtin_action
from spec.types import ActionOutcome, EntityInfo


log = logging.getLogger(__name__)


@builtin_action
class AttackEntityAction(ActionHandlerBase):
    """
    Search for the nearest entity of a kind and attack it until it dies.

    Phases:
      1. search (up to search_timeout_s, polling every search_interval_s)
         and walk into melee range
      2. attack every attack_interval_s until the target is gone, the bot's
         health drops to low_health_threshold, or attack_timeout_s passes
    """

    action_type = "attackEntity"
    params_model = AttackEntityParams

    search_radius = 32.0
    search_timeout_s = 30.0
    search_interval_s = 1.0
    attack_interval_s = 1.0
    attack_timeout_s = 120.0
    melee_range = 3.0
    low_health_threshold = 5.0

    def execute(self, params: AttackEntityParams, ctx: ActionContext) -> ActionOutcome:
        world = ctx.world
        log.info("Searching for %s to attack", params.entity_type)

        target = self._search(params.entity_type, ctx)
        if ctx.should_stop():
            log.info("Stopping entity search as requested")
            return ActionOutcome.was_stopped(entity_type=params.entity_type)
        if target is None:
            log.warning("No %s found within search time", params.entity_type)
            return ActionOutcome.gave_up("entity_not_found")

        log.info("Attacking %s", params.entity_type)
        deadline = time.monotonic() + self.attack_timeout_s
        while True:
            if ctx.should_stop():
                log.info("Stopped attacking %s as requested", params.entity_type)
                return ActionOutcome.was_stopped(entity_type=params.entity_type)

            current = world.get_entity(target.id)
            if current is None or not current.valid or current.health <= 0:
                log.info("%s defeated", params.entity_type)
                return ActionOutcome.completed("entity_defeated")

            if world.bot_health() <= self.low_health_threshold:
                log.warning("Stopping attack due to low health")
                return ActionOutcome.gave_up("low_health")

            if time.monotonic() >= deadline:
                log.warning("Timeout while attacking %s", params.entity_type)
                return ActionOutcome.timed_out()

            if world.bot_position().distance_to(current.position) <= self.melee_range:
                world.attack(current.id)
            else:
                aim = current.position.offset(0, current.height, 0)
                world.look_at(aim)
                world.set_movement_goal(aim, self.melee_range)

            ctx.token.sleep(self.attack_interval_s)

    def _search(self, entity_type: str, ctx: ActionContext) -> Optional[EntityInfo]:
        world = ctx.world
        deadline = time.monotonic() + self.search_timeout_s
        while time.monotonic() < deadline:
            if ctx.should_stop():
                return None
            target = world.find_entity(entity_type, self.search_radius)
            if target is None:
                ctx.token.sleep(self.search_interval_s)
                continue
            log.info("Found %s at %s. Moving closer.", entity_type, target.position)
            try:
                world.goto(target.position, self.melee_range)
            except Exception as exc:
                log.warning("Failed to reach %s: %s", entity_type, exc)
                ctx.token.sleep(self.search_interval_s)
                continue
            return target
        return None
