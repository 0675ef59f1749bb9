# src/actions/base/movement.py

"""
Movement handlers: followPlayer and moveTo.

followPlayer is the one mergeable kind: a resubmission for the same
username updates the in-flight parameters instead of starting a second
follow.
"""

from __future__ import annotations

import logging
import time

from actions.context import ActionContext
from actions.errors import ActionRuntimeError
from actions.params import FollowPlayerParams, MoveToParams
from actions.registry import ActionHandlerBase, builtin_action
from spec.types import ActionOutcome


log = logging.getLogger(__name__)


@builtin_action
class FollowPlayerAction(ActionHandlerBase):
    """Follow a player, optionally stopping once standing next to them."""

    action_type = "followPlayer"
    params_model = FollowPlayerParams
    merge_key = "username"

    poll_interval_s = 0.1
    follow_distance = 3.0
    near_radius = 2.0
    # Consecutive close polls required before "reached_position".
    close_checks_required = 5

    def execute(self, params: FollowPlayerParams, ctx: ActionContext) -> ActionOutcome:
        world = ctx.world
        last_seen = [world.player_position(params.username)]
        if last_seen[0] is None:
            raise ActionRuntimeError(
                f"Player {params.username} not found.", action_type=self.action_type
            )

        def reacquire() -> None:
            target = world.player_position(params.username)
            if target is None:
                target = last_seen[0]
            world.set_movement_goal(target, self.near_radius)

        infinite = params.duration == 0 or params.stop_at_player_position
        deadline = None if infinite else time.monotonic() + params.duration / 1000.0
        log.info(
            "Starting to follow player: %s for %s",
            params.username,
            "infinite" if infinite else f"{params.duration:.0f}ms",
        )

        ctx.on_pause(world.clear_movement_goal, reacquire)

        close_count = 0
        try:
            while True:
                if ctx.should_stop():
                    log.info("Stopped following player: %s", params.username)
                    return ActionOutcome.was_stopped(username=params.username)

                if deadline is not None and time.monotonic() >= deadline:
                    log.info("Follow duration expired for player: %s", params.username)
                    return ActionOutcome.completed("duration_expired")

                target = world.player_position(params.username)
                if target is not None:
                    last_seen[0] = target
                    distance = world.bot_position().distance_to(target)
                    if distance > self.follow_distance:
                        close_count = 0
                        world.set_movement_goal(target, self.near_radius)
                    elif params.stop_at_player_position:
                        close_count += 1
                        if close_count >= self.close_checks_required:
                            log.info(
                                "Reached player %s's position (distance: %.2f)",
                                params.username,
                                distance,
                            )
                            return ActionOutcome.completed("reached_position", distance=distance)
                    else:
                        close_count = 0

                ctx.token.sleep(self.poll_interval_s)
        finally:
            world.clear_movement_goal()


@builtin_action
class MoveToAction(ActionHandlerBase):
    """Walk to a fixed position and stand within `radius` of it."""

    action_type = "moveTo"
    params_model = MoveToParams

    poll_interval_s = 0.1

    def execute(self, params: MoveToParams, ctx: ActionContext) -> ActionOutcome:
        world = ctx.world
        target = params.position.to_position()
        deadline = time.monotonic() + params.timeout_ms / 1000.0

        ctx.on_pause(world.clear_movement_goal, lambda: world.set_movement_goal(target, params.radius))
        world.set_movement_goal(target, params.radius)
        try:
            while True:
                if ctx.should_stop():
                    return ActionOutcome.was_stopped(target=target.as_dict())
                distance = world.bot_position().distance_to(target)
                if distance <= params.radius:
                    log.info("Arrived at %s (distance: %.2f)", target, distance)
                    return ActionOutcome.completed("arrived", distance=distance)
                if time.monotonic() >= deadline:
                    log.warning("Timed out moving to %s", target)
                    return ActionOutcome.timed_out(distance=distance)
                ctx.token.sleep(self.poll_interval_s)
        finally:
            world.clear_movement_goal()
