# src/actions/base/utility.py

from __future__ import annotations

import logging

from actions.context import ActionContext
from actions.params import NoParams, SayParams
from actions.registry import ActionHandlerBase, builtin_action
from spec.types import ActionOutcome


log = logging.getLogger(__name__)


@builtin_action
class SayAction(ActionHandlerBase):
    """Send a chat message."""

    action_type = "say"
    params_model = SayParams

    def execute(self, params: SayParams, ctx: ActionContext) -> ActionOutcome:
        log.info("Bot saying: %s", params.message)
        ctx.world.chat(params.message)
        return ActionOutcome.completed()


@builtin_action
class JumpAction(ActionHandlerBase):
    action_type = "jump"
    params_model = NoParams
    description = "Jump once in place."

    def execute(self, params: NoParams, ctx: ActionContext) -> ActionOutcome:
        ctx.world.jump()
        return ActionOutcome.completed()
