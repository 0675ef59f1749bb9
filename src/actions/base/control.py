# src/actions/base/control.py

"""
Control handlers: actions whose target is another goal.

The goal manager intercepts these at admission time and applies them
directly, so they never occupy the execution slot there. The handlers are
still registered so that their parameters are validated like any other
action and so that they can be run through the executor by tooling.
"""

from __future__ import annotations

import logging

from actions.context import ActionContext
from actions.errors import ActionRuntimeError
from actions.params import GoalTargetParams, NoParams
from actions.registry import ActionHandlerBase, builtin_action
from spec.actions import SchedulerHandle
from spec.types import ActionOutcome


log = logging.getLogger(__name__)


def _scheduler(ctx: ActionContext) -> SchedulerHandle:
    if ctx.scheduler is None:
        raise ActionRuntimeError(
            "No scheduler bound to the executor", action_type=ctx.action_type
        )
    return ctx.scheduler


class _GoalTargetAction(ActionHandlerBase):
    params_model = GoalTargetParams

    def apply(self, scheduler: SchedulerHandle, goal_id: str):
        raise NotImplementedError

    def execute(self, params: GoalTargetParams, ctx: ActionContext) -> ActionOutcome:
        target = self.apply(_scheduler(ctx), params.goal_id)
        if target is None:
            log.warning("%s: goal %s not found", self.action_type, params.goal_id)
            return ActionOutcome.completed("goal_not_found", goal_id=params.goal_id, affected=False)
        return ActionOutcome.completed(goal_id=params.goal_id, affected=True)


@builtin_action
class DestroyGoalAction(_GoalTargetAction):
    """Remove a goal entirely, whatever state it is in."""

    action_type = "destroyGoal"

    def apply(self, scheduler: SchedulerHandle, goal_id: str):
        return scheduler.destroy_goal(goal_id)


@builtin_action
class PauseGoalAction(_GoalTargetAction):
    """Pause a running or queued goal."""

    action_type = "pauseGoal"

    def apply(self, scheduler: SchedulerHandle, goal_id: str):
        return scheduler.pause_goal(goal_id)


@builtin_action
class ResumeGoalAction(_GoalTargetAction):
    """Put a paused goal back into the queue."""

    action_type = "resumeGoal"

    def apply(self, scheduler: SchedulerHandle, goal_id: str):
        return scheduler.resume_goal(goal_id)


@builtin_action
class CancelGoalAction(_GoalTargetAction):
    """Stop a goal and record it as stopped."""

    action_type = "cancelGoal"

    def apply(self, scheduler: SchedulerHandle, goal_id: str):
        log.info("Attempting to cancel goal with ID: %s", goal_id)
        return scheduler.cancel_goal_by_id(goal_id)


@builtin_action
class ClearAllGoalsAction(ActionHandlerBase):
    """Drop every queued and paused goal."""

    action_type = "clearAllGoals"
    params_model = NoParams

    def execute(self, params: NoParams, ctx: ActionContext) -> ActionOutcome:
        cleared = _scheduler(ctx).clear_goals()
        return ActionOutcome.completed(cleared=cleared)
