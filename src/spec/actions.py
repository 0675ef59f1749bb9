from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Protocol, Type

from pydantic import BaseModel

from .types import ActionOutcome


ShouldStopFn = Callable[[], bool]


class SchedulerHandle(Protocol):
    """
    The subset of the goal manager that action handlers may call back into.

    Only control-type handlers (destroyGoal, pauseGoal, ...) use this; normal
    primitives never touch the scheduler.
    """

    def destroy_goal(self, goal_id: str) -> Any:
        ...

    def pause_goal(self, goal_id: str) -> Any:
        ...

    def resume_goal(self, goal_id: str) -> Any:
        ...

    def cancel_goal_by_id(self, goal_id: str) -> Any:
        ...

    def clear_goals(self) -> int:
        ...


class ActionHandler(Protocol):
    """A single primitive operation kind."""

    @property
    def action_type(self) -> str:
        """Wire identifier used in goal action specs (e.g. "followPlayer")."""
        ...

    @property
    def params_model(self) -> Type[BaseModel]:
        """Pydantic model used to validate and normalize raw parameters."""
        ...

    @property
    def merge_key(self) -> Optional[str]:
        """
        Name of the target parameter for mergeable action kinds, or None.

        Two requests of a mergeable kind with equal target values are
        treated as one continuing unit of work.
        """
        ...

    def describe(self) -> Dict[str, Any]:
        """
        Return metadata for prompting layers, for example:
        {
            "type": "collectBlock",
            "description": "Collect blocks of a given type nearby.",
            "parameters": {...json schema...},
            "mergeable": False,
        }
        """
        ...

    def execute(self, params: BaseModel, ctx: Any) -> Optional[ActionOutcome]:
        """
        Run the operation against ctx.world until done or ctx.token says stop.

        Returning None is treated as a plain successful completion.
        """
        ...


class ActionCatalog(Protocol):
    """Central lookup of available action handlers."""

    def list_actions(self) -> List[str]:
        ...

    def get(self, action_type: str) -> Optional[ActionHandler]:
        ...

    def describe_all(self) -> Dict[str, Dict[str, Any]]:
        ...
