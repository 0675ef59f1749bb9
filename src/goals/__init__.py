# src/goals/__init__.py

from .cooldown import CooldownTable
from .goal import Goal, GoalStatus
from .manager import (
    CONTROL_ACTION_TYPES,
    ControlResult,
    GoalAddOutcome,
    GoalAddResult,
    GoalManager,
    GoalManagerConfig,
)
from .queue import GoalQueue

__all__ = [
    "CooldownTable",
    "Goal",
    "GoalStatus",
    "GoalQueue",
    "CONTROL_ACTION_TYPES",
    "ControlResult",
    "GoalAddOutcome",
    "GoalAddResult",
    "GoalManager",
    "GoalManagerConfig",
]
