# src/actions/base/__init__.py

"""
Built-in action handlers.

Importing this module ensures that all @builtin_action decorators run and
that ActionRegistry.from_builtin() sees the implementations.
"""

from .movement import FollowPlayerAction, MoveToAction  # noqa: F401
from .collection import CollectBlockAction  # noqa: F401
from .building import BuildStructureAction  # noqa: F401
from .combat import AttackEntityAction  # noqa: F401
from .utility import JumpAction, SayAction  # noqa: F401
from .inventory import (  # noqa: F401
    CraftAction,
    DropItemsAction,
    EatAction,
    EquipAction,
    UnequipAction,
)
from .control import (  # noqa: F401
    CancelGoalAction,
    ClearAllGoalsAction,
    DestroyGoalAction,
    PauseGoalAction,
    ResumeGoalAction,
)
