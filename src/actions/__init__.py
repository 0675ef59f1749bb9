# src/actions/__init__.py
"""
Action layer: parameter models, handler registry and the single-slot
executor.
"""

from .context import ActionContext, CancelToken
from .errors import ActionError, ActionRuntimeError, UnknownActionError, ValidationError
from .executor import ActionExecutor, ActionExecutorConfig
from .registry import ActionHandlerBase, ActionRegistry, builtin_action

__all__ = [
    "ActionContext",
    "CancelToken",
    "ActionError",
    "ActionRuntimeError",
    "UnknownActionError",
    "ValidationError",
    "ActionExecutor",
    "ActionExecutorConfig",
    "ActionHandlerBase",
    "ActionRegistry",
    "builtin_action",
]
