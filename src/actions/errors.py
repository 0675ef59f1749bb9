# src/actions/errors.py
"""
Error taxonomy for action lookup, validation and execution.

- ValidationError / UnknownActionError are raised before any handler runs
  and are never retried.
- ActionRuntimeError is raised by handlers. The goal loop treats it as
  "skip this action" unless `fatal` is set, in which case the whole goal
  fails.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ActionError(Exception):
    """Base class for all action-layer errors."""

    def __init__(self, message: str, *, action_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.action_type = action_type


class UnknownActionError(ActionError):
    """The action type is not present in the registry."""

    def __init__(self, action_type: str) -> None:
        super().__init__(f"Unknown action type: {action_type}", action_type=action_type)


class ValidationError(ActionError):
    """Malformed or missing action parameters."""

    def __init__(
        self,
        action_type: str,
        problems: List[Dict[str, Any]],
    ) -> None:
        self.problems = problems
        summary = "; ".join(
            f"{'.'.join(str(p) for p in prob.get('loc', ())) or '<root>'}: {prob.get('msg', 'invalid')}"
            for prob in problems
        )
        super().__init__(
            f"Invalid parameters for action {action_type}: {summary}",
            action_type=action_type,
        )


class ActionRuntimeError(ActionError):
    """
    Handler-internal failure (missing item, unreachable target, ...).

    Set fatal=True for conditions that make the rest of the goal pointless,
    e.g. a crafting recipe that does not exist at all.
    """

    def __init__(
        self,
        message: str,
        *,
        action_type: Optional[str] = None,
        fatal: bool = False,
    ) -> None:
        super().__init__(message, action_type=action_type)
        self.fatal = fatal
