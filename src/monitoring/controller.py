# GoalController linking control commands to the GoalManager
# src/monitoring/controller.py
"""
Control surface for the goal engine.

GoalController wraps a GoalManager-like object and exposes safe external
control via ControlCommand messages on the EventBus.

Supported commands (ControlCommandType):
- SUBMIT_GOAL   -> manager.add_goal(goal description)
- PAUSE_GOAL    -> manager.pause_goal(goal_id)
- RESUME_GOAL   -> manager.resume_goal(goal_id)
- DESTROY_GOAL  -> manager.destroy_goal(goal_id)
- CANCEL_GOAL   -> manager.cancel_goal_by_id(goal_id)
- STOP_CURRENT  -> manager.stop_current_goal()
- CLEAR_GOALS   -> manager.clear_goals()
- DUMP_STATE    -> emit manager.get_goal_state() as a SNAPSHOT event
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

from actions.errors import ActionError

from .bus import EventBus
from .events import (
    ControlCommand,
    ControlCommandType,
    EventType,
)
from .logger import log_event


log = logging.getLogger(__name__)


# ============================================================
# Manager interface expected by the controller
# ============================================================

class GoalManagerControl(Protocol):
    """
    Minimal protocol describing what the controller expects from the
    goal manager.
    """

    def add_goal(self, description: Mapping[str, Any]) -> Any:
        ...

    def pause_goal(self, goal_id: str) -> Any:
        ...

    def resume_goal(self, goal_id: str) -> Any:
        ...

    def destroy_goal(self, goal_id: str) -> Any:
        ...

    def cancel_goal_by_id(self, goal_id: str) -> Any:
        ...

    def stop_current_goal(self) -> Any:
        ...

    def clear_goals(self) -> int:
        ...

    def get_goal_state(self) -> Dict[str, Any]:
        """JSON-serializable snapshot of the scheduler."""
        ...


# ============================================================
# Goal Controller
# ============================================================

class GoalController:
    """
    Control surface for the GoalManager.

    - Listens for ControlCommand instances on the EventBus.
    - Forwards each command to the manager.
    - Emits a CONTROL_COMMAND event per handled command (with the result)
      and a SNAPSHOT event on DUMP_STATE.

    Rejected submissions (unknown action type, bad parameters) are logged
    and reported in the CONTROL_COMMAND payload; they never propagate
    into the bus.
    """

    def __init__(self, manager: GoalManagerControl, bus: EventBus) -> None:
        self._manager = manager
        self._bus = bus
        self._history: List[Dict[str, Any]] = []

        self._bus.subscribe_commands(self._handle_command)

    def close(self) -> None:
        self._bus.unsubscribe_commands(self._handle_command)

    # --------------------------------------------------------
    # Command handling
    # --------------------------------------------------------

    def _handle_command(self, cmd: ControlCommand) -> None:
        """
        Process an incoming ControlCommand from dashboards, CLIs, or scripts.
        """
        goal_id = cmd.args.get("goal_id", "")

        if cmd.cmd == ControlCommandType.SUBMIT_GOAL:
            self._submit(cmd.args.get("goal") or {})

        elif cmd.cmd == ControlCommandType.PAUSE_GOAL:
            goal = self._manager.pause_goal(goal_id)
            self._log_control("PAUSE_GOAL", {"goal_id": goal_id, "found": goal is not None})

        elif cmd.cmd == ControlCommandType.RESUME_GOAL:
            goal = self._manager.resume_goal(goal_id)
            self._log_control("RESUME_GOAL", {"goal_id": goal_id, "found": goal is not None})

        elif cmd.cmd == ControlCommandType.DESTROY_GOAL:
            goal = self._manager.destroy_goal(goal_id)
            self._log_control("DESTROY_GOAL", {"goal_id": goal_id, "found": goal is not None})

        elif cmd.cmd == ControlCommandType.CANCEL_GOAL:
            goal = self._manager.cancel_goal_by_id(goal_id)
            self._log_control("CANCEL_GOAL", {"goal_id": goal_id, "found": goal is not None})

        elif cmd.cmd == ControlCommandType.STOP_CURRENT:
            goal = self._manager.stop_current_goal()
            self._log_control("STOP_CURRENT", {"goal_id": getattr(goal, "id", None)})

        elif cmd.cmd == ControlCommandType.CLEAR_GOALS:
            cleared = self._manager.clear_goals()
            self._log_control("CLEAR_GOALS", {"cleared": cleared})

        elif cmd.cmd == ControlCommandType.DUMP_STATE:
            self._log_snapshot(self._manager.get_goal_state())

    def _submit(self, description: Mapping[str, Any]) -> None:
        try:
            result = self._manager.add_goal(description)
        except (ActionError, ValueError) as exc:
            log.warning("Rejected goal submission %r: %s", description.get("intent"), exc)
            self._log_control("SUBMIT_GOAL", {"accepted": False, "error": str(exc)})
            return

        outcome = getattr(result, "outcome", None)
        goal = getattr(result, "goal", None)
        self._log_control(
            "SUBMIT_GOAL",
            {
                "accepted": True,
                "outcome": getattr(outcome, "value", outcome),
                "goal_id": getattr(goal, "id", None),
            },
        )

    # --------------------------------------------------------
    # Introspection helpers (for tests / tooling)
    # --------------------------------------------------------

    @property
    def history(self) -> List[Dict[str, Any]]:
        """Payloads of every CONTROL_COMMAND event emitted so far."""
        return list(self._history)

    @property
    def last_command(self) -> Optional[Dict[str, Any]]:
        return self._history[-1] if self._history else None

    # --------------------------------------------------------
    # Logging helpers
    # --------------------------------------------------------

    def _log_control(self, cmd_name: str, payload: Dict[str, Any]) -> None:
        """
        Emit a CONTROL_COMMAND monitoring event describing a control action.
        """
        record = {"cmd": cmd_name, **payload}
        self._history.append(record)
        log_event(
            bus=self._bus,
            module="monitoring.controller",
            event_type=EventType.CONTROL_COMMAND,
            message=f"Control command: {cmd_name}",
            payload=record,
            correlation_id=payload.get("goal_id"),
        )

    def _log_snapshot(self, state: Dict[str, Any]) -> None:
        """
        Emit a SNAPSHOT monitoring event containing the goal state.
        """
        log_event(
            bus=self._bus,
            module="monitoring.controller",
            event_type=EventType.SNAPSHOT,
            message="Goal state snapshot",
            payload={"state": state},
            correlation_id=None,
        )
