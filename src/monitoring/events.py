# path: src/monitoring/events.py
"""
Event and command schemas for goal-engine monitoring.

This module defines:
- MonitoringEvent (structured scheduler events)
- EventType enum
- ControlCommandType enum
- ControlCommand for human/tool-issued controls

All events are JSON-serializable via `.to_dict()` and are intended
for use with monitoring.bus.EventBus and monitoring.logger.JsonlEventLog.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted by the scheduler and executor."""

    # Admission (add_goal outcomes)
    GOAL_ADDED = auto()
    GOAL_UPDATED = auto()
    GOAL_REJECTED = auto()          # IGNORED_COOLDOWN / IGNORED_ONGOING

    # Any goal status transition (running, paused, completed, ...)
    GOAL_STATUS_CHANGED = auto()

    # Primitive execution (ActionExecutor)
    ACTION_STARTED = auto()
    ACTION_FINISHED = auto()
    ACTION_FAILED = auto()

    # Control surface events
    CONTROL_COMMAND = auto()

    # Full goal-state snapshot
    SNAPSHOT = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the goal manager, executor or control surface.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module string ("goals.manager", ...)
    event_type: EventType
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (goal summary, outcome, ...)
    correlation_id: Optional[str] = None  # Usually the goal id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name
        return data


# ============================================================
# Control Commands
# ============================================================

class ControlCommandType(Enum):
    """
    Commands that humans or tools can send to steer the goal manager.
    """

    SUBMIT_GOAL = auto()    # args: {"goal": {intent, priority, actions}}
    PAUSE_GOAL = auto()     # args: {"goal_id": ...}
    RESUME_GOAL = auto()    # args: {"goal_id": ...}
    DESTROY_GOAL = auto()   # args: {"goal_id": ...}
    CANCEL_GOAL = auto()    # args: {"goal_id": ...}
    STOP_CURRENT = auto()   # stop whatever goal is running
    CLEAR_GOALS = auto()    # drop queued and paused goals
    DUMP_STATE = auto()     # emit a SNAPSHOT event


@dataclass
class ControlCommand:
    """
    Represents an external command for the scheduler.

    Sent through EventBus.publish_command(), then interpreted by
    monitoring.controller.GoalController.
    """

    cmd: ControlCommandType
    args: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def submit_goal(goal: Dict[str, Any]) -> "ControlCommand":
        return ControlCommand(ControlCommandType.SUBMIT_GOAL, {"goal": goal})

    @staticmethod
    def pause_goal(goal_id: str) -> "ControlCommand":
        return ControlCommand(ControlCommandType.PAUSE_GOAL, {"goal_id": goal_id})

    @staticmethod
    def resume_goal(goal_id: str) -> "ControlCommand":
        return ControlCommand(ControlCommandType.RESUME_GOAL, {"goal_id": goal_id})

    @staticmethod
    def destroy_goal(goal_id: str) -> "ControlCommand":
        return ControlCommand(ControlCommandType.DESTROY_GOAL, {"goal_id": goal_id})

    @staticmethod
    def cancel_goal(goal_id: str) -> "ControlCommand":
        return ControlCommand(ControlCommandType.CANCEL_GOAL, {"goal_id": goal_id})

    @staticmethod
    def stop_current() -> "ControlCommand":
        return ControlCommand(ControlCommandType.STOP_CURRENT, {})

    @staticmethod
    def clear_goals() -> "ControlCommand":
        return ControlCommand(ControlCommandType.CLEAR_GOALS, {})

    @staticmethod
    def dump_state() -> "ControlCommand":
        return ControlCommand(ControlCommandType.DUMP_STATE, {})
