# src/goals/goal.py

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from spec.types import ActionSpec


DEFAULT_PRIORITY = 1


class GoalStatus(str, Enum):
    """Lifecycle states of a goal. Destroyed goals are dropped, not transitioned."""

    QUEUED = "queued"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"
    STOPPED = "stopped"

    @property
    def is_finished(self) -> bool:
        return self in (GoalStatus.COMPLETED, GoalStatus.FAILED, GoalStatus.STOPPED)


@dataclass(eq=False)
class Goal:
    """
    One unit of queued work: an intent label plus an ordered list of
    primitive action specs and a priority (higher is served first).

    Fields
    ------
    id:
        Opaque unique identifier, assigned at creation.
    intent:
        Free-text purpose label. Used as the cooldown key; not unique.
    actions:
        Ordered action specs. Length and order never change; only the
        parameters of the in-flight spec may be merged in place.
    priority:
        Higher value runs first; equal priorities run in submission order.
    timestamp:
        Creation time (UNIX seconds).
    status / stop_signal / is_running:
        Mutated only by the goal manager.
    next_action_index:
        Index of the next action to run. A paused goal resumes from the
        action it was interrupted in.
    """

    intent: str
    actions: List[ActionSpec]
    priority: float = DEFAULT_PRIORITY
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)
    status: GoalStatus = GoalStatus.QUEUED
    stop_signal: bool = False
    is_running: bool = False
    next_action_index: int = 0
    last_reason: Optional[str] = None
    paused_action_type: Optional[str] = None

    @classmethod
    def from_description(
        cls,
        description: Mapping[str, Any],
        default_priority: float = DEFAULT_PRIORITY,
    ) -> "Goal":
        """
        Build a goal from the intent layer's {intent, priority, actions} dict.

        Raises ValueError when the description has no usable action list.
        """
        raw_actions = description.get("actions")
        if not isinstance(raw_actions, (list, tuple)) or not raw_actions:
            raise ValueError("Goal description must contain a non-empty 'actions' list")
        actions = [
            a if isinstance(a, ActionSpec) else ActionSpec.from_mapping(a)
            for a in raw_actions
        ]
        priority = description.get("priority")
        return cls(
            intent=str(description.get("intent") or ""),
            actions=actions,
            priority=default_priority if priority is None else priority,
        )

    @property
    def first_action(self) -> Optional[ActionSpec]:
        return self.actions[0] if self.actions else None

    @property
    def action_types(self) -> List[str]:
        return [a.type for a in self.actions]

    def find_action(self, action_type: str) -> Optional[ActionSpec]:
        """First spec of the given type (the in-flight one while running)."""
        if 0 <= self.next_action_index < len(self.actions):
            current = self.actions[self.next_action_index]
            if current.type == action_type:
                return current
        for spec in self.actions:
            if spec.type == action_type:
                return spec
        return None

    def is_similar_to(
        self,
        other: "Goal",
        target_of: Callable[[ActionSpec], Any],
        is_mergeable: Callable[[str], bool],
    ) -> bool:
        """
        Two goals are similar when their action-type sequences match element
        for element and, for mergeable types, their targets match too.
        """
        if len(self.actions) != len(other.actions):
            return False
        for mine, theirs in zip(self.actions, other.actions):
            if mine.type != theirs.type:
                return False
            if is_mergeable(mine.type) and target_of(mine) != target_of(theirs):
                return False
        return True

    def summary(self) -> Dict[str, Any]:
        """JSON-safe view for logs, snapshots and prompts."""
        return {
            "id": self.id,
            "intent": self.intent,
            "priority": self.priority,
            "status": self.status.value,
            "timestamp": self.timestamp,
            "actions": [a.to_dict() for a in self.actions],
            "next_action_index": self.next_action_index,
            "last_reason": self.last_reason,
        }
