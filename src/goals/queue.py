# src/goals/queue.py

from __future__ import annotations

from typing import Callable, Iterator, List, Optional

from .goal import Goal


class GoalQueue:
    """
    Priority-ordered holding area for goals that are not executing.

    Higher priority first; goals of equal priority keep their insertion
    order. Not thread-safe on its own: the GoalManager lock guards it.
    """

    def __init__(self) -> None:
        self._goals: List[Goal] = []

    def enqueue(self, goal: Goal) -> None:
        """Insert after every goal whose priority is >= goal.priority."""
        for index, queued in enumerate(self._goals):
            if goal.priority > queued.priority:
                self._goals.insert(index, goal)
                return
        self._goals.append(goal)

    def push_front(self, goal: Goal) -> None:
        """Place a goal ahead of everything else regardless of priority."""
        self._goals.insert(0, goal)

    def dequeue(self) -> Optional[Goal]:
        """Remove and return the front goal, or None when empty."""
        if not self._goals:
            return None
        return self._goals.pop(0)

    def peek(self) -> Optional[Goal]:
        return self._goals[0] if self._goals else None

    def remove_by_id(self, goal_id: str) -> Optional[Goal]:
        """Extract a goal by id out of queue order; None if not queued."""
        for index, goal in enumerate(self._goals):
            if goal.id == goal_id:
                return self._goals.pop(index)
        return None

    def get(self, goal_id: str) -> Optional[Goal]:
        for goal in self._goals:
            if goal.id == goal_id:
                return goal
        return None

    def find(self, predicate: Callable[[Goal], bool]) -> Optional[Goal]:
        """First queued goal (in dequeue order) matching `predicate`."""
        for goal in self._goals:
            if predicate(goal):
                return goal
        return None

    def clear(self) -> List[Goal]:
        dropped, self._goals = self._goals, []
        return dropped

    def snapshot(self) -> List[Goal]:
        return list(self._goals)

    def __len__(self) -> int:
        return len(self._goals)

    def __iter__(self) -> Iterator[Goal]:
        return iter(list(self._goals))

    def __contains__(self, goal: object) -> bool:
        return any(g is goal for g in self._goals)
