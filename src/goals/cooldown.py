# src/goals/cooldown.py

from __future__ import annotations

import time
from typing import Callable, Dict


Clock = Callable[[], float]


class CooldownTable:
    """
    intent -> earliest time a similar non-mergeable resubmission is accepted.

    Keyed on the raw intent text, so two textually different phrasings of
    the same request are not throttled against each other.
    """

    def __init__(self, window_s: float = 5.0, clock: Clock = time.monotonic) -> None:
        self._window_s = window_s
        self._clock = clock
        self._until: Dict[str, float] = {}

    @property
    def window_s(self) -> float:
        return self._window_s

    def start(self, intent: str, window_s: float | None = None) -> None:
        window = self._window_s if window_s is None else window_s
        self.prune()
        self._until[intent] = self._clock() + window

    def remaining(self, intent: str) -> float:
        """Seconds left in the window (0.0 when not cooling down)."""
        return max(0.0, self._until.get(intent, 0.0) - self._clock())

    def is_cooling_down(self, intent: str) -> bool:
        return self.remaining(intent) > 0.0

    def prune(self) -> None:
        """Forget intents whose window has elapsed."""
        now = self._clock()
        for intent in [k for k, until in self._until.items() if until <= now]:
            del self._until[intent]

    def __len__(self) -> int:
        return len(self._until)
