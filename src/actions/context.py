# src/actions/context.py
"""
Per-invocation context handed to action handlers.

Handlers never receive bare flags or closures over scheduler state. They get
an ActionContext with:

- world:     the opaque GameWorld handle (passed through unmodified)
- scheduler: the SchedulerHandle (only control actions use it)
- token:     a CancelToken wrapping the executor's composite stop predicate
- on_pause:  a hook to register pause/resume callbacks for this action type

Long-running handlers are expected to call `ctx.token.sleep(...)` (or check
`ctx.token.should_stop()`) at every suspension point.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from spec.actions import SchedulerHandle, ShouldStopFn


PauseCallback = Callable[[], None]


class CancelToken:
    """
    Cooperative cancellation token.

    `should_stop()` is the composite predicate built by the executor:
    external goal stop OR local interrupt OR action type paused.

    `sleep()` waits in small slices so a stop request is observed within
    `poll_interval_s` rather than at the end of a long wait.
    """

    def __init__(
        self,
        should_stop: ShouldStopFn,
        wake: Optional[threading.Event] = None,
        poll_interval_s: float = 0.05,
    ) -> None:
        self._should_stop = should_stop
        self._wake = wake if wake is not None else threading.Event()
        self._poll_interval_s = poll_interval_s

    def should_stop(self) -> bool:
        return bool(self._should_stop())

    def sleep(self, seconds: float) -> bool:
        """
        Sleep for up to `seconds`.

        Returns True if the token fired during (or before) the wait, in which
        case the caller should wind down and return a stopped outcome.
        """
        deadline = time.monotonic() + max(0.0, seconds)
        while not self.should_stop():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self._wake.wait(min(remaining, self._poll_interval_s))
        return True


@dataclass
class ActionContext:
    """Everything a handler may touch while executing one action."""

    action_type: str
    world: Any
    scheduler: Optional[SchedulerHandle]
    token: CancelToken
    register_pause_hooks: Callable[[str, PauseCallback, PauseCallback], None]

    def should_stop(self) -> bool:
        return self.token.should_stop()

    def on_pause(self, on_pause: PauseCallback, on_resume: PauseCallback) -> None:
        """
        Register callbacks run by the executor when this action type is
        paused or resumed while the handler is still live.

        Hooks are dropped automatically when the handler returns.
        """
        self.register_pause_hooks(self.action_type, on_pause, on_resume)
