# EventBus for monitoring events and control commands
"""
In-process pub/sub for goal-engine monitoring.

- Subscribers receive MonitoringEvent objects (JSONL log, dashboard, tests),
  optionally filtered to a set of EventTypes.
- Command handlers receive ControlCommand objects (GoalController).

Publishing happens from the goal worker thread, the executor and from
whatever thread issues control commands, so the registrations are guarded
by a lock and callbacks run on a snapshot taken under it.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, FrozenSet, Iterable, List, Optional, Tuple

from .events import ControlCommand, EventType, MonitoringEvent


log = logging.getLogger(__name__)

SubscriberFn = Callable[[MonitoringEvent], None]
CommandHandlerFn = Callable[[ControlCommand], None]

# (callback, accepted event types or None for all)
_Subscription = Tuple[SubscriberFn, Optional[FrozenSet[EventType]]]


class EventBus:
    """
    Thread-safe event/command bus.

    A failing subscriber is logged and skipped; it never stops delivery to
    the others or propagates into the publisher (usually the goal loop).
    """

    def __init__(self) -> None:
        self._subscriptions: List[_Subscription] = []
        self._cmd_handlers: List[CommandHandlerFn] = []
        self._lock = Lock()

    # --------------------------------------------------------
    # Monitoring events
    # --------------------------------------------------------

    def subscribe(
        self,
        fn: SubscriberFn,
        event_types: Optional[Iterable[EventType]] = None,
    ) -> None:
        """
        Deliver events to `fn`; only those of `event_types` when given.

        Subscribing the same callback twice replaces its filter.
        """
        wanted = frozenset(event_types) if event_types is not None else None
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s[0] != fn]
            self._subscriptions.append((fn, wanted))

    def unsubscribe(self, fn: SubscriberFn) -> None:
        """Safe to call even if `fn` is not subscribed."""
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s[0] != fn]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, event: MonitoringEvent) -> None:
        with self._lock:
            targets = [
                fn for fn, wanted in self._subscriptions
                if wanted is None or event.event_type in wanted
            ]

        for fn in targets:
            try:
                fn(event)
            except Exception:
                log.exception("Monitoring subscriber %r failed on %s", fn, event.event_type.name)

    # --------------------------------------------------------
    # Control commands
    # --------------------------------------------------------

    def subscribe_commands(self, fn: CommandHandlerFn) -> None:
        with self._lock:
            self._cmd_handlers.append(fn)

    def unsubscribe_commands(self, fn: CommandHandlerFn) -> None:
        with self._lock:
            if fn in self._cmd_handlers:
                self._cmd_handlers.remove(fn)

    def publish_command(self, cmd: ControlCommand) -> None:
        with self._lock:
            handlers = list(self._cmd_handlers)
        if not handlers:
            log.warning("No handler for control command %s", cmd.cmd.name)

        for fn in handlers:
            try:
                fn(cmd)
            except Exception:
                log.exception("Command handler %r failed on %s", fn, cmd.cmd.name)

    def clear(self) -> None:
        """Drop all subscribers and handlers (mostly for tests)."""
        with self._lock:
            self._subscriptions.clear()
            self._cmd_handlers.clear()
