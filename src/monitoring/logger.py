# JSONL event log subscribing to EventBus
"""
Structured event logging for the goal engine.

Provides:
- JsonlEventLog: subscribes to an EventBus and appends MonitoringEvents as
  JSON lines.
- log_event: convenience helper used by the manager, executor and
  controller to publish events.

Usage:

    bus = EventBus()
    event_log = JsonlEventLog(Path("logs/goal_events.jsonl"), bus)

    log_event(
        bus=bus,
        module="goals.manager",
        event_type=EventType.GOAL_ADDED,
        message="Goal added: collect wood",
        payload={"goal": goal.summary()},
        correlation_id=goal.id,
    )
"""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .bus import EventBus
from .events import EventType, MonitoringEvent


log = logging.getLogger(__name__)


class JsonlEventLog:
    """
    Append-only JSON-lines sink for MonitoringEvents.

    Writes are serialized with a lock because events arrive from the goal
    worker thread and from control callers concurrently. I/O errors are
    reported once through `logging` and then suppressed so that a full disk
    never takes the scheduler down.
    """

    def __init__(self, path: Path, bus: EventBus) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")
        self._lock = threading.Lock()
        self._write_failed = False
        self._bus = bus
        bus.subscribe(self._on_event)

    @property
    def path(self) -> Path:
        return self._path

    def _on_event(self, event: MonitoringEvent) -> None:
        line = json.dumps(event.to_dict(), ensure_ascii=False, default=str)
        with self._lock:
            if self._file.closed:
                return
            try:
                self._file.write(line + "\n")
                self._file.flush()
            except OSError:
                if not self._write_failed:
                    log.exception("Event log write to %s failed; dropping further errors", self._path)
                self._write_failed = True

    def close(self) -> None:
        """Unsubscribe and close the file. Call at shutdown."""
        self._bus.unsubscribe(self._on_event)
        with self._lock:
            if not self._file.closed:
                self._file.close()


def log_event(
    bus: EventBus,
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """
    Create and publish a MonitoringEvent.

    Parameters
    ----------
    bus:
        EventBus instance to publish the event to.
    module:
        Source module ("goals.manager", "actions.executor", ...).
    event_type:
        EventType member describing the event.
    message:
        Short human-readable description.
    payload:
        JSON-safe structured data.
    correlation_id:
        Optional id linking related events (usually the goal id).
    """
    bus.publish(
        MonitoringEvent(
            ts=time.time(),
            module=module,
            event_type=event_type,
            message=message,
            payload=payload or {},
            correlation_id=correlation_id,
        )
    )
