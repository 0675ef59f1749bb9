# rich-based TUI dashboard
# src/monitoring/dashboard_tui.py
"""
TUI dashboard for the goal engine.

A lightweight terminal UI (using `rich`) that subscribes to the monitoring
EventBus and renders:

- Scheduler status:
    - Current goal (intent, id, priority)
    - Queue length / paused count
    - Ongoing action type

- Recent goals:
    - Last finished goals with their final status

- Actions:
    - Last action outcome
    - Last action failure (if any)

This runs entirely offline. No web server, no external services.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bus import EventBus
from .events import EventType, MonitoringEvent


_FINISHED = ("completed", "failed", "stopped")

_HANDLED_EVENTS = (
    EventType.GOAL_ADDED,
    EventType.GOAL_UPDATED,
    EventType.GOAL_REJECTED,
    EventType.GOAL_STATUS_CHANGED,
    EventType.ACTION_STARTED,
    EventType.ACTION_FINISHED,
    EventType.ACTION_FAILED,
)

_STATUS_STYLES = {
    "queued": "white",
    "running": "cyan",
    "paused": "yellow",
    "completed": "green",
    "failed": "red",
    "stopped": "magenta",
}


# ============================================================
# TUI Dashboard
# ============================================================

class GoalDashboard:
    """
    Live terminal dashboard bound to a monitoring.EventBus.

    It consumes MonitoringEvents and keeps a small in-memory state
    representation, which is rendered periodically via rich.
    """

    def __init__(self, bus: EventBus, console: Optional[Console] = None, history: int = 10) -> None:
        self._bus = bus
        self._console = console or Console()
        self._lock = threading.Lock()

        # goal id -> {"intent", "priority", "status"}
        self._goals: Dict[str, Dict[str, Any]] = {}
        self._recent: Deque[str] = deque(maxlen=history)
        self._state: Dict[str, Any] = {
            "current_goal_id": None,
            "current_action": None,
            "last_outcome": None,
            "last_failure": None,
            "last_admission": None,
        }

        self._bus.subscribe(self._on_event, _HANDLED_EVENTS)

    def close(self) -> None:
        self._bus.unsubscribe(self._on_event)

    # --------------------------------------------------------
    # Event handler
    # --------------------------------------------------------

    def _on_event(self, event: MonitoringEvent) -> None:
        """
        Update dashboard state based on a MonitoringEvent.
        This should be cheap and non-blocking.
        """
        et = event.event_type
        payload = event.payload or {}

        with self._lock:
            if et in (EventType.GOAL_ADDED, EventType.GOAL_UPDATED, EventType.GOAL_REJECTED):
                goal = payload.get("goal") or {}
                if goal.get("id"):
                    self._remember(goal["id"], goal)
                self._state["last_admission"] = payload.get("outcome")

            elif et == EventType.GOAL_STATUS_CHANGED:
                goal_id = payload.get("goal_id") or (payload.get("goal") or {}).get("id")
                if goal_id is None:
                    return
                if payload.get("destroyed"):
                    self._goals.pop(goal_id, None)
                    if self._state["current_goal_id"] == goal_id:
                        self._state["current_goal_id"] = None
                    return
                status = payload.get("to")
                self._remember(goal_id, {"status": status})
                if status == "running":
                    self._state["current_goal_id"] = goal_id
                elif self._state["current_goal_id"] == goal_id:
                    self._state["current_goal_id"] = None
                if status in _FINISHED and goal_id not in self._recent:
                    self._recent.append(goal_id)

            elif et == EventType.ACTION_STARTED:
                self._state["current_action"] = payload.get("action_type")

            elif et == EventType.ACTION_FINISHED:
                self._state["current_action"] = None
                self._state["last_outcome"] = {
                    "action_type": payload.get("action_type"),
                    **(payload.get("outcome") or {}),
                }

            elif et == EventType.ACTION_FAILED:
                self._state["current_action"] = None
                self._state["last_failure"] = {
                    "action_type": payload.get("action_type"),
                    "error": payload.get("exception_repr"),
                    "fatal": payload.get("fatal", False),
                }

    def _remember(self, goal_id: str, fields: Dict[str, Any]) -> None:
        entry = self._goals.setdefault(goal_id, {"intent": "", "priority": None, "status": "queued"})
        for key in ("intent", "priority", "status"):
            if fields.get(key) is not None:
                entry[key] = fields[key]

    # --------------------------------------------------------
    # Introspection (for tests / tooling)
    # --------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                **self._state,
                "queued": [gid for gid, g in self._goals.items() if g["status"] == "queued"],
                "paused": [gid for gid, g in self._goals.items() if g["status"] == "paused"],
                "recent": list(self._recent),
                "goals": {gid: dict(g) for gid, g in self._goals.items()},
            }

    # --------------------------------------------------------
    # Rendering helpers
    # --------------------------------------------------------

    def _render_status_panel(self, snap: Dict[str, Any]) -> Panel:
        """
        Top: current goal + queue/paused counts + ongoing action.
        """
        current_id = snap["current_goal_id"]
        current = snap["goals"].get(current_id) if current_id else None

        txt = Text()
        txt.append("Current goal: ", style="bold")
        if current:
            txt.append(f"{current['intent']} ")
            txt.append(f"({current_id[:8]}, priority {current['priority']})\n", style="dim")
        else:
            txt.append("<idle>\n")
        txt.append("Action: ", style="bold")
        txt.append(f"{snap['current_action'] or '-'}\n")
        txt.append("Queued: ", style="bold")
        txt.append(f"{len(snap['queued'])}   ")
        txt.append("Paused: ", style="bold")
        txt.append(f"{len(snap['paused'])}")

        return Panel(txt, title="Scheduler", border_style="cyan")

    def _render_goals_panel(self, snap: Dict[str, Any]) -> Panel:
        """
        Left: every known goal that has not finished.
        """
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Id", style="dim", width=8)
        table.add_column("Intent")
        table.add_column("Prio", justify="right")
        table.add_column("Status")

        rows = [
            (gid, g) for gid, g in snap["goals"].items() if g["status"] not in _FINISHED
        ]
        if not rows:
            table.add_row("-", "<none>", "-", "-")
        for gid, g in rows:
            style = _STATUS_STYLES.get(g["status"], "white")
            table.add_row(gid[:8], g["intent"], str(g["priority"]), Text(g["status"], style=style))

        return Panel(table, title="Goals", border_style="green")

    def _render_recent_panel(self, snap: Dict[str, Any]) -> Panel:
        """
        Right: recently finished goals plus the last outcome/failure.
        """
        table = Table.grid()
        table.add_column(justify="left")

        recent: List[str] = list(reversed(snap["recent"]))
        if recent:
            for gid in recent:
                g = snap["goals"].get(gid, {})
                status = g.get("status", "?")
                style = _STATUS_STYLES.get(status, "white")
                table.add_row(f"[{style}]{status:<9}[/{style}] {g.get('intent', gid[:8])}")
        else:
            table.add_row("No finished goals yet.")

        outcome = snap["last_outcome"]
        if outcome:
            table.add_row("")
            table.add_row(
                f"[bold]Last outcome:[/bold] {outcome.get('action_type')} "
                f"{outcome.get('kind')} {outcome.get('reason') or ''}".rstrip()
            )

        failure = snap["last_failure"]
        if failure:
            table.add_row("")
            table.add_row("[bold red]Last failure:[/bold red]")
            table.add_row(f"{failure['action_type']}: {failure['error']}")
            if failure.get("fatal"):
                table.add_row("[red](fatal to goal)[/red]")

        return Panel(table, title="Recent", border_style="yellow")

    def build_layout(self) -> Layout:
        """
        Construct the overall layout for the dashboard.
        """
        snap = self.snapshot()
        layout = Layout()

        layout.split(
            Layout(name="top", size=6),
            Layout(name="middle", ratio=1),
        )
        layout["top"].update(self._render_status_panel(snap))

        layout["middle"].split_row(
            Layout(name="goals", ratio=2),
            Layout(name="recent", ratio=1),
        )
        layout["goals"].update(self._render_goals_panel(snap))
        layout["recent"].update(self._render_recent_panel(snap))

        return layout

    # --------------------------------------------------------
    # Main loop
    # --------------------------------------------------------

    def run(self, refresh_per_second: float = 4.0, stop: Optional[threading.Event] = None) -> None:
        """
        Run the TUI event loop until `stop` is set (or forever).

        This blocks the current thread. Use a separate thread if needed.
        """
        refresh_delay = 1.0 / max(refresh_per_second, 0.1)
        stop = stop or threading.Event()
        with Live(self.build_layout(), console=self._console, refresh_per_second=refresh_per_second) as live:
            while not stop.is_set():
                live.update(self.build_layout())
                time.sleep(refresh_delay)
