# src/agent/bootstrap.py
"""
Goal engine bootstrap.

Purpose:
    Provide a single entrypoint that wires together:

      - ActionRegistry (built-in handlers, configured from scheduler.yaml)
      - ActionExecutor (single execution slot bound to a GameWorld)
      - GoalManager    (queue, cooldowns, processing loop, controls)
      - monitoring     (EventBus, GoalController, optional JSONL event log)

    Everything is constructed once per runtime and handed to the caller in
    a GoalRuntime; nothing is shared through module globals, so tests can
    build as many isolated runtimes as they like.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from actions.executor import ActionExecutor
from actions.registry import ActionRegistry
from agent.config import PROJECT_ROOT, SchedulerConfig, load_scheduler_config
from agent.logging_config import configure_logging
from goals.manager import GoalManager
from monitoring.bus import EventBus
from monitoring.controller import GoalController
from monitoring.logger import JsonlEventLog
from spec.world import GameWorld


log = logging.getLogger(__name__)


@dataclass
class GoalRuntime:
    """Handles to every long-lived component of one goal engine instance."""

    config: SchedulerConfig
    bus: EventBus
    registry: ActionRegistry
    executor: ActionExecutor
    manager: GoalManager
    controller: GoalController
    event_log: Optional[JsonlEventLog] = None

    def shutdown(self, timeout: Optional[float] = 5.0) -> bool:
        """Stop all goals, detach monitoring and close the event log."""
        idle = self.manager.shutdown(timeout)
        self.controller.close()
        if self.event_log is not None:
            self.event_log.close()
        return idle


def build_goal_runtime(
    world: GameWorld,
    config: Optional[SchedulerConfig] = None,
    bus: Optional[EventBus] = None,
    background: bool = True,
    setup_logging: bool = False,
) -> GoalRuntime:
    """
    Build a fully wired goal engine around `world`.

    Args:
        world:         GameWorld implementation handlers will drive.
        config:        resolved SchedulerConfig; loaded from disk when None.
        bus:           EventBus to publish on; a fresh one when None.
        background:    run goals on a daemon worker thread. When False the
                       caller drives the loop with manager.process_goals().
        setup_logging: also call configure_logging() with the configured level.
    """
    cfg = config if config is not None else load_scheduler_config()
    if setup_logging:
        configure_logging(cfg.log_level)

    bus = bus if bus is not None else EventBus()

    event_log: Optional[JsonlEventLog] = None
    if cfg.event_log_path:
        path = Path(cfg.event_log_path)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        event_log = JsonlEventLog(path, bus)

    registry = ActionRegistry.from_builtin(cfg.handler_options())
    executor = ActionExecutor(registry, world, bus=bus)
    manager = GoalManager(
        registry,
        executor,
        config=cfg.manager_config(background=background),
        bus=bus,
    )
    controller = GoalController(manager, bus)

    log.info(
        "Goal runtime ready: %d action types, background=%s",
        len(registry.list_actions()),
        background,
    )
    return GoalRuntime(
        config=cfg,
        bus=bus,
        registry=registry,
        executor=executor,
        manager=manager,
        controller=controller,
        event_log=event_log,
    )
