# src/spec/__init__.py

from __future__ import annotations

"""
Public spec surface for the goal engine.

This module re-exports *interfaces and data types* used across the codebase:
  - world-facing value types and the GameWorld protocol
  - ActionSpec / ActionOutcome exchanged between scheduler and handlers
  - ActionHandler / ActionCatalog / SchedulerHandle protocols

Deliberately does NOT export concrete registry/executor/manager classes to
avoid circular imports and keep runtime wiring in src/agent/.
"""

from .actions import (
    ActionCatalog,
    ActionHandler,
    SchedulerHandle,
    ShouldStopFn,
)
from .types import (
    ActionOutcome,
    ActionSpec,
    EntityInfo,
    InventoryItem,
    OutcomeKind,
    Position,
)
from .world import GameWorld

__all__ = [
    # Handler side
    "ActionCatalog",
    "ActionHandler",
    "SchedulerHandle",
    "ShouldStopFn",
    # Scheduler exchange types
    "ActionOutcome",
    "ActionSpec",
    "OutcomeKind",
    # World
    "EntityInfo",
    "InventoryItem",
    "Position",
    "GameWorld",
]
