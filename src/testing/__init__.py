# src/testing/__init__.py

"""
Helpers and fakes for goal engine testing.

This package provides:

- FakeWorld: an in-memory GameWorld (players, blocks, entities, inventory)
- ScriptedAction / BlockingAction: world-free handlers whose timing and
  results the test controls
- build_test_scheduler(): a GoalManager wired around such handlers

These are used to:
- unit test the built-in action handlers
- drive scheduler scenarios deterministically without a game client
- power the offline CLI demo (cli/goal_demo.py)
"""

from .fakes import FakeWorld, WorldCall
from .scripted import BlockingAction, ScriptedAction, ScriptParams, build_test_scheduler

__all__ = [
    "FakeWorld",
    "WorldCall",
    "BlockingAction",
    "ScriptedAction",
    "ScriptParams",
    "build_test_scheduler",
]
