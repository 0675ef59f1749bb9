# src/cli/goal_demo.py

"""
Offline goal engine demo.

Runs a list of goal descriptions against an in-memory FakeWorld and prints
the resulting goal table. Goals come from a JSON/YAML file (a list of
{intent, priority, actions} mappings) or a built-in script.

    goal-demo
    goal-demo --goals my_goals.yaml --json
"""

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.table import Table

from actions.errors import ActionError
from agent.bootstrap import build_goal_runtime
from agent.config import load_scheduler_config
from agent.logging_config import configure_logging
from spec.types import EntityInfo, Position
from testing.fakes import FakeWorld


DEMO_GOALS: List[Dict[str, Any]] = [
    {
        "intent": "greet the player",
        "priority": 1,
        "actions": [{"type": "say", "parameters": {"message": "Hello Steve!"}}],
    },
    {
        "intent": "collect wood",
        "priority": 2,
        "actions": [{"type": "collectBlock", "parameters": {"blockType": "wood", "quantity": 3}}],
    },
    {
        "intent": "make planks",
        "priority": 1,
        "actions": [
            {"type": "craft", "parameters": {"itemName": "oak_planks", "quantity": 4}},
            {"type": "say", "parameters": {"message": "Planks ready"}},
        ],
    },
    {
        "intent": "deal with the zombie",
        "priority": 3,
        "actions": [{"type": "attackEntity", "parameters": {"entityType": "zombie"}}],
    },
    {
        "intent": "come to Steve",
        "priority": 1,
        "actions": [
            {
                "type": "followPlayer",
                "parameters": {"username": "Steve", "stopAtPlayerPosition": True},
            }
        ],
    },
]


def build_demo_world() -> FakeWorld:
    world = FakeWorld(Position(0, 64, 0))
    world.add_player("Steve", Position(12, 64, 5))
    for i in range(4):
        world.add_block("oak_log", Position(4 + i, 64, -3))
    world.add_block("birch_log", Position(-6, 64, 2))
    world.add_entity(EntityInfo(id=7, name="zombie", position=Position(8, 64, 8)))
    world.give("bread", 2)
    world.recipes.add("oak_planks")
    return world


def load_goals(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of goal descriptions in {path}, got {type(data)}")
    return data


def render_goals(console: Console, goals: List[Dict[str, Any]]) -> None:
    table = Table(title="Goals", show_header=True, header_style="bold magenta")
    table.add_column("Id", style="dim", width=8)
    table.add_column("Intent")
    table.add_column("Priority", justify="right")
    table.add_column("Status")
    table.add_column("Last reason")
    for goal in goals:
        table.add_row(
            goal["id"][:8],
            goal["intent"],
            str(goal["priority"]),
            goal["status"],
            goal.get("last_reason") or "-",
        )
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run goal descriptions against an in-memory fake world."
    )
    parser.add_argument("--goals", type=Path, help="JSON/YAML file with a list of goal descriptions")
    parser.add_argument("--config", type=Path, help="Scheduler config (defaults to config/scheduler.yaml)")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--json", action="store_true", help="Print the final goal summaries as JSON")
    args = parser.parse_args(argv)

    cfg = load_scheduler_config(args.config)
    # The demo world is instantaneous; skip the inter-action pause and the event file.
    cfg = replace(cfg, action_delay_s=0.0, event_log_path=None)
    configure_logging(args.log_level or cfg.log_level)

    goals = load_goals(args.goals) if args.goals else DEMO_GOALS
    runtime = build_goal_runtime(build_demo_world(), config=cfg, background=False)
    console = Console()

    for description in goals:
        try:
            result = runtime.manager.add_goal(description)
        except (ActionError, ValueError) as exc:
            console.print(f"[red]rejected[/red] {description.get('intent')!r}: {exc}")
            continue
        console.print(f"[cyan]{result.outcome.value}[/cyan] {description.get('intent')!r}")

    runtime.manager.process_goals()
    summaries = [goal.summary() for goal in runtime.manager.get_all_goals()]
    runtime.shutdown()

    if args.json:
        print(json.dumps(summaries, indent=2, sort_keys=True, default=str))
    else:
        render_goals(console, summaries)
    return 0


if __name__ == "__main__":
    sys.exit(main())
