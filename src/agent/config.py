# src/agent/config.py
"""
Scheduler configuration loader.

Reads config/scheduler.yaml (or the file named by $GOAL_ENGINE_CONFIG) and
resolves it into a SchedulerConfig. Missing keys fall back to defaults;
anything of the wrong shape raises ValueError.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from goals.manager import GoalManagerConfig


PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_ROOT / "scheduler.yaml"

CONFIG_ENV_VAR = "GOAL_ENGINE_CONFIG"


@dataclass
class SchedulerConfig:
    """Resolved scheduler settings."""

    cooldown_s: float = 5.0
    action_delay_s: float = 0.5
    recent_goal_limit: int = 20
    auto_resume_paused: bool = False
    default_priority: float = 1
    log_level: str = "INFO"
    event_log_path: Optional[str] = None
    block_aliases: Dict[str, List[str]] = field(default_factory=dict)

    def manager_config(self, background: bool = True) -> GoalManagerConfig:
        return GoalManagerConfig(
            cooldown_s=self.cooldown_s,
            action_delay_s=self.action_delay_s,
            recent_goal_limit=self.recent_goal_limit,
            auto_resume_paused=self.auto_resume_paused,
            default_priority=self.default_priority,
            background=background,
        )

    def handler_options(self) -> Dict[str, Any]:
        """Options forwarded to ActionHandlerBase.from_config()."""
        return {"block_aliases": dict(self.block_aliases)}

    @property
    def logging_level(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _section(raw: Dict[str, Any], name: str, path: Path) -> Dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' in {path} must be a mapping, got {type(section)}")
    return section


def _number(section: Dict[str, Any], key: str, default: float, path: Path) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} in {path} must be a number, got {value!r}")
    if value < 0:
        raise ValueError(f"{key} in {path} must be >= 0, got {value!r}")
    return value


def resolve_config_path(path: Optional[Path] = None) -> Path:
    if path is not None:
        return Path(path)
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_CONFIG_PATH


def load_scheduler_config(path: Optional[Path] = None) -> SchedulerConfig:
    """Load and validate the scheduler config file."""
    config_path = resolve_config_path(path)
    raw = _load_yaml(config_path)

    sched = _section(raw, "scheduler", config_path)
    log_cfg = _section(raw, "logging", config_path)
    aliases_raw = _section(raw, "block_aliases", config_path)

    aliases: Dict[str, List[str]] = {}
    for word, blocks in aliases_raw.items():
        if not isinstance(blocks, list) or not all(isinstance(b, str) for b in blocks):
            raise ValueError(f"block_aliases.{word} in {config_path} must be a list of block names")
        aliases[str(word)] = list(blocks)

    recent_limit = sched.get("recent_goal_limit", 20)
    if isinstance(recent_limit, bool) or not isinstance(recent_limit, int) or recent_limit < 1:
        raise ValueError(f"recent_goal_limit in {config_path} must be a positive integer")

    auto_resume = sched.get("auto_resume_paused", False)
    if not isinstance(auto_resume, bool):
        raise ValueError(f"auto_resume_paused in {config_path} must be true/false")

    event_log_path = log_cfg.get("event_log_path")

    return SchedulerConfig(
        cooldown_s=float(_number(sched, "cooldown_s", 5.0, config_path)),
        action_delay_s=float(_number(sched, "action_delay_s", 0.5, config_path)),
        recent_goal_limit=recent_limit,
        auto_resume_paused=auto_resume,
        default_priority=_number(sched, "default_priority", 1, config_path),
        log_level=str(log_cfg.get("level", "INFO")),
        event_log_path=str(event_log_path) if event_log_path else None,
        block_aliases=aliases,
    )
