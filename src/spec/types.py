# core shared types: Position, EntityInfo, ActionSpec, ActionOutcome
# src/spec/types.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


# ---------------------------------------------------------------------------
# World-facing value types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Position:
    """Block/entity position in world coordinates."""
    x: float
    y: float
    z: float

    def distance_to(self, other: "Position") -> float:
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def offset(self, dx: float, dy: float, dz: float) -> "Position":
        return Position(self.x + dx, self.y + dy, self.z + dz)

    def as_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass
class EntityInfo:
    """
    Snapshot of a single entity as reported by the world.

    `valid` goes False once the entity despawns or dies; handlers should
    re-query the world instead of caching these across polls.
    """
    id: int
    name: str
    position: Position
    health: float = 20.0
    height: float = 1.8
    valid: bool = True


@dataclass
class InventoryItem:
    """One inventory stack."""
    name: str
    count: int


# ---------------------------------------------------------------------------
# Scheduler-facing types
# ---------------------------------------------------------------------------

@dataclass
class ActionSpec:
    """
    One primitive operation inside a goal.

    `type` is the wire identifier produced by the intent layer
    (e.g. "followPlayer", "collectBlock"); `parameters` is the raw,
    not-yet-validated parameter bag using the same wire keys.
    """
    type: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ActionSpec":
        atype = raw.get("type")
        if not isinstance(atype, str) or not atype:
            raise ValueError(f"Action spec is missing a string 'type': {raw!r}")
        params = raw.get("parameters") or {}
        if not isinstance(params, Mapping):
            raise ValueError(f"Action '{atype}' parameters must be a mapping, got {type(params)}")
        return cls(type=atype, parameters=dict(params))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "parameters": dict(self.parameters)}


class OutcomeKind(Enum):
    """Closed set of ways a primitive operation can finish without raising."""
    COMPLETED = "completed"
    STOPPED = "stopped"
    TIMED_OUT = "timed_out"
    GAVE_UP = "gave_up"


@dataclass
class ActionOutcome:
    """
    Structured result of executing one primitive operation.

    Fields:
      - kind:    how the operation ended (see OutcomeKind)
      - reason:  optional tag such as "duration_expired", "reached_position",
                 "timeout", "entity_defeated", "inventory_full"
      - details: type-specific extras ("collected", "distance", ...)
    """
    kind: OutcomeKind
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def stopped(self) -> bool:
        return self.kind is OutcomeKind.STOPPED

    @classmethod
    def completed(cls, reason: Optional[str] = None, **details: Any) -> "ActionOutcome":
        return cls(OutcomeKind.COMPLETED, reason, details)

    @classmethod
    def was_stopped(cls, **details: Any) -> "ActionOutcome":
        return cls(OutcomeKind.STOPPED, "stopped", details)

    @classmethod
    def timed_out(cls, reason: str = "timeout", **details: Any) -> "ActionOutcome":
        return cls(OutcomeKind.TIMED_OUT, reason, details)

    @classmethod
    def gave_up(cls, reason: str, **details: Any) -> "ActionOutcome":
        return cls(OutcomeKind.GAVE_UP, reason, details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "stopped": self.stopped,
            "reason": self.reason,
            "details": dict(self.details),
        }
