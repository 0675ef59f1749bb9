# src/actions/params.py
"""
Typed parameter models for every built-in action kind.

Raw parameter bags arrive from the intent layer with camelCase keys
(e.g. {"blockType": "wood", "quantity": 5}). Each model accepts those wire
keys (and the snake_case attribute names), fills defaults, enforces bounds
and closed enumerations, and drops unknown keys.

`validate_parameters()` is the single entry point used by the registry and
the executor; it converts pydantic failures into our own ValidationError so
callers never have to import pydantic.
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Mapping, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from spec.types import Position

from .errors import ValidationError


EquipmentSlot = Literal["mainhand", "offhand", "head", "chest", "legs", "feet"]

ModelT = TypeVar("ModelT", bound=BaseModel)


class ActionParams(BaseModel):
    """Base for all parameter models: camelCase wire aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def normalized(self) -> Dict[str, Any]:
        """Return the validated parameters using wire (camelCase) keys."""
        return self.model_dump(by_alias=True)


class NoParams(ActionParams):
    """Actions that take no parameters (jump, clearAllGoals)."""


class PositionParams(ActionParams):
    x: float
    y: float
    z: float

    def to_position(self) -> Position:
        return Position(self.x, self.y, self.z)


# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------

class FollowPlayerParams(ActionParams):
    username: str = Field(min_length=1)
    stop_at_player_position: bool = False
    # Milliseconds; 0 means "until stopped".
    duration: float = Field(default=0, ge=0)


class MoveToParams(ActionParams):
    position: PositionParams
    radius: float = Field(default=1.0, gt=0)
    timeout_ms: int = Field(default=60_000, ge=1)


# ---------------------------------------------------------------------------
# World interaction
# ---------------------------------------------------------------------------

class CollectBlockParams(ActionParams):
    block_type: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class BuildStructureParams(ActionParams):
    structure_type: str = Field(min_length=1)
    location: PositionParams


class AttackEntityParams(ActionParams):
    entity_type: str = Field(min_length=1)


class SayParams(ActionParams):
    message: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

class EatParams(ActionParams):
    food_name: str = Field(min_length=1)


class DropItemsParams(ActionParams):
    item_name: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class EquipParams(ActionParams):
    item_name: str = Field(min_length=1)
    destination: EquipmentSlot


class UnequipParams(ActionParams):
    destination: EquipmentSlot


class CraftParams(ActionParams):
    item_name: str = Field(min_length=1)
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Control
# ---------------------------------------------------------------------------

class GoalTargetParams(ActionParams):
    goal_id: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Validation entry point
# ---------------------------------------------------------------------------

def validate_parameters(
    action_type: str,
    model: Type[ModelT],
    raw: Optional[Mapping[str, Any]],
) -> ModelT:
    """
    Validate `raw` against `model`.

    Raises:
        ValidationError: listing every offending field. Nothing has been
        executed at that point.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValidationError(
            action_type,
            [{"loc": (), "msg": f"parameters must be a mapping, got {type(raw).__name__}"}],
        )
    try:
        return model.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        raise ValidationError(action_type, exc.errors()) from exc
