from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel

from spec.actions import ActionCatalog
from spec.types import ActionOutcome, ActionSpec

from .context import ActionContext
from .errors import UnknownActionError
from .params import NoParams, validate_parameters


log = logging.getLogger(__name__)


class ActionHandlerBase:
    """
    Base class for action handler implementations.

    Subclasses must:
    - set `action_type` to the wire identifier (e.g. "collectBlock")
    - set `params_model` to an ActionParams subclass
    - implement `execute(params, ctx)`

    Optional:
    - `merge_key`: target parameter name for mergeable kinds (followPlayer)
    - `description`: one-line summary used in describe()
    - `from_config(options)`: build an instance from runtime options
    """

    action_type: str = ""  # override in subclasses
    params_model: Type[BaseModel] = NoParams
    merge_key: Optional[str] = None
    description: str = ""

    @classmethod
    def from_config(cls, options: Mapping[str, Any]) -> "ActionHandlerBase":
        """Default construction ignores options; override when needed."""
        return cls()

    @property
    def mergeable(self) -> bool:
        return self.merge_key is not None

    def describe(self) -> Dict[str, Any]:
        """
        Return metadata for prompting layers and tooling.

        Includes:
        - type / description
        - parameters (JSON schema using wire keys)
        - mergeable / merge_key
        """
        doc_lines = (self.__doc__ or "").strip().splitlines()
        return {
            "type": self.action_type,
            "description": self.description or (doc_lines[0] if doc_lines else ""),
            "parameters": self.params_model.model_json_schema(by_alias=True),
            "mergeable": self.mergeable,
            "merge_key": self.merge_key,
        }

    def execute(self, params: Any, ctx: ActionContext) -> Optional[ActionOutcome]:
        """
        This method must be implemented by subclasses.

        Implementations drive ctx.world until the operation finishes, gives
        up, or ctx.token asks them to stop.
        """
        raise NotImplementedError("ActionHandlerBase subclasses must override execute()")


class ActionRegistry(ActionCatalog):
    """
    Lookup table from action type to handler instance.

    Pure data plus dispatch: owns no runtime state beyond the registered
    handlers. One instance is created at process start and injected into
    the executor and the goal manager.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, ActionHandlerBase] = {}

    # --- Registration ---

    def register(self, handler: ActionHandlerBase) -> None:
        """
        Register a single handler instance.

        Enforces:
        - a non-empty action_type
        - no duplicate registrations
        """
        name = handler.action_type
        if not name:
            raise ValueError(f"Handler {type(handler).__name__} must define action_type")
        if name in self._handlers:
            raise ValueError(f"Action already registered: {name}")
        self._handlers[name] = handler
        log.debug("Registered action handler %s -> %s", name, type(handler).__name__)

    @classmethod
    def from_builtin(cls, options: Optional[Mapping[str, Any]] = None) -> "ActionRegistry":
        """
        Build a registry holding every built-in handler.

        `options` is forwarded to each handler's from_config() (e.g. the
        block alias table used by collectBlock).
        """
        # Importing the package runs the @builtin_action decorators.
        from . import base  # noqa: F401

        registry = cls()
        opts = options or {}
        for handler_cls in builtin_handler_classes():
            registry.register(handler_cls.from_config(opts))
        return registry

    # --- Query methods ---

    def list_actions(self) -> List[str]:
        return sorted(self._handlers)

    def get(self, action_type: str) -> Optional[ActionHandlerBase]:
        """Return the handler, or None if the type is unknown."""
        return self._handlers.get(action_type)

    def require(self, action_type: str) -> ActionHandlerBase:
        handler = self._handlers.get(action_type)
        if handler is None:
            raise UnknownActionError(action_type)
        return handler

    def __contains__(self, action_type: object) -> bool:
        return action_type in self._handlers

    def describe_all(self) -> Dict[str, Dict[str, Any]]:
        return {name: self._handlers[name].describe() for name in self.list_actions()}

    # --- Validation / merge helpers ---

    def validate(self, action_type: str, raw_params: Optional[Mapping[str, Any]]) -> BaseModel:
        """
        Normalize raw parameters for `action_type`.

        Raises UnknownActionError or ValidationError; never runs a handler.
        """
        handler = self.require(action_type)
        return validate_parameters(action_type, handler.params_model, raw_params)

    def is_mergeable(self, action_type: str) -> bool:
        handler = self._handlers.get(action_type)
        return handler is not None and handler.mergeable

    def target_of(self, spec: ActionSpec) -> Any:
        """Target parameter value of a mergeable spec, or None."""
        handler = self._handlers.get(spec.type)
        if handler is None or handler.merge_key is None:
            return None
        return spec.parameters.get(handler.merge_key)


# ---------------------------------------------------------------------------
# Built-in handler catalog
# ---------------------------------------------------------------------------

_BUILTIN_HANDLERS: List[Type[ActionHandlerBase]] = []


def builtin_action(cls: Type[ActionHandlerBase]) -> Type[ActionHandlerBase]:
    """
    Class decorator marking a handler as part of the built-in catalog.

    Usage:

        @builtin_action
        class CollectBlockAction(ActionHandlerBase):
            action_type = "collectBlock"
            ...

    This only records the class. Instances are created per registry by
    ActionRegistry.from_builtin(), so no registry is shared between
    runtimes.
    """
    if not getattr(cls, "action_type", ""):
        raise ValueError(f"Action class {cls.__name__} must define action_type")
    if cls not in _BUILTIN_HANDLERS:
        _BUILTIN_HANDLERS.append(cls)
    return cls


def builtin_handler_classes() -> List[Type[ActionHandlerBase]]:
    return list(_BUILTIN_HANDLERS)
