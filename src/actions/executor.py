# src/actions/executor.py
"""
Single-slot action executor.

Runs exactly one primitive operation at a time on behalf of the goal
manager and is the only surface through which in-flight work can be
cooperatively stopped, paused or resumed.

Design constraints:
- Lookup and validation happen before anything else; failures raise
  UnknownActionError / ValidationError with no side effects.
- The "current action" slot and the local stop flag are released on every
  exit path (normal return, stopped, or exception).
- Handlers are never killed. They poll a CancelToken whose predicate is
  external-goal-stop OR local interrupt OR action-type-paused.
- Unexpected handler exceptions are wrapped into ActionRuntimeError so the
  goal loop only has to know one runtime error type.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, FrozenSet, Mapping, Optional, Set, Tuple

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from spec.actions import SchedulerHandle, ShouldStopFn
from spec.types import ActionOutcome

from .context import ActionContext, CancelToken, PauseCallback
from .errors import ActionError, ActionRuntimeError
from .params import validate_parameters
from .registry import ActionRegistry


log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@dataclass
class ActionExecutorConfig:
    """
    Configuration knobs for ActionExecutor.

    These are scheduler-level; per-action timings (follow poll rate, attack
    timeouts, ...) live on the handler classes.
    """

    # Granularity of CancelToken.sleep(); bounds how late a stop is noticed
    # by a handler that is sleeping between polls.
    token_poll_interval_s: float = 0.05


def _never_stop() -> bool:
    return False


class ActionExecutor:
    """
    Execute one validated action at a time against a GameWorld handle.

    Public contract:
      execute_action(action_type, parameters, external_should_stop) -> ActionOutcome

    Controls (safe to call from any thread):
      stop_current_action() / interrupt_current_action()
      pause_action(action_type) / resume_action(action_type)
    """

    def __init__(
        self,
        registry: ActionRegistry,
        world: Any,
        *,
        scheduler: Optional[SchedulerHandle] = None,
        config: ActionExecutorConfig | None = None,
        bus: Optional[EventBus] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._world = world
        self._scheduler = scheduler
        self._cfg = config if config is not None else ActionExecutorConfig()
        self._bus = bus
        self._log = logger or log

        self._lock = threading.Lock()
        self._current_action: Optional[str] = None
        # Local stop flag; doubles as the wake-up event for CancelToken.sleep().
        self._stop_event = threading.Event()
        self._paused: Set[str] = set()
        self._pause_hooks: Dict[str, Tuple[PauseCallback, PauseCallback]] = {}

    # ------------------------------------------------------------------
    # Wiring / introspection
    # ------------------------------------------------------------------

    def bind_scheduler(self, scheduler: SchedulerHandle) -> None:
        """Attach the goal manager after construction (it owns the executor)."""
        self._scheduler = scheduler

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    @property
    def current_action(self) -> Optional[str]:
        with self._lock:
            return self._current_action

    @property
    def paused_types(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._paused)

    def is_paused(self, action_type: str) -> bool:
        with self._lock:
            return action_type in self._paused

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def execute_action(
        self,
        action_type: str,
        parameters: Optional[Mapping[str, Any]],
        external_should_stop: Optional[ShouldStopFn] = None,
    ) -> ActionOutcome:
        """
        Validate and run a single action, returning its structured outcome.

        Raises:
            UnknownActionError: type not registered (nothing executed)
            ValidationError:    bad parameters (nothing executed)
            ActionRuntimeError: handler failure (slot already released)
        """
        handler = self._registry.require(action_type)
        params = validate_parameters(action_type, handler.params_model, parameters)

        with self._lock:
            if self._current_action is not None:
                raise RuntimeError(
                    f"Executor busy with {self._current_action!r}; "
                    f"cannot start {action_type!r}"
                )
            self._current_action = action_type
            self._stop_event.clear()
            self._pause_hooks.pop(action_type, None)

        external = external_should_stop or _never_stop

        def should_stop() -> bool:
            return (
                external()
                or self._stop_event.is_set()
                or action_type in self._paused
            )

        ctx = ActionContext(
            action_type=action_type,
            world=self._world,
            scheduler=self._scheduler,
            token=CancelToken(
                should_stop,
                wake=self._stop_event,
                poll_interval_s=self._cfg.token_poll_interval_s,
            ),
            register_pause_hooks=self._register_pause_hooks,
        )

        normalized = params.model_dump(by_alias=True)
        self._log.info("Executing action: %s params=%r", action_type, normalized)
        self._emit(EventType.ACTION_STARTED, f"Action started: {action_type}", {
            "action_type": action_type,
            "parameters": normalized,
        })

        start = perf_counter()
        try:
            result = handler.execute(params, ctx)
        except ActionError as exc:
            self._log.warning("Action %s failed: %s", action_type, exc)
            self._emit_failure(action_type, exc)
            raise
        except Exception as exc:
            self._log.exception("Action %s raised unexpectedly", action_type)
            self._emit_failure(action_type, exc)
            raise ActionRuntimeError(
                f"{action_type} crashed: {exc!r}",
                action_type=action_type,
            ) from exc
        finally:
            with self._lock:
                self._current_action = None
                self._stop_event.clear()
                self._pause_hooks.pop(action_type, None)

        elapsed_ms = (perf_counter() - start) * 1000.0
        outcome = result if result is not None else ActionOutcome.completed()
        if not isinstance(outcome, ActionOutcome):
            raise ActionRuntimeError(
                f"{action_type} returned {type(outcome).__name__}, expected ActionOutcome",
                action_type=action_type,
            )

        self._log.info(
            "Action %s finished in %.0fms kind=%s reason=%s",
            action_type,
            elapsed_ms,
            outcome.kind.value,
            outcome.reason,
        )
        self._emit(EventType.ACTION_FINISHED, f"Action finished: {action_type}", {
            "action_type": action_type,
            "elapsed_ms": elapsed_ms,
            "outcome": outcome.to_dict(),
        })
        return outcome

    def stop_current_action(self) -> bool:
        """
        Ask the running handler (if any) to stop at its next poll.

        Returns True if an action was running.
        """
        with self._lock:
            if self._current_action is None:
                return False
            self._log.info("Interrupting current action: %s", self._current_action)
            self._stop_event.set()
            return True

    def interrupt_current_action(self) -> bool:
        return self.stop_current_action()

    def pause_action(self, action_type: str) -> None:
        """
        Mark `action_type` as paused and run the live handler's pause hook.

        While paused the handler's stop predicate is true, so it winds down
        at its next poll; the hook lets it release held resources (e.g. a
        pathfinding goal) immediately.
        """
        with self._lock:
            self._paused.add(action_type)
            hooks = self._pause_hooks.get(action_type)
        if hooks is not None:
            hooks[0]()

    def resume_action(self, action_type: str) -> None:
        """Clear the paused mark for `action_type` and run the resume hook."""
        with self._lock:
            self._paused.discard(action_type)
            hooks = self._pause_hooks.get(action_type)
        if hooks is not None:
            hooks[1]()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _register_pause_hooks(
        self,
        action_type: str,
        on_pause: PauseCallback,
        on_resume: PauseCallback,
    ) -> None:
        with self._lock:
            if self._current_action != action_type:
                return
            self._pause_hooks[action_type] = (on_pause, on_resume)

    def _emit_failure(self, action_type: str, exc: BaseException) -> None:
        self._emit(EventType.ACTION_FAILED, f"Action failed: {action_type}", {
            "action_type": action_type,
            "exception_repr": repr(exc),
            "fatal": bool(getattr(exc, "fatal", False)),
        })

    def _emit(self, event_type: EventType, message: str, payload: Dict[str, Any]) -> None:
        if self._bus is None:
            return
        log_event(
            bus=self._bus,
            module="actions.executor",
            event_type=event_type,
            message=message,
            payload=payload,
        )
