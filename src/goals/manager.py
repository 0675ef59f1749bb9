# src/goals/manager.py
"""
Goal manager: admission, the single-consumer processing loop, and the
preemptive control surface.

Threading model
---------------
- One worker drives goals. It is a daemon thread started on demand when a
  goal is admitted (config.background=True), or the caller drives the loop
  itself with process_goals().
- All manager state (queue, paused set, ongoing map, running slot,
  cooldowns, recent log) is guarded by a single RLock. Control calls
  (pause/resume/destroy/stop/cancel) take the same lock, so they never
  interleave with the loop's own reads and writes.
- The executor is called without holding the lock; handlers observe
  cancellation through the stop predicate, which reads the goal's
  stop_signal and whether the goal still owns the running slot.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional

from actions.errors import ActionError, ActionRuntimeError
from actions.executor import ActionExecutor
from actions.registry import ActionRegistry
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from spec.types import ActionOutcome, ActionSpec

from .cooldown import Clock, CooldownTable
from .goal import DEFAULT_PRIORITY, Goal, GoalStatus
from .queue import GoalQueue


logger = logging.getLogger(__name__)


# Reserved action types that bypass the queue and act on other goals.
CONTROL_ACTION_TYPES = frozenset(
    {"destroyGoal", "pauseGoal", "resumeGoal", "cancelGoal", "clearAllGoals"}
)

# Follow-style actions where "reached_position" means "carry on".
FOLLOW_ACTION_TYPES = frozenset({"followPlayer"})

# Outcome reasons that end the whole goal.
TERMINAL_REASONS = frozenset({"max_attempts_reached"})

STOP_MARKER = "stop"


class GoalAddOutcome(str, Enum):
    ADDED = "ADDED"
    UPDATED = "UPDATED"
    IGNORED_COOLDOWN = "IGNORED_COOLDOWN"
    IGNORED_ONGOING = "IGNORED_ONGOING"
    STOPPED_EXISTING = "STOPPED_EXISTING"


@dataclass
class ControlResult:
    """What one control action in a submission did."""

    action_type: str
    goal_id: Optional[str]
    goal: Optional[Goal] = None
    affected: int = 0

    @property
    def hit(self) -> bool:
        return self.affected > 0


@dataclass
class GoalAddResult:
    outcome: GoalAddOutcome
    goal: Optional[Goal] = None
    replaced_goal: Optional[Goal] = None
    controls: List[ControlResult] = field(default_factory=list)


@dataclass
class GoalManagerConfig:
    """
    Scheduler knobs. agent.config builds this from config/scheduler.yaml.

    auto_resume_paused:
        When the queue drains and paused goals remain, promote the oldest
        paused goal back into the queue. Off by default: paused work only
        comes back through an explicit resume.
    """

    cooldown_s: float = 5.0
    action_delay_s: float = 0.5
    recent_goal_limit: int = 20
    auto_resume_paused: bool = False
    default_priority: float = DEFAULT_PRIORITY
    background: bool = True


class GoalManager:
    """
    Root of the scheduling engine.

    Owns the GoalQueue, the ActionExecutor, the ongoing-action map
    (action type -> owning goal), the paused-goal set and the per-intent
    cooldown table.

    add_goal() is the single mutation entry point for new work; the
    control surface (pause_goal, resume_goal, destroy_goal,
    cancel_goal_by_id, stop_current_goal, clear_goals) may be called from
    any thread at any time.
    """

    def __init__(
        self,
        registry: ActionRegistry,
        executor: ActionExecutor,
        *,
        config: Optional[GoalManagerConfig] = None,
        bus: Optional[EventBus] = None,
        clock: Clock = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._registry = registry
        self._executor = executor
        self._cfg = config if config is not None else GoalManagerConfig()
        self._bus = bus
        self._sleep = sleep

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)

        self._queue = GoalQueue()
        self._paused: Dict[str, Goal] = {}
        self._ongoing: Dict[str, Goal] = {}
        self._current: Optional[Goal] = None
        self._cooldowns = CooldownTable(self._cfg.cooldown_s, clock)
        self._recent: Deque[Goal] = deque(maxlen=max(1, self._cfg.recent_goal_limit))
        self._is_processing = False
        self._worker: Optional[threading.Thread] = None

        executor.bind_scheduler(self)
        logger.debug("Goal manager initialized (background=%s)", self._cfg.background)

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def add_goal(self, description: Mapping[str, Any]) -> GoalAddResult:
        """
        Classify and admit a goal description {intent, priority, actions}.

        Order of checks:
          1. control actions run immediately, out of band
          2. stop marker on the first action
          3. first action type already ongoing (merge / replace / ignore)
          4. similar goal already queued (replace / cooldown)
          5. enqueue as new

        Raises:
            ValueError:         no usable action list
            UnknownActionError: an action type is not registered
            ValidationError:    an action's parameters are invalid
        """
        goal = Goal.from_description(description, self._cfg.default_priority)

        if any(a.type in CONTROL_ACTION_TYPES for a in goal.actions):
            return self._handle_control_submission(goal)

        first = goal.first_action
        if self._is_stop_request(first):
            with self._lock:
                result = self._handle_stop_request(first)
            self._publish_admission(result)
            return result

        self._validate_actions(goal.actions)

        with self._lock:
            if first.type in self._ongoing:
                result = self._handle_ongoing_action(goal, first)
            else:
                existing = self._queue.find(
                    lambda queued: queued.is_similar_to(
                        goal, self._registry.target_of, self._registry.is_mergeable
                    )
                )
                if existing is not None:
                    result = self._handle_existing_goal(goal, existing)
                else:
                    self._queue.enqueue(goal)
                    self._cooldowns.start(goal.intent)
                    logger.info("New goal added: %s - %s", goal.id, goal.intent)
                    result = GoalAddResult(GoalAddOutcome.ADDED, goal)

            if result.goal is not None and result.goal in self._queue:
                self._kick_locked()
            self.log_goal_state()

        self._publish_admission(result)
        return result

    def _validate_actions(self, specs: List[ActionSpec]) -> None:
        """Validate every spec up front and store the normalized parameters."""
        normalized = [
            self._registry.validate(spec.type, spec.parameters).model_dump(by_alias=True)
            for spec in specs
        ]
        for spec, params in zip(specs, normalized):
            spec.parameters = params

    @staticmethod
    def _is_stop_request(spec: Optional[ActionSpec]) -> bool:
        return spec is not None and spec.parameters.get(STOP_MARKER) is True

    def _handle_stop_request(self, spec: ActionSpec) -> GoalAddResult:
        if spec.type in self._ongoing:
            stopped = self.stop_specific_action(spec.type)
            return GoalAddResult(GoalAddOutcome.STOPPED_EXISTING, stopped)
        logger.info("Stop requested for %s but nothing of that type is running", spec.type)
        return GoalAddResult(GoalAddOutcome.IGNORED_ONGOING, None)

    def _handle_ongoing_action(self, goal: Goal, first: ActionSpec) -> GoalAddResult:
        ongoing_goal = self._ongoing[first.type]

        if not self._registry.is_mergeable(first.type):
            logger.info(
                "Ongoing action of type %s exists. New goal '%s' not added.",
                first.type,
                goal.intent,
            )
            return GoalAddResult(GoalAddOutcome.IGNORED_ONGOING, ongoing_goal)

        in_flight = ongoing_goal.find_action(first.type)
        if in_flight is not None and (
            self._registry.target_of(in_flight) == self._registry.target_of(first)
        ):
            in_flight.parameters.update(first.parameters)
            ongoing_goal.stop_signal = False
            ongoing_goal.status = GoalStatus.RUNNING
            logger.info(
                "Updated ongoing %s action for %r",
                first.type,
                self._registry.target_of(first),
            )
            return GoalAddResult(GoalAddOutcome.UPDATED, ongoing_goal)

        replaced = self.stop_specific_action(first.type)
        self._queue.enqueue(goal)
        logger.info(
            "Replaced ongoing %s goal %s with %s",
            first.type,
            replaced.id if replaced else None,
            goal.id,
        )
        return GoalAddResult(GoalAddOutcome.UPDATED, goal, replaced_goal=replaced)

    def _handle_existing_goal(self, goal: Goal, existing: Goal) -> GoalAddResult:
        first = goal.first_action
        if not self._registry.is_mergeable(first.type) and self._cooldowns.is_cooling_down(goal.intent):
            logger.info("Ignored duplicate goal: %s (in cooldown)", goal.intent)
            return GoalAddResult(GoalAddOutcome.IGNORED_COOLDOWN, None)

        self._queue.remove_by_id(existing.id)
        existing.stop_signal = True
        self._set_status(existing, GoalStatus.STOPPED)
        self._queue.enqueue(goal)
        logger.info("Replaced queued goal %s with %s (%s)", existing.id, goal.id, goal.intent)
        return GoalAddResult(GoalAddOutcome.UPDATED, goal, replaced_goal=existing)

    def _handle_control_submission(self, goal: Goal) -> GoalAddResult:
        """
        Run every control action synchronously, then put any remaining
        actions in a goal at the very front of the queue. A goal still in
        the running slot is preempted and requeued right behind it.
        """
        controls = [a for a in goal.actions if a.type in CONTROL_ACTION_TYPES]
        remaining = [a for a in goal.actions if a.type not in CONTROL_ACTION_TYPES]

        # Validate everything before touching any state.
        control_params = [self._registry.validate(a.type, a.parameters) for a in controls]
        self._validate_actions(remaining)

        results: List[ControlResult] = []
        with self._lock:
            for spec, params in zip(controls, control_params):
                logger.info("Executing control action %s %r", spec.type, params.model_dump(by_alias=True))
                results.append(self._apply_control(spec.type, getattr(params, "goal_id", None)))

            immediate: Optional[Goal] = None
            if remaining:
                immediate = Goal(intent=goal.intent, actions=remaining, priority=goal.priority)
                preempted = self._preempt_current_locked()
                if preempted is not None:
                    self._queue.push_front(preempted)
                self._queue.push_front(immediate)
                self._kick_locked()

        if immediate is not None:
            outcome = GoalAddOutcome.ADDED
        elif any(r.hit and r.action_type in ("destroyGoal", "cancelGoal", "clearAllGoals") for r in results):
            outcome = GoalAddOutcome.STOPPED_EXISTING
        elif any(r.hit for r in results):
            outcome = GoalAddOutcome.UPDATED
        else:
            outcome = GoalAddOutcome.IGNORED_ONGOING

        result = GoalAddResult(outcome, immediate, controls=results)
        self._publish_admission(result)
        return result

    def _apply_control(self, action_type: str, goal_id: Optional[str]) -> ControlResult:
        if action_type == "clearAllGoals":
            return ControlResult(action_type, None, None, self.clear_goals())

        handlers: Dict[str, Callable[[str], Optional[Goal]]] = {
            "destroyGoal": self.destroy_goal,
            "pauseGoal": self.pause_goal,
            "resumeGoal": self.resume_goal,
            "cancelGoal": self.cancel_goal_by_id,
        }
        target = handlers[action_type](goal_id or "")
        return ControlResult(action_type, goal_id, target, 1 if target is not None else 0)

    # ------------------------------------------------------------------
    # Processing loop
    # ------------------------------------------------------------------

    def process_goals(self) -> None:
        """
        Drive the loop in the calling thread until nothing is runnable.

        Returns immediately if another loop instance is already active.
        """
        with self._lock:
            if self._is_processing:
                return
            self._is_processing = True
        self._run_loop()

    def _kick_locked(self) -> None:
        """Start the background worker if the loop is idle (lock held)."""
        if not self._cfg.background or self._is_processing:
            return
        self._is_processing = True
        self._worker = threading.Thread(
            target=self._run_loop,
            name="goal-worker",
            daemon=True,
        )
        self._worker.start()

    def _run_loop(self) -> None:
        try:
            while True:
                with self._lock:
                    goal = self._next_goal_locked()
                    if goal is None:
                        # Same critical section as the empty dequeue.
                        self._finish_processing_locked()
                        return
                    self._current = goal
                    goal.is_running = True
                    self._set_status(goal, GoalStatus.RUNNING)
                    logger.info("Starting execution of goal: %s - %s", goal.id, goal.intent)
                self._drive_goal(goal)
        except BaseException:
            with self._lock:
                self._finish_processing_locked()
            raise

    def _finish_processing_locked(self) -> None:
        self._is_processing = False
        self._idle.notify_all()
        self.log_goal_state()

    def _next_goal_locked(self) -> Optional[Goal]:
        goal = self._queue.dequeue()
        if goal is None and self._cfg.auto_resume_paused and self._paused:
            oldest = min(self._paused.values(), key=lambda g: g.timestamp)
            logger.info("Queue drained; resuming oldest paused goal %s", oldest.id)
            del self._paused[oldest.id]
            self._requeue_locked(oldest)
            goal = self._queue.dequeue()
        return goal

    def _drive_goal(self, goal: Goal) -> None:
        try:
            self._execute_goal(goal)
        except Exception as exc:
            logger.exception("Failed to execute goal: %s - %s", goal.id, goal.intent)
            with self._lock:
                if self._current is goal:
                    goal.last_reason = repr(exc)
                    self._set_status(goal, GoalStatus.FAILED)
        finally:
            with self._lock:
                goal.is_running = False
                self._drop_ongoing_locked(goal)
                if self._current is goal:
                    self._current = None
                    self._recent.append(goal)
                self.log_goal_state()

    def _execute_goal(self, goal: Goal) -> None:
        while True:
            with self._lock:
                if self._current is not goal:
                    # Detached by pause/destroy/stop; whoever did it set the status.
                    return
                if goal.stop_signal:
                    logger.info("Goal %s stopped prematurely", goal.id)
                    self._set_status(goal, GoalStatus.STOPPED)
                    return
                index = goal.next_action_index
                if index >= len(goal.actions):
                    break
                spec = goal.actions[index]
                self._ongoing[spec.type] = goal
                params = dict(spec.parameters)

            logger.info("Executing action for goal %s: %s", goal.id, spec.type)
            outcome: Optional[ActionOutcome] = None
            try:
                outcome = self._executor.execute_action(
                    spec.type,
                    params,
                    lambda: goal.stop_signal or self._current is not goal,
                )
            except ActionRuntimeError as exc:
                if exc.fatal:
                    raise
                logger.error("Error executing action %s for goal %s: %s", spec.type, goal.id, exc)
            except ActionError as exc:
                logger.error("Skipping invalid action %s for goal %s: %s", spec.type, goal.id, exc)
            finally:
                with self._lock:
                    if self._ongoing.get(spec.type) is goal:
                        del self._ongoing[spec.type]
                if self._executor.is_paused(spec.type):
                    # The paused handler has exited; its hooks are gone.
                    self._executor.resume_action(spec.type)

            with self._lock:
                if outcome is None or not outcome.stopped:
                    goal.next_action_index = index + 1
                if outcome is not None:
                    goal.last_reason = outcome.reason
                if self._current is not goal:
                    return
                if outcome is not None and outcome.stopped:
                    logger.info("Action %s was stopped prematurely (%s)", spec.type, outcome.details)
                    self._set_status(goal, GoalStatus.STOPPED)
                    return
                if outcome is not None and outcome.reason in TERMINAL_REASONS:
                    logger.warning("Goal %s ended early: %s", goal.id, outcome.reason)
                    self._set_status(goal, GoalStatus.FAILED)
                    return
                more = goal.next_action_index < len(goal.actions)

            if outcome is None:
                continue
            if spec.type in FOLLOW_ACTION_TYPES and outcome.reason == "reached_position":
                logger.info("Player reached, continuing to next action")
                continue
            if more and self._cfg.action_delay_s > 0:
                self._sleep(self._cfg.action_delay_s)

        with self._lock:
            if self._current is goal and goal.status is GoalStatus.RUNNING:
                self._set_status(goal, GoalStatus.COMPLETED)
                logger.info("Goal %s completed successfully", goal.id)

    # ------------------------------------------------------------------
    # Preemptive controls
    # ------------------------------------------------------------------

    def stop_current_goal(self) -> Optional[Goal]:
        """
        Stop the goal in the running slot and interrupt its action.

        The worker keeps running and moves to the next queued goal as soon as
        the interrupted handler returns.
        """
        with self._lock:
            goal = self._current
            if goal is None:
                logger.warning("No active goal to stop")
                return None
            logger.info("Stopping current goal: %r", goal.intent)
            goal.stop_signal = True
            self._set_status(goal, GoalStatus.STOPPED)
            self._current = None
            self._drop_ongoing_locked(goal)
            self._recent.append(goal)
            self._executor.interrupt_current_action()
            self.log_goal_state()
            return goal

    def stop_specific_action(self, action_type: str) -> Optional[Goal]:
        """Flag the goal owning an ongoing `action_type` as stopped."""
        with self._lock:
            goal = self._ongoing.pop(action_type, None)
            if goal is None:
                logger.warning("No ongoing action of type %s to stop", action_type)
                return None
            logger.info("Stopping specific action: %s", action_type)
            goal.stop_signal = True
            self._set_status(goal, GoalStatus.STOPPED)
            self.log_goal_state()
            return goal

    def pause_goal(self, goal_id: str) -> Optional[Goal]:
        """
        Move a running or queued goal into the paused set.

        For a running goal the executor's pause hook for the active action
        type fires, and the handler winds down at its next poll. The goal
        later resumes from the interrupted action.
        """
        with self._lock:
            if self._current is not None and self._current.id == goal_id:
                goal = self._current
                self._current = None
                active_type = next(
                    (t for t, owner in self._ongoing.items() if owner is goal), None
                )
                self._drop_ongoing_locked(goal)
                goal.paused_action_type = active_type
                if active_type is not None:
                    self._executor.pause_action(active_type)
            else:
                goal = self._queue.remove_by_id(goal_id)
                if goal is None:
                    logger.warning("No running or queued goal %s to pause", goal_id)
                    return None

            self._paused[goal.id] = goal
            self._set_status(goal, GoalStatus.PAUSED)
            logger.info("Paused goal %s - %s", goal.id, goal.intent)
            self.log_goal_state()
            return goal

    def resume_goal(self, goal_id: str) -> Optional[Goal]:
        """Move a paused goal back into the queue and restart the loop."""
        with self._lock:
            goal = self._paused.pop(goal_id, None)
            if goal is None:
                logger.warning("No paused goal %s to resume", goal_id)
                return None
            self._requeue_locked(goal)
            logger.info("Resumed goal %s - %s", goal.id, goal.intent)
            self._kick_locked()
            self.log_goal_state()
            return goal

    def destroy_goal(self, goal_id: str) -> Optional[Goal]:
        """
        Remove a goal from whichever structure holds it.

        Valid from every state. A running goal's current action is
        interrupted. Destroyed goals are not recorded anywhere afterwards.
        """
        with self._lock:
            goal: Optional[Goal] = None
            if self._current is not None and self._current.id == goal_id:
                goal = self._current
                self._current = None
                self._drop_ongoing_locked(goal)
                self._executor.interrupt_current_action()
            else:
                goal = self._queue.remove_by_id(goal_id) or self._paused.pop(goal_id, None)

            if goal is None:
                logger.warning("No goal %s to destroy", goal_id)
                return None

            goal.stop_signal = True
            if goal.paused_action_type and self._executor.is_paused(goal.paused_action_type):
                self._executor.resume_action(goal.paused_action_type)
            goal.paused_action_type = None
            logger.info("Destroyed goal %s - %s", goal.id, goal.intent)
            self._emit(
                EventType.GOAL_STATUS_CHANGED,
                f"Goal destroyed: {goal.intent}",
                {"goal": goal.summary(), "destroyed": True},
                goal.id,
            )
            self.log_goal_state()
            return goal

    def cancel_goal_by_id(self, goal_id: str) -> Optional[Goal]:
        """
        Cancel a goal: a running one is stopped, a queued or paused one is
        removed and marked stopped. Returns None when the id is unknown.
        """
        with self._lock:
            if self._current is not None and self._current.id == goal_id:
                cancelled = self.stop_current_goal()
                logger.info("Cancelled current goal with ID: %s", goal_id)
                return cancelled

            goal = self._queue.remove_by_id(goal_id) or self._paused.pop(goal_id, None)
            if goal is None:
                logger.warning("No goal found with ID: %s", goal_id)
                return None
            goal.stop_signal = True
            goal.paused_action_type = None
            self._set_status(goal, GoalStatus.STOPPED)
            self._recent.append(goal)
            logger.info("Cancelled goal with ID: %s", goal_id)
            self.log_goal_state()
            return goal

    def clear_goals(self) -> int:
        """Drop every queued and paused goal. The running goal is untouched."""
        with self._lock:
            dropped = self._queue.clear() + list(self._paused.values())
            self._paused.clear()
            for goal in dropped:
                goal.stop_signal = True
                goal.paused_action_type = None
                self._set_status(goal, GoalStatus.STOPPED)
            logger.info("Cleared %d pending goals", len(dropped))
            self.log_goal_state()
            return len(dropped)

    def _preempt_current_locked(self) -> Optional[Goal]:
        """
        Detach the running goal so trailing actions of a control submission
        start next. The goal keeps its resume point and goes back to the
        queue; its handler winds down at the next poll.
        """
        goal = self._current
        if goal is None:
            return None
        self._current = None
        self._drop_ongoing_locked(goal)
        goal.stop_signal = False
        self._executor.interrupt_current_action()
        self._set_status(goal, GoalStatus.QUEUED)
        logger.info("Preempted goal %s - %s for control follow-up", goal.id, goal.intent)
        return goal

    def _requeue_locked(self, goal: Goal) -> None:
        if goal.paused_action_type and self._executor.is_paused(goal.paused_action_type):
            self._executor.resume_action(goal.paused_action_type)
        goal.paused_action_type = None
        goal.stop_signal = False
        self._queue.enqueue(goal)
        self._set_status(goal, GoalStatus.QUEUED)

    def _drop_ongoing_locked(self, goal: Goal) -> None:
        for action_type in [t for t, owner in self._ongoing.items() if owner is goal]:
            del self._ongoing[action_type]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_processing(self) -> bool:
        with self._lock:
            return self._is_processing

    @property
    def current_goal(self) -> Optional[Goal]:
        with self._lock:
            return self._current

    @property
    def queue_length(self) -> int:
        with self._lock:
            return len(self._queue)

    @property
    def ongoing_actions(self) -> Dict[str, Goal]:
        with self._lock:
            return dict(self._ongoing)

    @property
    def paused_goals(self) -> Dict[str, Goal]:
        with self._lock:
            return dict(self._paused)

    @property
    def executor(self) -> ActionExecutor:
        return self._executor

    def queued_goals(self) -> List[Goal]:
        with self._lock:
            return self._queue.snapshot()

    def get_goal_state(self) -> Dict[str, Any]:
        """Read-only snapshot for observability, UIs and prompts."""
        with self._lock:
            current = self._current
            return {
                "queued_goals": len(self._queue),
                "current_goal": (
                    {
                        "id": current.id,
                        "intent": current.intent,
                        "priority": current.priority,
                        "status": current.status.value,
                    }
                    if current is not None
                    else None
                ),
                "ongoing_actions": list(self._ongoing.keys()),
                "paused_goals": [
                    {"id": g.id, "intent": g.intent} for g in self._paused.values()
                ],
                "total_goals": len(self._queue) + len(self._paused) + (1 if current else 0),
                "is_processing": self._is_processing,
            }

    def get_current_goals(self) -> List[Dict[str, Any]]:
        """id/intent/status of the running, queued and paused goals, in that order."""
        with self._lock:
            goals: List[Goal] = []
            if self._current is not None:
                goals.append(self._current)
            goals.extend(self._queue.snapshot())
            goals.extend(self._paused.values())
            return [
                {"id": g.id, "intent": g.intent, "status": g.status.value}
                for g in goals
            ]

    def get_recent_goals(self, count: int = 5) -> List[Goal]:
        """The last `count` finished goals, oldest first."""
        with self._lock:
            if count <= 0:
                return []
            return list(self._recent)[-count:]

    def get_all_goals(self) -> List[Goal]:
        """Running, queued, paused and recently finished goals."""
        with self._lock:
            goals: List[Goal] = []
            if self._current is not None:
                goals.append(self._current)
            goals.extend(self._queue.snapshot())
            goals.extend(self._paused.values())
            goals.extend(self._recent)
            return goals

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        for goal in self.get_all_goals():
            if goal.id == goal_id:
                return goal
        return None

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until the loop has nothing left to run. False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: not self._is_processing, timeout)

    def shutdown(self, timeout: Optional[float] = 5.0) -> bool:
        """Drop pending work, stop the running goal and wait for the worker."""
        self.clear_goals()
        self.stop_current_goal()
        return self.wait_until_idle(timeout)

    def log_goal_state(self) -> None:
        state = self.get_goal_state()
        current = state["current_goal"]
        logger.debug(
            "Goal state: queued=%d current=%s ongoing=%s paused=%d total=%d",
            state["queued_goals"],
            f"{current['intent']} (priority {current['priority']}, {current['status']})"
            if current
            else "None",
            ", ".join(state["ongoing_actions"]) or "None",
            len(state["paused_goals"]),
            state["total_goals"],
        )

    # ------------------------------------------------------------------
    # Monitoring helpers
    # ------------------------------------------------------------------

    def _set_status(self, goal: Goal, status: GoalStatus) -> None:
        previous = goal.status
        goal.status = status
        if previous is status:
            return
        self._emit(
            EventType.GOAL_STATUS_CHANGED,
            f"Goal {status.value}: {goal.intent}",
            {"goal_id": goal.id, "from": previous.value, "to": status.value},
            goal.id,
        )

    def _publish_admission(self, result: GoalAddResult) -> None:
        if result.outcome is GoalAddOutcome.ADDED:
            event_type = EventType.GOAL_ADDED
        elif result.outcome in (GoalAddOutcome.UPDATED, GoalAddOutcome.STOPPED_EXISTING):
            event_type = EventType.GOAL_UPDATED
        else:
            event_type = EventType.GOAL_REJECTED
        payload: Dict[str, Any] = {
            "outcome": result.outcome.value,
            "goal": result.goal.summary() if result.goal else None,
        }
        if result.replaced_goal is not None:
            payload["replaced_goal_id"] = result.replaced_goal.id
        if result.controls:
            payload["controls"] = [
                {"action_type": c.action_type, "goal_id": c.goal_id, "affected": c.affected}
                for c in result.controls
            ]
        self._emit(
            event_type,
            f"add_goal -> {result.outcome.value}",
            payload,
            result.goal.id if result.goal else None,
        )

    def _emit(
        self,
        event_type: EventType,
        message: str,
        payload: Dict[str, Any],
        correlation_id: Optional[str] = None,
    ) -> None:
        if self._bus is None:
            return
        log_event(
            bus=self._bus,
            module="goals.manager",
            event_type=event_type,
            message=message,
            payload=payload,
            correlation_id=correlation_id,
        )
