# tests/test_goal_manager_admission.py
"""
Tests for GoalManager.add_goal classification.

Covers:
- ADDED for new work, validation failures surfaced to the caller
- cooldown on similar non-mergeable resubmissions (fake clock)
- replacing similar queued goals
- IGNORED_ONGOING for a busy non-mergeable action type
- merge-on-duplicate target and target switch for mergeable types
- stop markers
- control actions applied out of band
"""

from __future__ import annotations

import pytest

from actions.errors import UnknownActionError, ValidationError
from goals.goal import GoalStatus
from goals.manager import GoalAddOutcome
from testing.scripted import BlockingAction, ScriptedAction, build_test_scheduler


def goal(intent, *actions, priority=1):
    return {
        "intent": intent,
        "priority": priority,
        "actions": [{"type": t, "parameters": dict(p)} for t, p in actions],
    }


def test_new_goal_is_added_and_queued():
    manager = build_test_scheduler(ScriptedAction("wave"))

    result = manager.add_goal(goal("wave hello", ("wave", {})))

    assert result.outcome is GoalAddOutcome.ADDED
    assert result.goal is not None
    assert manager.queued_goals() == [result.goal]
    state = manager.get_goal_state()
    assert state["queued_goals"] == 1
    assert state["current_goal"] is None
    assert state["total_goals"] == 1


def test_unknown_action_type_is_rejected_before_queueing():
    manager = build_test_scheduler(ScriptedAction("wave"))

    with pytest.raises(UnknownActionError):
        manager.add_goal(goal("mystery", ("wave", {}), ("teleport", {})))

    assert manager.queue_length == 0


def test_invalid_parameters_are_rejected_before_queueing():
    manager = build_test_scheduler(include_builtin=True)

    with pytest.raises(ValidationError):
        manager.add_goal(goal("collect", ("collectBlock", {"blockType": "wood", "quantity": 0})))

    assert manager.queue_length == 0


def test_malformed_description_raises_value_error():
    manager = build_test_scheduler(ScriptedAction("wave"))
    with pytest.raises(ValueError):
        manager.add_goal({"intent": "nothing to do", "actions": []})


def test_parameters_are_stored_normalized():
    manager = build_test_scheduler(include_builtin=True)

    result = manager.add_goal(goal("follow", ("followPlayer", {"username": "Steve", "colour": "red"})))

    assert result.goal.actions[0].parameters == {
        "username": "Steve",
        "stopAtPlayerPosition": False,
        "duration": 0,
    }


def test_cooldown_blocks_identical_resubmission_until_window_passes():
    now = [1000.0]
    manager = build_test_scheduler(ScriptedAction("wave"), clock=lambda: now[0], cooldown_s=5.0)

    first = manager.add_goal(goal("wave hello", ("wave", {})))
    second = manager.add_goal(goal("wave hello", ("wave", {})))

    assert first.outcome is GoalAddOutcome.ADDED
    assert second.outcome is GoalAddOutcome.IGNORED_COOLDOWN
    assert second.goal is None
    assert manager.queue_length == 1

    now[0] += 5.1
    third = manager.add_goal(goal("wave hello", ("wave", {})))

    assert third.outcome is GoalAddOutcome.UPDATED
    assert third.replaced_goal is first.goal
    assert first.goal.status is GoalStatus.STOPPED
    assert manager.queued_goals() == [third.goal]


def test_similar_goal_with_other_intent_replaces_queued_one():
    manager = build_test_scheduler(ScriptedAction("wave"))

    first = manager.add_goal(goal("wave hello", ("wave", {})))
    second = manager.add_goal(goal("wave goodbye", ("wave", {})))

    assert second.outcome is GoalAddOutcome.UPDATED
    assert second.replaced_goal is first.goal
    assert manager.queued_goals() == [second.goal]


def test_queued_mergeable_goal_is_replaced_even_inside_cooldown():
    now = [0.0]
    manager = build_test_scheduler(
        ScriptedAction("follow", merge_key="username"),
        clock=lambda: now[0],
    )

    first = manager.add_goal(goal("follow steve", ("follow", {"username": "Steve"})))
    second = manager.add_goal(goal("follow steve", ("follow", {"username": "Steve", "speed": 2})))
    other = manager.add_goal(goal("follow alex", ("follow", {"username": "Alex"})))

    assert second.outcome is GoalAddOutcome.UPDATED
    assert second.replaced_goal is first.goal
    assert other.outcome is GoalAddOutcome.ADDED
    assert manager.queue_length == 2


def test_busy_non_mergeable_type_is_ignored():
    hold = BlockingAction("hold")
    manager = build_test_scheduler(hold, background=True)
    try:
        running = manager.add_goal(goal("hold the line", ("hold", {})))
        assert hold.wait_started()

        result = manager.add_goal(goal("hold again", ("hold", {})))

        assert result.outcome is GoalAddOutcome.IGNORED_ONGOING
        assert result.goal is running.goal
        assert manager.queue_length == 0
    finally:
        manager.shutdown()


def test_duplicate_target_merges_into_ongoing_goal():
    follow = BlockingAction("follow", merge_key="username")
    manager = build_test_scheduler(follow, background=True)
    try:
        running = manager.add_goal(goal("follow steve", ("follow", {"username": "Steve"})))
        assert follow.wait_started()

        result = manager.add_goal(goal("keep following", ("follow", {"username": "Steve", "speed": 3})))

        assert result.outcome is GoalAddOutcome.UPDATED
        assert result.goal is running.goal
        assert result.replaced_goal is None
        assert running.goal.actions[0].parameters["speed"] == 3
        assert running.goal.status is GoalStatus.RUNNING
        assert list(manager.ongoing_actions) == ["follow"]
        assert manager.queue_length == 0
    finally:
        manager.shutdown()


def test_target_switch_stops_old_goal_and_runs_new_one():
    follow = BlockingAction("follow", merge_key="username")
    manager = build_test_scheduler(follow, background=True)
    try:
        steve = manager.add_goal(goal("follow steve", ("follow", {"username": "Steve"})))
        assert follow.wait_started()

        alex = manager.add_goal(goal("follow alex", ("follow", {"username": "Alex"})))

        assert alex.outcome is GoalAddOutcome.UPDATED
        assert alex.replaced_goal is steve.goal
        assert steve.goal.stop_signal is True

        assert follow.wait_started(2)
        assert manager.current_goal is alex.goal
        assert steve.goal.status is GoalStatus.STOPPED
        assert follow.calls[-1]["username"] == "Alex"
    finally:
        manager.shutdown()


def test_stop_marker_stops_ongoing_action():
    follow = BlockingAction("follow", merge_key="username")
    manager = build_test_scheduler(follow, background=True)
    try:
        running = manager.add_goal(goal("follow steve", ("follow", {"username": "Steve"})))
        assert follow.wait_started()

        result = manager.add_goal(goal("stop following", ("follow", {"stop": True})))

        assert result.outcome is GoalAddOutcome.STOPPED_EXISTING
        assert result.goal is running.goal
        assert manager.wait_until_idle(2.0)
        assert running.goal.status is GoalStatus.STOPPED
        assert manager.ongoing_actions == {}
    finally:
        manager.shutdown()


def test_stop_marker_without_ongoing_action_is_ignored():
    manager = build_test_scheduler(ScriptedAction("follow", merge_key="username"))

    result = manager.add_goal(goal("stop following", ("follow", {"stop": True})))

    assert result.outcome is GoalAddOutcome.IGNORED_ONGOING
    assert result.goal is None
    assert manager.queue_length == 0


def test_destroy_control_removes_queued_goal():
    manager = build_test_scheduler(ScriptedAction("wave"), include_builtin=True)
    target = manager.add_goal(goal("wave", ("wave", {}))).goal

    result = manager.add_goal(goal("never mind", ("destroyGoal", {"goalId": target.id})))

    assert result.outcome is GoalAddOutcome.STOPPED_EXISTING
    assert result.goal is None
    assert [c.hit for c in result.controls] == [True]
    assert manager.queue_length == 0


def test_control_for_unknown_goal_is_reported_as_miss():
    manager = build_test_scheduler(include_builtin=True)

    result = manager.add_goal(goal("never mind", ("cancelGoal", {"goalId": "nope"})))

    assert result.outcome is GoalAddOutcome.IGNORED_ONGOING
    assert result.controls[0].hit is False


def test_control_with_trailing_actions_queues_them_first():
    manager = build_test_scheduler(ScriptedAction("wave"), include_builtin=True)
    urgent = manager.add_goal(goal("urgent", ("wave", {"n": 1}), priority=10)).goal

    result = manager.add_goal(
        goal("pause that and wave", ("pauseGoal", {"goalId": urgent.id}), ("wave", {"n": 2}), priority=0)
    )

    assert result.outcome is GoalAddOutcome.ADDED
    assert result.controls[0].action_type == "pauseGoal"
    assert urgent.status is GoalStatus.PAUSED
    assert manager.queued_goals()[0] is result.goal
    assert result.goal.action_types == ["wave"]


def test_invalid_control_parameters_apply_nothing():
    manager = build_test_scheduler(ScriptedAction("wave"), include_builtin=True)
    target = manager.add_goal(goal("wave", ("wave", {}))).goal

    with pytest.raises(ValidationError):
        manager.add_goal(
            goal("bad", ("destroyGoal", {"goalId": target.id}), ("pauseGoal", {}))
        )

    assert manager.queued_goals() == [target]
