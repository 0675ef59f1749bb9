# tests/test_goal_manager_controls.py
"""
Tests for the GoalManager control surface.

Covers:
- stop_current_goal keeps the loop going with the next goal
- pause / resume of a running goal (hooks, resume point)
- pause / resume of a queued goal
- destroy from every state, and that destroyed goals leave no trace
- cancel_goal_by_id and clear_goals
- optional auto-resume of paused goals
- control follow-up actions preempt the running goal
"""

from __future__ import annotations

from goals.goal import GoalStatus
from goals.manager import GoalAddOutcome
from testing.scripted import BlockingAction, ScriptedAction, build_test_scheduler


def goal(intent, *actions, priority=1):
    return {
        "intent": intent,
        "priority": priority,
        "actions": [{"type": t, "parameters": dict(p)} for t, p in actions],
    }


def test_stop_current_goal_moves_on_to_next_goal():
    hold = BlockingAction("hold")
    wave = ScriptedAction("wave")
    manager = build_test_scheduler(hold, wave, background=True)
    try:
        first = manager.add_goal(goal("hold", ("hold", {}))).goal
        assert hold.wait_started()
        second = manager.add_goal(goal("wave", ("wave", {}))).goal

        stopped = manager.stop_current_goal()

        assert stopped is first
        assert first.status is GoalStatus.STOPPED
        assert manager.wait_until_idle(2.0)
        assert second.status is GoalStatus.COMPLETED
        assert [g.id for g in manager.get_recent_goals()] == [first.id, second.id]
    finally:
        manager.shutdown()


def test_stop_current_goal_without_running_goal():
    manager = build_test_scheduler(ScriptedAction("wave"))
    assert manager.stop_current_goal() is None


def test_stop_specific_action_with_nothing_ongoing():
    manager = build_test_scheduler(ScriptedAction("wave"))
    assert manager.stop_specific_action("wave") is None


def test_pause_and_resume_running_goal_restarts_interrupted_action():
    hold = BlockingAction("hold")
    wave = ScriptedAction("wave")
    manager = build_test_scheduler(hold, wave, background=True)
    try:
        target = manager.add_goal(goal("hold then wave", ("hold", {}), ("wave", {}))).goal
        assert hold.wait_started()

        paused = manager.pause_goal(target.id)

        assert paused is target
        assert target.status is GoalStatus.PAUSED
        assert hold.hook_calls == ["pause"]
        assert manager.current_goal is None
        assert target.id in manager.paused_goals
        assert manager.get_goal_state()["paused_goals"] == [{"id": target.id, "intent": "hold then wave"}]
        assert hold.wait_finished()
        assert manager.wait_until_idle(2.0)
        assert wave.calls == []
        assert not manager.executor.is_paused("hold")

        resumed = manager.resume_goal(target.id)

        assert resumed is target
        assert target.id not in manager.paused_goals
        assert hold.wait_started(2)
        assert target.next_action_index == 0
        hold.release()
        assert manager.wait_until_idle(2.0)
        assert target.status is GoalStatus.COMPLETED
        assert len(wave.calls) == 1
    finally:
        manager.shutdown()


def test_pause_and_resume_queued_goal():
    manager = build_test_scheduler(ScriptedAction("wave"), ScriptedAction("nod"))
    first = manager.add_goal(goal("wave", ("wave", {}))).goal
    second = manager.add_goal(goal("nod", ("nod", {}))).goal

    assert manager.pause_goal(first.id) is first
    assert manager.queued_goals() == [second]

    manager.process_goals()
    assert first.status is GoalStatus.PAUSED
    assert second.status is GoalStatus.COMPLETED

    assert manager.resume_goal(first.id) is first
    assert first.status is GoalStatus.QUEUED
    manager.process_goals()
    assert first.status is GoalStatus.COMPLETED


def test_pause_and_resume_unknown_ids():
    manager = build_test_scheduler(ScriptedAction("wave"))
    queued = manager.add_goal(goal("wave", ("wave", {}))).goal

    assert manager.pause_goal("missing") is None
    assert manager.resume_goal("missing") is None
    # A queued goal is not paused, so it cannot be resumed.
    assert manager.resume_goal(queued.id) is None


def test_destroy_queued_and_paused_goals():
    manager = build_test_scheduler(ScriptedAction("wave"), ScriptedAction("nod"))
    queued = manager.add_goal(goal("wave", ("wave", {}))).goal
    paused = manager.add_goal(goal("nod", ("nod", {}))).goal
    manager.pause_goal(paused.id)

    assert manager.destroy_goal(queued.id) is queued
    assert manager.destroy_goal(paused.id) is paused

    assert manager.queue_length == 0
    assert manager.paused_goals == {}
    assert manager.get_all_goals() == []
    assert manager.cancel_goal_by_id(queued.id) is None
    assert manager.destroy_goal(queued.id) is None


def test_destroy_running_goal_interrupts_it():
    hold = BlockingAction("hold")
    wave = ScriptedAction("wave")
    manager = build_test_scheduler(hold, wave, background=True)
    try:
        target = manager.add_goal(goal("hold then wave", ("hold", {}), ("wave", {}))).goal
        assert hold.wait_started()

        assert manager.destroy_goal(target.id) is target

        assert hold.wait_finished()
        assert manager.wait_until_idle(2.0)
        assert wave.calls == []
        assert manager.get_goal(target.id) is None
        assert manager.get_recent_goals() == []
        assert manager.ongoing_actions == {}
    finally:
        manager.shutdown()


def test_cancel_goal_by_id_for_queued_and_running_goals():
    hold = BlockingAction("hold")
    manager = build_test_scheduler(hold, ScriptedAction("wave"), background=True)
    try:
        running = manager.add_goal(goal("hold", ("hold", {}))).goal
        assert hold.wait_started()
        queued = manager.add_goal(goal("wave", ("wave", {}))).goal
        # The queued goal may not start while the first one runs.
        assert manager.cancel_goal_by_id(queued.id) is queued
        assert queued.status is GoalStatus.STOPPED

        assert manager.cancel_goal_by_id(running.id) is running
        assert manager.wait_until_idle(2.0)
        assert running.status is GoalStatus.STOPPED
        assert {g.id for g in manager.get_recent_goals()} == {queued.id, running.id}
        assert manager.cancel_goal_by_id("missing") is None
    finally:
        manager.shutdown()


def test_clear_goals_drops_queued_and_paused_only():
    hold = BlockingAction("hold")
    manager = build_test_scheduler(hold, ScriptedAction("wave"), ScriptedAction("nod"), background=True)
    try:
        running = manager.add_goal(goal("hold", ("hold", {}))).goal
        assert hold.wait_started()
        queued = manager.add_goal(goal("wave", ("wave", {}))).goal
        paused = manager.add_goal(goal("nod", ("nod", {}))).goal
        manager.pause_goal(paused.id)

        assert manager.clear_goals() == 2

        assert queued.status is GoalStatus.STOPPED
        assert paused.status is GoalStatus.STOPPED
        assert manager.current_goal is running
        assert manager.queue_length == 0
        assert manager.paused_goals == {}
    finally:
        manager.shutdown()


def test_paused_goals_stay_paused_by_default():
    manager = build_test_scheduler(ScriptedAction("wave"))
    target = manager.add_goal(goal("wave", ("wave", {}))).goal
    manager.pause_goal(target.id)

    manager.process_goals()

    assert target.status is GoalStatus.PAUSED


def test_auto_resume_promotes_oldest_paused_goal():
    manager = build_test_scheduler(ScriptedAction("wave"), ScriptedAction("nod"), auto_resume_paused=True)
    older = manager.add_goal(goal("wave", ("wave", {}))).goal
    newer = manager.add_goal(goal("nod", ("nod", {}))).goal
    manager.pause_goal(older.id)
    manager.pause_goal(newer.id)

    manager.process_goals()

    assert older.status is GoalStatus.COMPLETED
    assert newer.status is GoalStatus.COMPLETED
    assert [g.id for g in manager.get_recent_goals()] == [older.id, newer.id]


def test_control_follow_up_runs_before_the_running_goal_finishes():
    hold = BlockingAction("hold")
    wave = ScriptedAction("wave")
    manager = build_test_scheduler(hold, wave, ScriptedAction("nod"), background=True, include_builtin=True)
    try:
        running = manager.add_goal(goal("hold", ("hold", {}))).goal
        assert hold.wait_started()
        queued = manager.add_goal(goal("nod", ("nod", {}))).goal

        result = manager.add_goal(
            goal("drop that and wave", ("destroyGoal", {"goalId": queued.id}), ("wave", {}))
        )

        assert result.outcome is GoalAddOutcome.ADDED
        assert result.controls[0].hit
        # The held goal restarts its interrupted action once the wave is done.
        assert hold.wait_started(2)
        assert len(wave.calls) == 1
        assert result.goal.status is GoalStatus.COMPLETED
        assert manager.current_goal is running
        assert running.next_action_index == 0

        hold.release()
        assert manager.wait_until_idle(2.0)
        assert running.status is GoalStatus.COMPLETED
        assert [g.id for g in manager.get_recent_goals()] == [result.goal.id, running.id]
    finally:
        manager.shutdown()
