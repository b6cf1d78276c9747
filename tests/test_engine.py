"""Tests for the Qt session engine host.

Covers: signal emission on transitions, the poll timer lifecycle,
auto-continue via polling, rollover toasts, editing commands and
template loading.  Wall-clock time comes from a fake clock; polls are
driven by calling ``_on_tick`` directly.
"""

from chaintimer.timer.engine import SessionEngine
from chaintimer.timer.model import (
    DEFAULT_TASKS,
    LightColor,
    Position,
    RunState,
    SessionTemplate,
    Task,
    TaskResult,
    TaskStatus,
)

from helpers import SignalCollector


def finish_round(engine, clock, seconds_each=10):
    for _ in range(len(engine.chain)):
        clock.advance(seconds_each)
        engine.next_task()


# ═══════════════════════════════════════════════════════════════════════════
#  STATE TRANSITIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestStateTransitions:

    def test_initial_state(self, engine):
        assert engine.state == RunState.IDLE
        assert engine.position == Position(0, 0)
        assert engine.rounds_count == 3
        assert engine.tasks == list(DEFAULT_TASKS)
        assert engine.remaining == 180

    def test_start_pause_resume(self, engine, clock):
        c = SignalCollector()
        engine.state_changed.connect(c)

        engine.start()
        assert c.last == RunState.RUNNING
        clock.advance(30)
        engine.pause()
        assert c.last == RunState.PAUSED
        clock.advance(300)
        assert engine.elapsed == 30
        engine.resume()
        assert c.last == RunState.RUNNING
        clock.advance(5)
        assert engine.elapsed == 35
        assert engine.remaining == 145

    def test_start_twice_emits_once(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.start()
        engine.start()
        assert len(c) == 1

    def test_toggle(self, engine):
        engine.toggle()
        assert engine.is_running
        engine.toggle()
        assert engine.state == RunState.PAUSED

    def test_poll_timer_runs_only_while_running(self, engine):
        assert not engine._qt_timer.isActive()
        engine.start()
        assert engine._qt_timer.isActive()
        engine.pause()
        assert not engine._qt_timer.isActive()

    def test_tick_interval_has_a_floor(self, qapp, clock):
        e = SessionEngine(now_fn=clock, tick_interval_ms=1)
        assert e._qt_timer.interval() == 10


# ═══════════════════════════════════════════════════════════════════════════
#  POLLING
# ═══════════════════════════════════════════════════════════════════════════


class TestPolling:

    def test_tick_signal_emits_remaining(self, engine, clock):
        c = SignalCollector()
        engine.tick.connect(c)
        engine.start()
        clock.advance(12.5)
        engine._on_tick()
        assert c.last == 168

    def test_time_up_once_per_slot(self, engine, clock):
        c = SignalCollector()
        engine.time_up.connect(c)
        engine.start()
        clock.advance(180)
        engine._on_tick()
        clock.advance(1)
        engine._on_tick()
        assert len(c) == 1
        assert engine.is_overtime
        assert engine.overtime == 1
        assert engine.position == Position(0, 0)

    def test_auto_continue_advances(self, engine_auto, clock):
        pos = SignalCollector()
        engine_auto.position_changed.connect(pos)
        engine_auto.start()
        clock.advance(180)
        engine_auto._on_tick()
        assert pos.last == (0, 1)
        assert engine_auto.results[0][0] == TaskResult(TaskStatus.COMPLETE_AT, 180)

    def test_auto_continue_runs_whole_session(self, engine_auto, clock):
        rounds = SignalCollector()
        done = SignalCollector()
        engine_auto.round_completed.connect(rounds)
        engine_auto.session_completed.connect(done)
        engine_auto.start()
        for _ in range(200):
            clock.advance(30)
            engine_auto._on_tick()
            if engine_auto.session_complete:
                break
        assert rounds.items == [0, 1]
        assert len(done) == 1
        summary = done.last
        assert summary["rounds"] == 3
        assert summary["tasks"] == 3
        assert summary["target_seconds"] == 3 * 660
        assert summary["actual_seconds"] == 3 * 660
        assert summary["skipped"] == 0
        assert not engine_auto._qt_timer.isActive()

    def test_policy_can_be_toggled(self, engine, clock):
        engine.start()
        engine.auto_continue = True
        assert engine.context.policy.auto_continue
        clock.advance(180)
        engine._on_tick()
        assert engine.position == Position(0, 1)


# ═══════════════════════════════════════════════════════════════════════════
#  NAVIGATION
# ═══════════════════════════════════════════════════════════════════════════


class TestNavigation:

    def test_next_emits_position_and_results(self, engine, clock):
        pos = SignalCollector()
        res = SignalCollector()
        engine.position_changed.connect(pos)
        engine.results_changed.connect(res)
        engine.start()
        clock.advance(100)
        engine.next_task()
        assert pos.last == (0, 1)
        assert len(res) == 1
        assert engine.results[0][0] == TaskResult(TaskStatus.COMPLETE_UNDER, 100)

    def test_rollover_signal(self, engine_rollover, clock):
        c = SignalCollector()
        engine_rollover.rollover_applied.connect(c)
        engine_rollover.start()
        clock.advance(100)
        engine_rollover.next_task()
        assert c.last == 80
        assert engine_rollover.rollover_offset == 80
        assert engine_rollover.effective_target == 380
        assert engine_rollover.remaining == 380

    def test_round_completed_signal(self, engine, clock):
        c = SignalCollector()
        engine.round_completed.connect(c)
        engine.start()
        finish_round(engine, clock)
        assert c.items == [0]
        assert engine.position == Position(1, 0)

    def test_session_completed_goes_idle(self, engine, clock):
        c = SignalCollector()
        engine.session_completed.connect(c)
        engine.start()
        for _ in range(3):
            finish_round(engine, clock)
        assert len(c) == 1
        assert engine.state == RunState.IDLE
        assert engine.session_complete
        engine.next_task()
        engine.previous()
        assert engine.position == Position(2, 2)
        assert len(c) == 1

    def test_skip_and_summary(self, engine, clock):
        c = SignalCollector()
        engine.session_completed.connect(c)
        engine.set_rounds_count(1)
        engine.start()
        engine.skip()
        clock.advance(300)
        engine.next_task()
        engine.skip()
        assert c.last["skipped"] == 2
        assert c.last["target_seconds"] == 300
        assert c.last["actual_seconds"] == 300

    def test_right_arrow_skips_by_default(self, engine):
        engine.start()
        engine.right_arrow()
        assert engine.results[0][0].status == TaskStatus.SKIPPED

    def test_right_arrow_done_mode(self, engine, clock):
        engine.right_arrow_action = "done"
        engine.start()
        clock.advance(180)
        engine.right_arrow()
        assert engine.results[0][0].status == TaskStatus.COMPLETE_AT

    def test_bad_right_arrow_action_falls_back(self, engine):
        engine.right_arrow_action = "sideways"
        assert engine.right_arrow_action == "skip"

    def test_previous_and_restart_current(self, engine, clock):
        engine.start()
        clock.advance(50)
        engine.next_task()
        engine.previous()
        assert engine.position == Position(0, 0)
        assert engine.results[0][0] == TaskResult()
        clock.advance(20)
        engine.restart_current()
        assert engine.elapsed == 0
        assert engine.is_running

    def test_go_to_clamps(self, engine):
        engine.go_to(50, 50)
        assert engine.position == Position(2, 2)

    def test_round_and_session_values(self, engine, clock):
        engine.start()
        clock.advance(100)
        engine.next_task()
        clock.advance(50)
        assert engine.round_target == 660
        assert engine.session_target == 1980
        assert engine.round_remaining == 510
        assert engine.session_remaining == 1830

    def test_light_colors(self, engine, clock):
        engine.start()
        clock.advance(200)
        engine.next_task()
        assert engine.task_colors() == [
            LightColor.ORANGE, LightColor.YELLOW, LightColor.GRAY,
        ]
        assert engine.round_colors() == [
            LightColor.YELLOW, LightColor.GRAY, LightColor.GRAY,
        ]


# ═══════════════════════════════════════════════════════════════════════════
#  EDITING
# ═══════════════════════════════════════════════════════════════════════════


class TestEditing:

    def test_edit_current_task_stops_clock(self, engine, clock):
        engine.start()
        clock.advance(40)
        engine.edit_done("t1", "Warm up", "4:00")
        assert engine.current_task == Task("t1", "Warm up", 240)
        assert engine.state == RunState.IDLE
        assert engine.elapsed == 0
        assert engine.remaining == 240

    def test_edit_other_task_keeps_running(self, engine, clock):
        engine.start()
        clock.advance(40)
        engine.edit_done("t3", "Cool down", 90)
        assert engine.is_running
        assert engine.elapsed == 40
        assert engine.tasks[2].target_sec == 90

    def test_edit_with_garbage_time_is_zero(self, engine):
        engine.edit_done("t2", "B", "soon")
        assert engine.tasks[1].target_sec == 0

    def test_add_task_emits_chain_changed(self, engine):
        c = SignalCollector()
        engine.chain_changed.connect(c)
        task = engine.add_task("Plank", 45)
        assert task is not None
        assert task.name == "Plank"
        assert len(c) == 1
        assert all(len(row) == 4 for row in engine.results)

    def test_add_task_when_full_returns_none(self, engine):
        for _ in range(22):
            engine.add_task()
        assert len(engine.chain) == 25
        assert engine.add_task() is None

    def test_remove_and_move(self, engine):
        engine.move_task(0, 2)
        assert engine.chain == ("t2", "t3", "t1")
        engine.remove_task(0)
        assert engine.chain == ("t3", "t1")
        assert all(len(row) == 2 for row in engine.results)

    def test_set_rounds_count(self, engine):
        engine.set_rounds_count(30)
        assert engine.rounds_count == 25
        engine.set_rounds_count(0)
        assert engine.rounds_count == 1

    def test_restart_session(self, engine, clock):
        engine.start()
        clock.advance(10)
        engine.next_task()
        engine.restart_session()
        assert engine.position == Position(0, 0)
        assert engine.state == RunState.IDLE
        assert not engine._qt_timer.isActive()

    def test_clear_all(self, engine):
        engine.clear_all()
        assert len(engine.chain) == 1
        assert engine.rounds_count == 1


# ═══════════════════════════════════════════════════════════════════════════
#  TEMPLATES
# ═══════════════════════════════════════════════════════════════════════════


class TestTemplates:

    def test_load_template_restarts(self, engine, clock):
        engine.start()
        clock.advance(10)
        engine.next_task()

        states = SignalCollector()
        engine.state_changed.connect(states)
        template = SessionTemplate(
            id="seq-a",
            name="Drills",
            tasks=(Task("d1", "Sprint", 30), Task("d2", "Rest", 90)),
            chain=("d1", "d2", "d1"),
            rounds_count=5,
        )
        engine.load_template(template)
        assert engine.chain == ("d1", "d2", "d1")
        assert engine.rounds_count == 5
        assert engine.position == Position(0, 0)
        assert states.last == RunState.IDLE
        assert engine.session_target == 150 * 5

    def test_to_template(self, engine):
        t = engine.to_template("Default", template_id="seq-x")
        assert t.id == "seq-x"
        assert t.chain == ("t1", "t2", "t3")
        assert t.rounds_count == 3
