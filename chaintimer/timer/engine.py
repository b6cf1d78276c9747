"""Qt host for the session engine.

``SessionEngine`` owns exactly one ``SessionContext`` and replaces it
wholesale on every command, so slots connected to its signals always read
a consistent chain and result matrix.

The engine never counts time itself.  A ``QTimer`` polls on a short
interval while a task is running; each poll reads the wall clock and
re-derives remaining time from the context.

Commands
--------
start / resume        idle | paused → running
pause                 running → paused
restart_current       reset the current slot and run it from zero
next_task             record elapsed time, roll over leftovers, advance
skip                  record a skip, advance
previous              undo the previous slot and go back to it
right_arrow           skip or next_task depending on configuration
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from . import aggregate, chain, navigator
from .model import (
    DEFAULT_ROUNDS,
    DEFAULT_TASKS,
    TICK_INTERVAL_MS,
    LightColor,
    Policy,
    Position,
    RunState,
    SessionTemplate,
    Task,
    TaskResult,
    TaskStatus,
)
from .session import EventKind, SessionContext, Transition, new_session
from .timefmt import parse_time

logger = logging.getLogger(__name__)

RIGHT_ARROW_ACTIONS = ("skip", "done")


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class SessionEngine(QObject):
    """Chain-of-tasks × rounds timer with skip, rollover and auto-continue.

    Signals
    -------
    tick(remaining_seconds: int)
        Emitted on every poll while running.
    state_changed(new_state: RunState)
        Emitted when the run state changes.
    position_changed(round_index: int, task_index: int)
        Emitted when the current slot changes.
    results_changed()
        Emitted when any cell of the result matrix changes.
    chain_changed()
        Emitted after a catalog, chain or round-count edit.
    round_completed(round_index: int)
        A round other than the last was finished.
    session_completed(summary: dict)
        The last slot of the last round was finished.  Keys:
        ``rounds``, ``tasks``, ``target_seconds``, ``actual_seconds``,
        ``skipped``.
    rollover_applied(seconds: int)
        Leftover time was added to the slot just entered.
    time_up()
        Remaining time for the current slot reached zero (once per slot).
    """

    tick = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    position_changed = pyqtSignal(int, int)
    results_changed = pyqtSignal()
    chain_changed = pyqtSignal()
    round_completed = pyqtSignal(int)
    session_completed = pyqtSignal(object)
    rollover_applied = pyqtSignal(int)
    time_up = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        tasks: tuple[Task, ...] = DEFAULT_TASKS,
        rounds_count: int = DEFAULT_ROUNDS,
        auto_continue: bool = False,
        rollover: bool = False,
        right_arrow_action: str = "skip",
        tick_interval_ms: int = TICK_INTERVAL_MS,
        now_fn: Callable[[], int] | None = None,
    ) -> None:
        super().__init__(parent)

        self._now_fn: Callable[[], int] = now_fn or wall_clock_ms
        self._right_arrow_action = "skip"
        self.right_arrow_action = right_arrow_action

        self._ctx: SessionContext = new_session(
            tasks,
            rounds_count=rounds_count,
            policy=Policy(auto_continue=auto_continue, rollover=rollover),
        )

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(max(10, int(tick_interval_ms)))
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def context(self) -> SessionContext:
        """The current immutable session value."""
        return self._ctx

    @property
    def state(self) -> RunState:
        return self._ctx.run_state

    @property
    def position(self) -> Position:
        return self._ctx.position

    @property
    def is_running(self) -> bool:
        return self._ctx.run_state == RunState.RUNNING

    @property
    def session_complete(self) -> bool:
        return self._ctx.session_complete

    @property
    def chain(self) -> tuple[str, ...]:
        return self._ctx.chain

    @property
    def tasks(self) -> list[Task]:
        """Tasks in chain order."""
        return [self._ctx.task_at(i) for i in range(self._ctx.chain_length)]

    @property
    def current_task(self) -> Task:
        return self._ctx.current_task

    @property
    def rounds_count(self) -> int:
        return self._ctx.rounds_count

    @property
    def results(self) -> tuple[tuple[TaskResult, ...], ...]:
        return self._ctx.rounds

    @property
    def rollover_offset(self) -> int:
        return self._ctx.rollover_offset

    @property
    def auto_continue(self) -> bool:
        return self._ctx.policy.auto_continue

    @auto_continue.setter
    def auto_continue(self, value: bool) -> None:
        self._set_policy(auto_continue=bool(value))

    @property
    def rollover(self) -> bool:
        return self._ctx.policy.rollover

    @rollover.setter
    def rollover(self, value: bool) -> None:
        self._set_policy(rollover=bool(value))

    @property
    def right_arrow_action(self) -> str:
        return self._right_arrow_action

    @right_arrow_action.setter
    def right_arrow_action(self, value: str) -> None:
        if value not in RIGHT_ARROW_ACTIONS:
            logger.warning("Unknown right arrow action %r, using 'skip'", value)
            value = "skip"
        self._right_arrow_action = value

    # ── derived time values (read the clock now) ──────────────────────

    @property
    def elapsed(self) -> int:
        return aggregate.elapsed_sec(self._ctx, self._now_fn())

    @property
    def remaining(self) -> int:
        """Seconds left on the current slot (never negative)."""
        return aggregate.remaining_for_current_task(self._ctx, self._now_fn())

    @property
    def effective_target(self) -> int:
        return aggregate.effective_target(self._ctx)

    @property
    def round_remaining(self) -> int:
        return aggregate.remaining_for_round(self._ctx, self._now_fn())

    @property
    def session_remaining(self) -> int:
        return aggregate.remaining_for_session(self._ctx, self._now_fn())

    @property
    def round_target(self) -> int:
        return aggregate.round_target(self._ctx, self._ctx.position.round_index)

    @property
    def session_target(self) -> int:
        return aggregate.session_target(self._ctx)

    @property
    def is_overtime(self) -> bool:
        return aggregate.is_overtime(self._ctx, self._now_fn())

    @property
    def overtime(self) -> int:
        return aggregate.overtime_sec(self._ctx, self._now_fn())

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current slot."""
        return aggregate.task_progress(self._ctx, self._now_fn())

    def task_colors(self) -> list[LightColor]:
        now = self._now_fn()
        return [
            aggregate.task_light_color(self._ctx, i, now)
            for i in range(self._ctx.chain_length)
        ]

    def round_colors(self) -> list[LightColor]:
        now = self._now_fn()
        return [
            aggregate.round_light_color(self._ctx, r, now)
            for r in range(self._ctx.rounds_count)
        ]

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        self._apply(navigator.start(self._ctx, self._now_fn()))

    resume = start

    def pause(self) -> None:
        self._apply(navigator.pause(self._ctx, self._now_fn()))

    def toggle(self) -> None:
        if self.is_running:
            self.pause()
        else:
            self.start()

    def restart_current(self) -> None:
        self._apply(navigator.restart_current(self._ctx, self._now_fn()))

    def next_task(self) -> None:
        self._apply(navigator.next_task(self._ctx, self._now_fn()))

    def skip(self) -> None:
        self._apply(navigator.skip(self._ctx, self._now_fn()))

    def previous(self) -> None:
        self._apply(navigator.previous(self._ctx, self._now_fn()))

    def go_to(self, round_index: int, task_index: int) -> None:
        self._apply(
            navigator.go_to(self._ctx, round_index, task_index, self._now_fn())
        )

    def right_arrow(self) -> None:
        if self._right_arrow_action == "done":
            self.next_task()
        else:
            self.skip()

    # ══════════════════════════════════════════════════════════════════
    #  EDITING
    # ══════════════════════════════════════════════════════════════════

    def edit_done(self, task_id: str, name: str, target: int | str) -> None:
        """Finish editing a task.  ``target`` is seconds or ``M:SS`` text.

        Editing the task in the current slot stops its clock at zero.
        """
        target_sec = parse_time(target) if isinstance(target, str) else target
        ctx = chain.update_task(self._ctx, task_id, name, target_sec)
        if task_id == ctx.current_task.id:
            ctx = navigator.stop_current(ctx)
        self._apply(Transition(ctx), edited=True)

    def add_task(
        self, name: str | None = None, target_sec: int | None = None
    ) -> Task | None:
        """Append a task; returns it, or ``None`` when the chain is full."""
        kwargs = {}
        if name is not None:
            kwargs["name"] = name
        if target_sec is not None:
            kwargs["target_sec"] = target_sec
        ctx = chain.add_task(self._ctx, **kwargs)
        if ctx is self._ctx:
            return None
        self._apply(Transition(ctx), edited=True)
        return ctx.task_at(ctx.last_task_index)

    def remove_task(self, task_index: int) -> None:
        self._apply(
            Transition(chain.remove_task(self._ctx, task_index)), edited=True
        )

    def move_task(self, from_index: int, to_index: int) -> None:
        self._apply(
            Transition(chain.move_task(self._ctx, from_index, to_index)),
            edited=True,
        )

    def set_rounds_count(self, count) -> None:
        self._apply(
            Transition(chain.set_rounds_count(self._ctx, count)), edited=True
        )

    def restart_session(self) -> None:
        self._apply(Transition(chain.restart_session(self._ctx)), edited=True)

    def clear_all(self) -> None:
        self._apply(Transition(chain.clear_all(self._ctx)), edited=True)

    def load_template(self, template: SessionTemplate) -> None:
        logger.info(
            "Loading template %r (%d slots × %d rounds)",
            template.name, len(template.chain), template.rounds_count,
        )
        self._apply(
            Transition(chain.load_template(self._ctx, template)), edited=True
        )

    def to_template(
        self, name: str, template_id: str | None = None
    ) -> SessionTemplate:
        return chain.to_template(self._ctx, name, template_id)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _set_policy(self, **changes) -> None:
        policy = replace(self._ctx.policy, **changes)
        self._apply(Transition(replace(self._ctx, policy=policy)))

    def _on_tick(self) -> None:
        now = self._now_fn()
        self._apply(navigator.tick(self._ctx, now))
        if self.is_running:
            self.tick.emit(aggregate.remaining_for_current_task(self._ctx, now))

    def _apply(self, transition: Transition, *, edited: bool = False) -> None:
        before = self._ctx
        after, events = transition
        self._ctx = after

        if after.run_state != before.run_state:
            logger.debug("Run state %s → %s", before.run_state.value,
                         after.run_state.value)
            if after.run_state == RunState.RUNNING:
                self._qt_timer.start()
            else:
                self._qt_timer.stop()
            self.state_changed.emit(after.run_state)

        if edited:
            self.chain_changed.emit()
        if after.position != before.position:
            logger.debug("Position → round %d, task %d",
                         after.position.round_index, after.position.task_index)
            self.position_changed.emit(
                after.position.round_index, after.position.task_index
            )
        if after.rounds != before.rounds:
            self.results_changed.emit()

        for event in events:
            self._emit_event(event.kind, event.round_index, event.seconds)

    def _emit_event(self, kind: EventKind, round_index: int, seconds: int) -> None:
        if kind == EventKind.ROUND_COMPLETE:
            logger.info("Round %d complete", round_index + 1)
            self.round_completed.emit(round_index)
        elif kind == EventKind.SESSION_COMPLETE:
            logger.info("Session complete")
            self.session_completed.emit(self._summary())
        elif kind == EventKind.ROLLOVER_APPLIED:
            logger.debug("Rolled over %d s", seconds)
            self.rollover_applied.emit(seconds)
        elif kind == EventKind.TIME_UP:
            self.time_up.emit()

    def _summary(self) -> dict:
        ctx = self._ctx
        cells = [cell for row in ctx.rounds for cell in row]
        return {
            "rounds": ctx.rounds_count,
            "tasks": ctx.chain_length,
            "target_seconds": aggregate.session_target(ctx),
            "actual_seconds": sum(c.actual_sec or 0 for c in cells),
            "skipped": sum(1 for c in cells if c.status == TaskStatus.SKIPPED),
        }
