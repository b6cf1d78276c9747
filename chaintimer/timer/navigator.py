"""Navigation state machine over (position, run state).

Transitions
-----------
idle | paused → running          start
running → paused                 pause
any → running                    restart_current / previous / go_to
running → next slot | idle       next, skip, tick (auto-continue)

Every function is pure: it takes the prior ``SessionContext`` and the
wall-clock time of the call (epoch ms) and returns a ``Transition`` with
the next context plus any events collaborators should hear about.

Once the last slot of the last round is finished the session is
complete; start, next, skip, previous, go_to and auto-continue do nothing
until the session (or the last slot) is restarted.
"""

from __future__ import annotations

from dataclasses import replace

from . import aggregate
from .clock import Clock
from .model import (
    INCOMPLETE,
    SKIPPED,
    Position,
    RunState,
    TaskResult,
    TaskStatus,
    classify,
)
from .session import EventKind, SessionContext, SessionEvent, Transition


def _clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))


# ══════════════════════════════════════════════════════════════════════════
#  RUN / PAUSE
# ══════════════════════════════════════════════════════════════════════════


def start(ctx: SessionContext, now_ms: int) -> Transition:
    """Start or resume the current task's clock."""
    if ctx.run_state == RunState.RUNNING or ctx.session_complete:
        return Transition(ctx)
    return Transition(
        replace(ctx, clock=ctx.clock.start(now_ms), run_state=RunState.RUNNING)
    )


def pause(ctx: SessionContext, now_ms: int) -> Transition:
    if ctx.run_state != RunState.RUNNING:
        return Transition(ctx)
    return Transition(
        replace(ctx, clock=ctx.clock.pause(now_ms), run_state=RunState.PAUSED)
    )


def restart_current(ctx: SessionContext, now_ms: int) -> Transition:
    """Throw away the current slot's result and run it again from zero."""
    ctx = ctx.with_current_cell(INCOMPLETE)
    return Transition(
        replace(
            ctx,
            clock=ctx.clock.reset(now_ms, running=True),
            run_state=RunState.RUNNING,
            auto_latch=False,
            has_rung=False,
            session_complete=False,
        )
    )


# ══════════════════════════════════════════════════════════════════════════
#  RECORDING
# ══════════════════════════════════════════════════════════════════════════


def complete(ctx: SessionContext, actual_sec: float) -> SessionContext:
    """Record the current slot as finished after ``actual_sec`` seconds."""
    actual = max(0, int(actual_sec // 1))
    status = classify(actual, ctx.current_task.target_sec)
    return ctx.with_current_cell(TaskResult(status, actual))


# ══════════════════════════════════════════════════════════════════════════
#  MOVING
# ══════════════════════════════════════════════════════════════════════════


def _enter(
    ctx: SessionContext, position: Position, now_ms: int, rollover: int = 0
) -> Transition:
    ctx = replace(
        ctx,
        position=position,
        rollover_offset=rollover,
        clock=ctx.clock.reset(now_ms, running=True),
        run_state=RunState.RUNNING,
        auto_latch=False,
        has_rung=False,
        session_complete=False,
    )
    events = ()
    if rollover > 0:
        events = (
            SessionEvent(
                EventKind.ROLLOVER_APPLIED, position.round_index, rollover
            ),
        )
    return Transition(ctx, events)


def _advance(ctx: SessionContext, now_ms: int, rollover: int) -> Transition:
    pos = ctx.position
    if pos.task_index < ctx.last_task_index:
        return _enter(
            ctx, Position(pos.round_index, pos.task_index + 1), now_ms, rollover
        )

    if pos.round_index < ctx.last_round_index:
        entered = _enter(ctx, Position(pos.round_index + 1, 0), now_ms)
        done = SessionEvent(EventKind.ROUND_COMPLETE, pos.round_index)
        return Transition(entered.context, (done,) + entered.events)

    finished = replace(
        ctx,
        clock=ctx.clock.pause(now_ms),
        run_state=RunState.IDLE,
        rollover_offset=0,
        session_complete=True,
    )
    return Transition(
        finished,
        (SessionEvent(EventKind.SESSION_COMPLETE, pos.round_index),),
    )


def next_task(ctx: SessionContext, now_ms: int) -> Transition:
    """Mark the current slot done at its elapsed time and move on.

    With the rollover policy on, time left on a slot that is not the last
    in the chain is added to the next slot's target.
    """
    if ctx.session_complete:
        return Transition(ctx)

    rollover = 0
    remaining = aggregate.remaining_for_current_task(ctx, now_ms)
    if (
        ctx.policy.rollover
        and remaining > 0
        and ctx.position.task_index < ctx.last_task_index
    ):
        rollover = remaining

    ctx = complete(ctx, ctx.clock.elapsed(now_ms))
    return _advance(ctx, now_ms, rollover)


def skip(ctx: SessionContext, now_ms: int) -> Transition:
    """Mark the current slot skipped (it never donates time) and move on."""
    if ctx.session_complete:
        return Transition(ctx)
    return _advance(ctx.with_current_cell(SKIPPED), now_ms, 0)


def previous(ctx: SessionContext, now_ms: int) -> Transition:
    """Step back one slot, undoing its recorded result.

    At the very first slot of the session the current slot is reset and
    restarted in place.  Rollover received by the slot is not restored.
    """
    if ctx.session_complete:
        return Transition(ctx)

    pos = ctx.position
    if pos.task_index > 0:
        target = Position(pos.round_index, pos.task_index - 1)
    elif pos.round_index > 0:
        target = Position(pos.round_index - 1, ctx.last_task_index)
    else:
        target = pos

    ctx = ctx.with_cell(target.round_index, target.task_index, INCOMPLETE)
    return _enter(ctx, target, now_ms)


def go_to(
    ctx: SessionContext, round_index: int, task_index: int, now_ms: int
) -> Transition:
    """Jump straight to a slot; out-of-range indices are clamped."""
    if ctx.session_complete:
        return Transition(ctx)
    target = Position(
        _clamp(round_index, 0, ctx.last_round_index),
        _clamp(task_index, 0, ctx.last_task_index),
    )
    return _enter(ctx, target, now_ms)


# ══════════════════════════════════════════════════════════════════════════
#  POLLING
# ══════════════════════════════════════════════════════════════════════════


def tick(ctx: SessionContext, now_ms: int) -> Transition:
    """One poll of the host loop.

    Raises the time-up alert the first time remaining reaches zero for the
    current slot, then applies auto-continue once per slot when enabled.
    """
    if ctx.run_state != RunState.RUNNING:
        return Transition(ctx)
    if aggregate.remaining_for_current_task(ctx, now_ms) != 0:
        return Transition(ctx)

    events: tuple[SessionEvent, ...] = ()
    if not ctx.has_rung:
        ctx = replace(ctx, has_rung=True)
        events = (SessionEvent(EventKind.TIME_UP, ctx.position.round_index),)

    if not ctx.policy.auto_continue or ctx.auto_latch:
        return Transition(ctx, events)

    target = ctx.current_task.target_sec
    ctx = replace(ctx, auto_latch=True).with_current_cell(
        TaskResult(TaskStatus.COMPLETE_AT, target)
    )
    advanced = _advance(ctx, now_ms, 0)
    return Transition(advanced.context, events + advanced.events)


def stop_current(ctx: SessionContext) -> SessionContext:
    """Zero the current slot's clock and go idle, e.g. after retiming it."""
    return replace(ctx, clock=Clock(), run_state=RunState.IDLE)
