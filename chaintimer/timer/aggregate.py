"""Read-side values derived from a session context.

Nothing here is cached; the host re-derives every value on each poll.
Remaining times are clamped at zero; running past the target is reported
separately by ``overtime_sec``.
"""

from __future__ import annotations

from .model import LightColor, RunState, TaskStatus, result_color
from .session import SessionContext


# ── targets ───────────────────────────────────────────────────────────────


def round_target(ctx: SessionContext, round_index: int) -> int:
    """Sum of targets for the round, skipped cells contributing nothing."""
    row = ctx.rounds[round_index]
    return sum(
        ctx.task_at(i).target_sec
        for i, result in enumerate(row)
        if result.status != TaskStatus.SKIPPED
    )


def session_target(ctx: SessionContext) -> int:
    return sum(round_target(ctx, r) for r in range(ctx.rounds_count))


def effective_target(ctx: SessionContext) -> int:
    """Current task's target plus any rollover it received."""
    return ctx.current_task.target_sec + ctx.rollover_offset


# ── actuals ───────────────────────────────────────────────────────────────


def round_elapsed_actual(
    ctx: SessionContext, round_index: int, *, exclude: int | None = None
) -> int:
    return sum(
        result.actual_sec or 0
        for i, result in enumerate(ctx.rounds[round_index])
        if i != exclude
    )


def elapsed_sec(ctx: SessionContext, now_ms: int) -> int:
    return ctx.clock.elapsed(now_ms)


def _round_spent(ctx: SessionContext, now_ms: int) -> int:
    pos = ctx.position
    if ctx.session_complete:
        # The last slot is recorded; its paused clock no longer counts.
        return round_elapsed_actual(ctx, pos.round_index)
    return round_elapsed_actual(
        ctx, pos.round_index, exclude=pos.task_index
    ) + elapsed_sec(ctx, now_ms)


def _session_spent(ctx: SessionContext, now_ms: int) -> int:
    earlier = sum(
        round_elapsed_actual(ctx, r) for r in range(ctx.position.round_index)
    )
    return earlier + _round_spent(ctx, now_ms)


# ── remaining / overtime ──────────────────────────────────────────────────


def remaining_for_current_task(ctx: SessionContext, now_ms: int) -> int:
    return max(0, effective_target(ctx) - elapsed_sec(ctx, now_ms))


def remaining_for_round(ctx: SessionContext, now_ms: int) -> int:
    target = round_target(ctx, ctx.position.round_index)
    return max(0, target - _round_spent(ctx, now_ms))


def remaining_for_session(ctx: SessionContext, now_ms: int) -> int:
    return max(0, session_target(ctx) - _session_spent(ctx, now_ms))


def is_overtime(ctx: SessionContext, now_ms: int) -> bool:
    return elapsed_sec(ctx, now_ms) > effective_target(ctx)


def overtime_sec(ctx: SessionContext, now_ms: int) -> int:
    return max(0, elapsed_sec(ctx, now_ms) - effective_target(ctx))


# ── progress (0.0 → 1.0) ──────────────────────────────────────────────────


def _fraction(done: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return max(0.0, min(1.0, done / total))


def task_progress(ctx: SessionContext, now_ms: int) -> float:
    target = effective_target(ctx)
    if target <= 0:
        return 1.0
    return _fraction(ctx.clock.elapsed_ms(now_ms), target * 1000)


def round_progress(ctx: SessionContext, now_ms: int) -> float:
    target = round_target(ctx, ctx.position.round_index)
    return _fraction(target - remaining_for_round(ctx, now_ms), target)


def session_progress(ctx: SessionContext, now_ms: int) -> float:
    target = session_target(ctx)
    return _fraction(target - remaining_for_session(ctx, now_ms), target)


# ── light colours ─────────────────────────────────────────────────────────


def task_light_color(
    ctx: SessionContext, task_index: int, now_ms: int
) -> LightColor:
    """Colour of a slot in the current round."""
    current = ctx.position.task_index
    result = ctx.cell(ctx.position.round_index, task_index)
    if result.status == TaskStatus.SKIPPED or task_index > current:
        return LightColor.GRAY
    if task_index < current:
        return result_color(result.status)
    if ctx.run_state == RunState.IDLE:
        return result_color(result.status)
    if is_overtime(ctx, now_ms):
        return LightColor.RED
    return LightColor.YELLOW


def round_light_color(
    ctx: SessionContext, round_index: int, now_ms: int
) -> LightColor:
    current = ctx.position.round_index
    if round_index > current:
        return LightColor.GRAY

    target = round_target(ctx, round_index)
    row = ctx.rounds[round_index]
    if all(result.is_done for result in row):
        actual = round_elapsed_actual(ctx, round_index)
        return LightColor.ORANGE if actual > target else LightColor.GREEN

    if round_index < current:
        return LightColor.GRAY
    if ctx.run_state == RunState.IDLE:
        return LightColor.GRAY
    if _round_spent(ctx, now_ms) > target:
        return LightColor.RED
    return LightColor.YELLOW
