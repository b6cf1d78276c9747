"""Task catalog and chain editing.

Each edit that changes the chain length resizes every row of the result
matrix in the same returned context, so chain length and row length
always agree.  Edits that would break the 1..25 slot or round limits are
clamped or ignored rather than reported.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Iterable

from .clock import Clock
from .model import (
    MAX_ROUNDS,
    MAX_TASKS,
    NEW_TASK_NAME,
    NEW_TASK_SECONDS,
    Position,
    RunState,
    SessionTemplate,
    Task,
)
from .session import (
    SessionContext,
    blank_matrix,
    blank_row,
    resize_matrix,
)


def new_task_id() -> str:
    return uuid.uuid4().hex


def _clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))


def _as_count(value) -> int:
    """Floor to an integer in 1..MAX_ROUNDS; junk becomes 1."""
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 1
    if math.isnan(n) or n < 1:
        return 1
    return int(min(n, MAX_ROUNDS) // 1)


# ══════════════════════════════════════════════════════════════════════════
#  CATALOG
# ══════════════════════════════════════════════════════════════════════════


def update_task(
    ctx: SessionContext, task_id: str, name: str, target_sec: int
) -> SessionContext:
    if task_id not in ctx.tasks:
        return ctx
    tasks = dict(ctx.tasks)
    tasks[task_id] = Task(task_id, name, max(0, int(target_sec)))
    return replace(ctx, tasks=tasks)


def _merged(ctx: SessionContext, incoming: Iterable[Task]) -> dict[str, Task]:
    tasks = dict(ctx.tasks)
    for task in incoming:
        tasks[task.id] = task
    return tasks


# ══════════════════════════════════════════════════════════════════════════
#  CHAIN
# ══════════════════════════════════════════════════════════════════════════


def add_task(
    ctx: SessionContext,
    name: str = NEW_TASK_NAME,
    target_sec: int = NEW_TASK_SECONDS,
    task_id: str | None = None,
) -> SessionContext:
    """Append a new task to the end of the chain."""
    if ctx.chain_length >= MAX_TASKS:
        return ctx
    task = Task(task_id or new_task_id(), name, max(0, int(target_sec)))
    tasks = dict(ctx.tasks)
    tasks[task.id] = task
    return replace(
        ctx,
        tasks=tasks,
        chain=ctx.chain + (task.id,),
        rounds=tuple(row + blank_row(1) for row in ctx.rounds),
    )


def remove_task(ctx: SessionContext, task_index: int) -> SessionContext:
    """Drop one slot and its cells.  The last remaining slot stays."""
    if ctx.chain_length <= 1 or not 0 <= task_index < ctx.chain_length:
        return ctx

    removed_id = ctx.chain[task_index]
    chain = ctx.chain[:task_index] + ctx.chain[task_index + 1:]
    rounds = tuple(row[:task_index] + row[task_index + 1:] for row in ctx.rounds)

    tasks = dict(ctx.tasks)
    if removed_id not in chain:
        del tasks[removed_id]

    pos = ctx.position
    current = pos.task_index
    if task_index == current and task_index == ctx.last_task_index:
        current = 0
    elif task_index < current:
        current -= 1

    return replace(
        ctx,
        tasks=tasks,
        chain=chain,
        rounds=rounds,
        position=Position(pos.round_index, _clamp(current, 0, len(chain) - 1)),
    )


def move_task(
    ctx: SessionContext, from_index: int, to_index: int
) -> SessionContext:
    """Reorder the chain; every row's cells move with their slot."""
    last = ctx.last_task_index
    from_index = _clamp(from_index, 0, last)
    to_index = _clamp(to_index, 0, last)
    if from_index == to_index:
        return ctx

    def moved(seq: tuple) -> tuple:
        items = list(seq)
        items.insert(to_index, items.pop(from_index))
        return tuple(items)

    return replace(
        ctx,
        chain=moved(ctx.chain),
        rounds=tuple(moved(row) for row in ctx.rounds),
    )


def set_chain(
    ctx: SessionContext, chain: Iterable[str], tasks: Iterable[Task] = ()
) -> SessionContext:
    """Replace the chain, merging ``tasks`` into the catalog first.

    Rows are padded or truncated at the tail.  Every id must resolve in
    the merged catalog.
    """
    catalog = _merged(ctx, tasks)
    ids = tuple(chain)[:MAX_TASKS]
    if not ids:
        return ctx
    missing = [tid for tid in ids if tid not in catalog]
    if missing:
        raise KeyError(f"chain references unknown task ids: {missing}")

    pos = ctx.position
    return replace(
        ctx,
        tasks=catalog,
        chain=ids,
        rounds=resize_matrix(ctx.rounds, len(ids)),
        position=Position(
            pos.round_index, _clamp(pos.task_index, 0, len(ids) - 1)
        ),
    )


# ══════════════════════════════════════════════════════════════════════════
#  ROUNDS / SESSION
# ══════════════════════════════════════════════════════════════════════════


def set_rounds_count(ctx: SessionContext, count) -> SessionContext:
    n = _as_count(count)
    if n == ctx.rounds_count:
        return ctx
    if n > ctx.rounds_count:
        rounds = ctx.rounds + blank_matrix(n - ctx.rounds_count, ctx.chain_length)
    else:
        rounds = ctx.rounds[:n]
    pos = ctx.position
    return replace(
        ctx,
        rounds=rounds,
        position=Position(_clamp(pos.round_index, 0, n - 1), pos.task_index),
        # New rounds reopen a finished session.
        session_complete=ctx.session_complete and n < ctx.rounds_count,
    )


def restart_session(ctx: SessionContext) -> SessionContext:
    """Every cell incomplete, back to the first slot, clock stopped."""
    return replace(
        ctx,
        rounds=blank_matrix(ctx.rounds_count, ctx.chain_length),
        position=Position(),
        run_state=RunState.IDLE,
        clock=Clock(),
        rollover_offset=0,
        auto_latch=False,
        has_rung=False,
        session_complete=False,
    )


def clear_all(ctx: SessionContext) -> SessionContext:
    """Start over with a single default task and one round."""
    task = Task(new_task_id(), NEW_TASK_NAME, NEW_TASK_SECONDS)
    ctx = replace(
        ctx,
        tasks={task.id: task},
        chain=(task.id,),
        rounds=blank_matrix(1, 1),
    )
    return restart_session(ctx)


# ══════════════════════════════════════════════════════════════════════════
#  TEMPLATES
# ══════════════════════════════════════════════════════════════════════════


def load_template(
    ctx: SessionContext, template: SessionTemplate
) -> SessionContext:
    """Merge the template's tasks, adopt its chain and rounds, restart."""
    ctx = set_chain(ctx, template.chain, template.tasks)
    ctx = set_rounds_count(ctx, template.rounds_count)
    return restart_session(ctx)


def to_template(
    ctx: SessionContext,
    name: str,
    template_id: str | None = None,
    saved_at: datetime | None = None,
) -> SessionTemplate:
    """Snapshot the current chain, listing tasks in chain order."""
    seen: dict[str, Task] = {}
    for tid in ctx.chain:
        seen.setdefault(tid, ctx.tasks[tid])
    return SessionTemplate(
        id=template_id or f"seq-{new_task_id()[:12]}",
        name=name.strip(),
        tasks=tuple(seen.values()),
        chain=ctx.chain,
        rounds_count=ctx.rounds_count,
        saved_at=saved_at or datetime.now(),
    )
