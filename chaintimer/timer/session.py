"""The session context: one immutable value holding all session state.

Every navigator and chain operation takes a ``SessionContext`` and
returns a new one.  Rows of the result matrix are tuples, so an update
always replaces whole rows and a reader can never see a row whose length
disagrees with the chain.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Mapping, NamedTuple

from .clock import Clock
from .model import (
    DEFAULT_ROUNDS,
    DEFAULT_TASKS,
    INCOMPLETE,
    MAX_ROUNDS,
    Policy,
    Position,
    RunState,
    Task,
    TaskResult,
)

Row = tuple[TaskResult, ...]
Matrix = tuple[Row, ...]


# ── events ────────────────────────────────────────────────────────────────


class EventKind(Enum):
    ROUND_COMPLETE = "round_complete"
    SESSION_COMPLETE = "session_complete"
    ROLLOVER_APPLIED = "rollover_applied"
    TIME_UP = "time_up"


@dataclass(frozen=True)
class SessionEvent:
    kind: EventKind
    round_index: int = 0
    seconds: int = 0


class Transition(NamedTuple):
    context: "SessionContext"
    events: tuple[SessionEvent, ...] = ()


# ── context ───────────────────────────────────────────────────────────────


def blank_row(length: int) -> Row:
    return (INCOMPLETE,) * length


def blank_matrix(rounds: int, length: int) -> Matrix:
    return tuple(blank_row(length) for _ in range(rounds))


def resize_row(row: Row, length: int) -> Row:
    """Pad with incomplete cells or drop trailing cells."""
    if len(row) >= length:
        return row[:length]
    return row + blank_row(length - len(row))


def resize_matrix(rounds: Matrix, length: int) -> Matrix:
    return tuple(resize_row(row, length) for row in rounds)


@dataclass(frozen=True)
class SessionContext:
    tasks: Mapping[str, Task]
    chain: tuple[str, ...]
    rounds: Matrix
    position: Position = Position()
    run_state: RunState = RunState.IDLE
    clock: Clock = Clock()
    policy: Policy = Policy()
    rollover_offset: int = 0
    auto_latch: bool = False
    has_rung: bool = False
    session_complete: bool = False

    # ── shape ─────────────────────────────────────────────────────────

    @property
    def chain_length(self) -> int:
        return len(self.chain)

    @property
    def rounds_count(self) -> int:
        return len(self.rounds)

    @property
    def last_task_index(self) -> int:
        return self.chain_length - 1

    @property
    def last_round_index(self) -> int:
        return self.rounds_count - 1

    # ── lookups ───────────────────────────────────────────────────────

    def task_at(self, index: int) -> Task:
        return self.tasks[self.chain[index]]

    @property
    def current_task(self) -> Task:
        return self.task_at(self.position.task_index)

    def cell(self, round_index: int, task_index: int) -> TaskResult:
        return self.rounds[round_index][task_index]

    @property
    def current_cell(self) -> TaskResult:
        return self.cell(self.position.round_index, self.position.task_index)

    # ── copy-on-write updates ─────────────────────────────────────────

    def with_cell(
        self, round_index: int, task_index: int, result: TaskResult
    ) -> SessionContext:
        row = list(self.rounds[round_index])
        row[task_index] = result
        rounds = list(self.rounds)
        rounds[round_index] = tuple(row)
        return replace(self, rounds=tuple(rounds))

    def with_current_cell(self, result: TaskResult) -> SessionContext:
        return self.with_cell(
            self.position.round_index, self.position.task_index, result
        )


def new_session(
    tasks: Iterable[Task] = DEFAULT_TASKS,
    chain: Iterable[str] | None = None,
    rounds_count: int = DEFAULT_ROUNDS,
    policy: Policy = Policy(),
) -> SessionContext:
    """Fresh idle session.  ``chain`` defaults to the task order given."""
    catalog = {t.id: t for t in tasks}
    ids = tuple(chain) if chain is not None else tuple(catalog)
    rounds_count = max(1, min(MAX_ROUNDS, rounds_count))
    return SessionContext(
        tasks=catalog,
        chain=ids,
        rounds=blank_matrix(rounds_count, len(ids)),
        policy=policy,
    )
