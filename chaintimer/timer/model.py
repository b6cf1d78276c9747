"""Value types shared by every part of the session engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


# ── constants ─────────────────────────────────────────────────────────────

MAX_TASKS = 25
MAX_ROUNDS = 25
DEFAULT_ROUNDS = 3
NEW_TASK_NAME = "New Task"
NEW_TASK_SECONDS = 60
TICK_INTERVAL_MS = 25


# ── enums ─────────────────────────────────────────────────────────────────


class TaskStatus(Enum):
    INCOMPLETE = "incomplete"
    COMPLETE_AT = "complete_at"
    COMPLETE_UNDER = "complete_under"
    COMPLETE_OVER = "complete_over"
    SKIPPED = "skipped"


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class LightColor(Enum):
    GRAY = "gray"
    YELLOW = "yellow"
    RED = "red"
    GREEN = "green"
    ORANGE = "orange"


# ── records ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Task:
    id: str
    name: str
    target_sec: int


@dataclass(frozen=True)
class TaskResult:
    """What happened in one (round, task-slot) cell.

    ``actual_sec`` is ``None`` exactly when the cell is incomplete.
    """

    status: TaskStatus = TaskStatus.INCOMPLETE
    actual_sec: int | None = None

    @property
    def is_done(self) -> bool:
        return self.status != TaskStatus.INCOMPLETE


INCOMPLETE = TaskResult()
SKIPPED = TaskResult(TaskStatus.SKIPPED, 0)


@dataclass(frozen=True)
class Position:
    round_index: int = 0
    task_index: int = 0


@dataclass(frozen=True)
class Policy:
    auto_continue: bool = False
    rollover: bool = False


@dataclass(frozen=True)
class SessionTemplate:
    """A named, reloadable task chain.  Owned by the template store."""

    id: str
    name: str
    tasks: tuple[Task, ...]
    chain: tuple[str, ...]
    rounds_count: int
    saved_at: datetime = field(default_factory=datetime.now)

    @property
    def total_seconds(self) -> int:
        by_id = {t.id: t.target_sec for t in self.tasks}
        return sum(by_id.get(tid, 0) for tid in self.chain) * self.rounds_count


DEFAULT_TASKS: tuple[Task, ...] = (
    Task("t1", "Task 1", 180),
    Task("t2", "Task 2", 300),
    Task("t3", "Task 3", 180),
)


# ── classification ────────────────────────────────────────────────────────


def classify(actual_sec: int, target_sec: int) -> TaskStatus:
    """Completion quality of ``actual_sec`` measured against ``target_sec``."""
    if actual_sec < target_sec:
        return TaskStatus.COMPLETE_UNDER
    if actual_sec == target_sec:
        return TaskStatus.COMPLETE_AT
    return TaskStatus.COMPLETE_OVER


_RESULT_COLORS: dict[TaskStatus, LightColor] = {
    TaskStatus.INCOMPLETE: LightColor.GRAY,
    TaskStatus.SKIPPED: LightColor.GRAY,
    TaskStatus.COMPLETE_UNDER: LightColor.GREEN,
    TaskStatus.COMPLETE_AT: LightColor.GREEN,
    TaskStatus.COMPLETE_OVER: LightColor.ORANGE,
}


def result_color(status: TaskStatus) -> LightColor:
    """Display colour of a recorded (not in-progress) cell."""
    return _RESULT_COLORS[status]
