"""Timer package."""

from .clock import Clock
from .engine import SessionEngine
from .model import (
    DEFAULT_ROUNDS,
    DEFAULT_TASKS,
    MAX_ROUNDS,
    MAX_TASKS,
    LightColor,
    Policy,
    Position,
    RunState,
    SessionTemplate,
    Task,
    TaskResult,
    TaskStatus,
)
from .session import EventKind, SessionContext, SessionEvent, Transition, new_session
from .timefmt import format_seconds, parse_time

__all__ = [
    "Clock",
    "SessionEngine",
    "SessionContext",
    "SessionEvent",
    "EventKind",
    "Transition",
    "new_session",
    "Task",
    "TaskResult",
    "TaskStatus",
    "RunState",
    "Position",
    "Policy",
    "LightColor",
    "SessionTemplate",
    "DEFAULT_TASKS",
    "DEFAULT_ROUNDS",
    "MAX_TASKS",
    "MAX_ROUNDS",
    "format_seconds",
    "parse_time",
]
