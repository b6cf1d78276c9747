"""Shared test helpers for ChainTimer."""

from chaintimer.timer.model import Policy, Task
from chaintimer.timer.session import SessionContext, new_session


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Stand-in wall clock returning epoch milliseconds."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> int:
        self.now_ms += int(seconds * 1000)
        return self.now_ms


T0 = 1_700_000_000_000

A = Task("a", "A", 180)
B = Task("b", "B", 300)
C = Task("c", "C", 120)


def make_ctx(
    tasks=(A, B), rounds: int = 1, *, auto_continue=False, rollover=False
) -> SessionContext:
    """Small session: chain A(180) → B(300) by default, one round."""
    return new_session(
        tasks,
        rounds_count=rounds,
        policy=Policy(auto_continue=auto_continue, rollover=rollover),
    )


def at(seconds: float) -> int:
    """Epoch ms ``seconds`` after T0."""
    return T0 + int(seconds * 1000)
