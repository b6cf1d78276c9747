"""Wall-clock elapsed time for the task in progress.

Elapsed time is always derived as ``now - started_at`` (running) or the
stored paused offset (paused / idle).  Nothing is decremented per tick, so
a slow or irregular poll never causes drift.

All timestamps are epoch milliseconds supplied by the caller; the clock
never reads the time itself and never schedules anything.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Clock:
    started_at_ms: int | None = None
    paused_offset_ms: int = 0

    @property
    def is_running(self) -> bool:
        return self.started_at_ms is not None

    def start(self, now_ms: int) -> Clock:
        """Begin (or resume) counting.  No-op when already running."""
        if self.is_running:
            return self
        return replace(self, started_at_ms=now_ms - self.paused_offset_ms)

    def pause(self, now_ms: int) -> Clock:
        """Freeze the current elapsed value into the paused offset."""
        if not self.is_running:
            return self
        return Clock(None, self.elapsed_ms(now_ms))

    def reset(self, now_ms: int, *, running: bool | None = None) -> Clock:
        """Back to zero.

        Keeps the current running/stopped mode unless ``running`` says
        otherwise; a running clock is re-based to ``now_ms``.
        """
        if running is None:
            running = self.is_running
        return Clock(now_ms if running else None, 0)

    def elapsed_ms(self, now_ms: int) -> int:
        if self.started_at_ms is None:
            return self.paused_offset_ms
        return max(0, now_ms - self.started_at_ms)

    def elapsed(self, now_ms: int) -> int:
        """Whole seconds elapsed, floored."""
        return self.elapsed_ms(now_ms) // 1000
