"""Clock-face formatting and lenient parsing of durations."""

from __future__ import annotations

import re

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def format_seconds(seconds: float) -> str:
    """``M:SS`` below an hour, ``H:MM:SS`` from 3600 s up.

    Negative input renders as ``0:00``.
    """
    s = max(0, int(seconds // 1))
    h, rest = divmod(s, 3600)
    m, r = divmod(rest, 60)
    if h > 0:
        return f"{h}:{m:02d}:{r:02d}"
    return f"{m}:{r:02d}"


def _component(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_time(text: str) -> int:
    """Parse ``SS``, ``M:SS`` or ``H:MM:SS`` into whole seconds.

    Unparseable components count as zero and the result is never negative,
    so an edit can always be applied.  Components after the third are
    ignored.
    """
    parts = [_component(p) for p in str(text).split(":")]
    if len(parts) == 1:
        seconds = parts[0]
    elif len(parts) == 2:
        seconds = parts[0] * 60 + parts[1]
    else:
        seconds = parts[0] * 3600 + parts[1] * 60 + parts[2]
    return max(0, seconds)
