"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/ChainTimer/settings.json

Usage::

    settings = load_settings()
    settings.rollover = True
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .timer.model import DEFAULT_ROUNDS, MAX_ROUNDS, TICK_INTERVAL_MS

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "ChainTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

MIN_TICK_INTERVAL_MS = 10


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── session policy ────────────────────────────────────────────────
    auto_continue: bool = False
    rollover: bool = False
    right_arrow_action: str = "skip"       # skip | done

    # ── session shape ─────────────────────────────────────────────────
    default_rounds: int = DEFAULT_ROUNDS
    last_template_id: str | None = None

    # ── host loop ─────────────────────────────────────────────────────
    tick_interval_ms: int = TICK_INTERVAL_MS

    def normalized(self) -> Settings:
        """Copy with each out-of-range or mistyped value replaced on its own."""
        defaults = Settings()
        action = self.right_arrow_action
        if action not in ("skip", "done"):
            logger.warning("Ignoring right_arrow_action=%r", action)
            action = defaults.right_arrow_action
        template_id = self.last_template_id
        if template_id is not None and not isinstance(template_id, str):
            logger.warning("Ignoring last_template_id=%r", template_id)
            template_id = None
        return Settings(
            auto_continue=_as_bool(
                "auto_continue", self.auto_continue, defaults.auto_continue
            ),
            rollover=_as_bool("rollover", self.rollover, defaults.rollover),
            right_arrow_action=action,
            default_rounds=_as_int(
                "default_rounds", self.default_rounds,
                defaults.default_rounds, 1, MAX_ROUNDS,
            ),
            last_template_id=template_id,
            tick_interval_ms=_as_int(
                "tick_interval_ms", self.tick_interval_ms,
                defaults.tick_interval_ms, MIN_TICK_INTERVAL_MS, None,
            ),
        )


_TRUE = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0", "")


def _as_bool(key: str, value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE + _FALSE:
        return value.strip().lower() in _TRUE
    logger.warning("Ignoring %s=%r", key, value)
    return default


def _as_int(key: str, value, default: int, lo: int, hi: int | None) -> int:
    if isinstance(value, bool):
        value = None
    try:
        n = int(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Ignoring %s=%r", key, value)
        return default
    n = max(lo, n)
    return n if hi is None else min(hi, n)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered).normalized()
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Could not read settings from %s: %s", path, exc)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
