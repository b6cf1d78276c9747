"""Run a session headlessly: python -m chaintimer.

Loads the settings and (optionally) a saved template, starts the first
task and logs every event until the session completes.  With
``--auto-continue`` the run needs no input at all.
"""

from __future__ import annotations

import argparse
import logging
import sys

from PyQt6.QtCore import QCoreApplication

from .database import find_template, get_template, init_db, list_templates
from .settings import Settings, load_settings, save_settings
from .timer import SessionEngine, format_seconds

logger = logging.getLogger("chaintimer")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chaintimer", description=__doc__)
    parser.add_argument("--template", help="name of a saved template to run")
    parser.add_argument("--rounds", type=int, help="override the round count")
    parser.add_argument("--auto-continue", action="store_true", default=None)
    parser.add_argument("--rollover", action="store_true", default=None)
    parser.add_argument("--list", action="store_true",
                        help="list saved templates and exit")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _print_templates() -> None:
    templates = list_templates()
    if not templates:
        print("No saved sessions yet.")
        return
    for t in templates:
        print(
            f"{t.name:<30} {len(t.chain):>2} tasks  {t.rounds_count:>2} rounds  "
            f"{format_seconds(t.total_seconds):>8}  "
            f"saved {t.saved_at:%Y-%m-%d}"
        )


def _pick_template(name: str | None, settings: Settings, settings_path=None):
    """Template to run: the one called ``name``, else the last one run.

    A template picked by name is remembered in the settings file.  Raises
    ``LookupError`` when no saved template has that name.
    """
    if name:
        template = find_template(name)
        if template is None:
            raise LookupError(name)
        if settings.last_template_id != template.id:
            settings.last_template_id = template.id
            save_settings(settings, settings_path)
        return template
    if settings.last_template_id:
        return get_template(settings.last_template_id)
    return None


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    init_db()
    if args.list:
        _print_templates()
        return 0

    settings = load_settings()
    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("ChainTimer")

    engine = SessionEngine(
        auto_continue=settings.auto_continue if args.auto_continue is None else True,
        rollover=settings.rollover if args.rollover is None else True,
        right_arrow_action=settings.right_arrow_action,
        rounds_count=settings.default_rounds,
        tick_interval_ms=settings.tick_interval_ms,
    )

    try:
        template = _pick_template(args.template, settings)
    except LookupError:
        logger.error("No saved template named %r", args.template)
        return 1
    if template is not None:
        engine.load_template(template)
    if args.rounds is not None:
        engine.set_rounds_count(args.rounds)

    def on_position(round_index: int, task_index: int) -> None:
        task = engine.current_task
        logger.info(
            "Round %d/%d · %s (%s)",
            round_index + 1, engine.rounds_count, task.name,
            format_seconds(engine.effective_target),
        )

    def on_session_completed(summary: dict) -> None:
        logger.info(
            "Session complete: %s of %s planned, %d skipped",
            format_seconds(summary["actual_seconds"]),
            format_seconds(summary["target_seconds"]),
            summary["skipped"],
        )
        app.quit()

    engine.position_changed.connect(on_position)
    engine.round_completed.connect(
        lambda r: logger.info("Round %d complete!", r + 1)
    )
    engine.rollover_applied.connect(
        lambda s: logger.info("+%s rolled over", format_seconds(s))
    )
    engine.time_up.connect(lambda: logger.info("Time's up"))
    engine.session_completed.connect(on_session_completed)

    logger.info(
        "ChainTimer ready: %d tasks × %d rounds, %s total",
        len(engine.chain), engine.rounds_count,
        format_seconds(engine.session_target),
    )
    on_position(0, 0)
    engine.start()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
