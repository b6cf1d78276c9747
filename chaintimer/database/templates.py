"""Saving and loading named session templates.

Templates cross this boundary as ``SessionTemplate`` values; the ORM rows
never leave the module.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..timer.model import SessionTemplate, Task
from .db import get_session
from .models import SavedTemplate

logger = logging.getLogger(__name__)


def _to_value(row: SavedTemplate) -> SessionTemplate:
    return SessionTemplate(
        id=row.id,
        name=row.name,
        tasks=tuple(
            Task(t["id"], t["name"], int(t["targetSec"])) for t in row.tasks
        ),
        chain=tuple(row.chain),
        rounds_count=row.rounds_count,
        saved_at=row.saved_at,
    )


def _task_dicts(template: SessionTemplate) -> list[dict]:
    return [
        {"id": t.id, "name": t.name, "targetSec": t.target_sec}
        for t in template.tasks
    ]


def save_template(template: SessionTemplate) -> SessionTemplate:
    """Insert, or overwrite the template with the same id.

    The stored ``saved_at`` is refreshed to now; the stored value is
    returned.
    """
    now = datetime.now()
    with get_session() as db:
        row = db.get(SavedTemplate, template.id)
        if row is None:
            row = SavedTemplate(id=template.id)
            db.add(row)
            logger.info("Saving new template %r", template.name)
        else:
            logger.info("Updating template %r", template.name)
        row.name = template.name
        row.tasks = _task_dicts(template)
        row.chain = list(template.chain)
        row.rounds_count = template.rounds_count
        row.saved_at = now
        db.flush()
        return _to_value(row)


def list_templates() -> list[SessionTemplate]:
    """All templates, most recently saved first."""
    with get_session() as db:
        rows = (
            db.query(SavedTemplate)
            .order_by(SavedTemplate.saved_at.desc())
            .all()
        )
        return [_to_value(r) for r in rows]


def get_template(template_id: str) -> SessionTemplate | None:
    with get_session() as db:
        row = db.get(SavedTemplate, template_id)
        return _to_value(row) if row else None


def find_template(name: str) -> SessionTemplate | None:
    """Newest template whose name matches ``name`` (case-insensitive)."""
    wanted = name.strip().lower()
    for template in list_templates():
        if template.name.lower() == wanted:
            return template
    return None


def delete_template(template_id: str) -> bool:
    with get_session() as db:
        row = db.get(SavedTemplate, template_id)
        if row is None:
            return False
        db.delete(row)
        logger.info("Deleted template %r", row.name)
        return True
