"""Database package."""

from .db import configure_engine, get_session, init_db
from .models import SavedTemplate
from .templates import (
    delete_template,
    find_template,
    get_template,
    list_templates,
    save_template,
)

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "SavedTemplate",
    "save_template",
    "list_templates",
    "get_template",
    "find_template",
    "delete_template",
]
