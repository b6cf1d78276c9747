"""Template store connection and session management.

The store is one SQLite file beside the settings.  Tests swap it for an
in-memory database with ``configure_engine("sqlite:///:memory:")``.
"""

import logging
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base, SavedTemplate

logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "ChainTimer"
DB_PATH = APP_SUPPORT_DIR / "templates.db"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _make_engine(url: str):
    return create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _make_engine(f"sqlite:///{DB_PATH}")
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Point the template store at ``url`` instead of the file on disk."""
    global _engine, _SessionFactory
    _SessionFactory = None
    _engine = _make_engine(url)


def init_db() -> int:
    """Create the template table and its ``saved_at`` index.

    Returns the number of templates already saved.
    """
    engine = _get_engine()
    Base.metadata.create_all(engine)
    with get_session() as db:
        count = db.scalar(select(func.count()).select_from(SavedTemplate))
    logger.debug("Template store at %s holds %d template(s)", engine.url, count)
    return count


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
