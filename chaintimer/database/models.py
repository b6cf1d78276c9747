"""SQLAlchemy ORM models for ChainTimer."""

from datetime import datetime
from sqlalchemy import Column, DateTime, Index, Integer, JSON, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class SavedTemplate(Base):
    """A named task chain the user can reload later."""

    __tablename__ = "session_templates"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    tasks = Column(JSON, nullable=False, default=list)   # [{id, name, targetSec}]
    chain = Column(JSON, nullable=False, default=list)   # [task id, ...]
    rounds_count = Column(Integer, nullable=False, default=3)
    saved_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        # list_templates and find_template read newest first
        Index("ix_session_templates_saved_at", "saved_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<SavedTemplate id={self.id} name={self.name!r} "
            f"slots={len(self.chain or [])} rounds={self.rounds_count}>"
        )
