"""
Notewise Backend - Note SQLAlchemy Model
=========================================

What:  ORM model representing the `notes` table.
Who:   Used by NoteService for CRUD operations and by Alembic for schema management.

Table Design:
    - id: caller-supplied string (the UI generates it before the first save)
    - author_id: identity-provider user id; every query filters on it
    - text: full note body, empty on creation
    - created_at / updated_at: UTC with timezone

    Index on (author_id, created_at):
        Serves the only list query: "this user's notes, newest first"
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A user-owned free-text note.

    Lifecycle:
        1. Created empty when the user opens a new note
        2. Updated by full-text replacement as the user edits
        3. Deleted by its owner
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Caller-supplied unique identifier",
    )

    author_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Identity-provider id of the owning user",
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Full note body",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        comment="When this note was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
        comment="When this note was last edited (UTC)",
    )

    __table_args__ = (
        Index("idx_notes_author_created_at", "author_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id!r}, author_id={self.author_id!r}, "
            f"created_at='{self.created_at}')>"
        )
