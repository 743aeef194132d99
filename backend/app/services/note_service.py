"""
Notewise Backend - Note Service (CRUD Actions)
===============================================

What:  Create, update, delete, list and fetch notes for the signed-in user.
How:   Plain async SQLAlchemy statements on the session handed in by the route.
Who:   Called by routes/notes.py; `notes_for_author` is also used by
       AssistantService to seed prompts.

Result Convention:
    The mutating actions (create/update/delete) never raise for expected
    failures. Missing session, unknown note and storage errors are folded
    into ActionResult(error_message=...), which the UI shows inline.
    Reads raise application exceptions, which the global handlers map to
    HTTP status codes.

Ownership:
    Every statement filters on author_id, so a note can only be read,
    updated or deleted by the user who created it. A note owned by someone
    else is indistinguishable from a missing one.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DatabaseError,
    NotewiseError,
    NotFoundError,
    UnauthenticatedError,
)
from app.models.note import Note
from app.schemas.note import ActionResult, NoteListResponse, NoteResponse
from app.schemas.user import User

logger = logging.getLogger(__name__)


def require_user(user: Optional[User], message: str) -> User:
    """Return the user, or raise UnauthenticatedError with an action-specific message."""
    if user is None:
        raise UnauthenticatedError(message=message)
    return user


class NoteService:
    """
    Business logic layer for note persistence.

    Stateless: the session and the resolved user arrive with each call.
    """

    # ── Mutating actions ──────────────────────────────────────────────────

    async def create_note(
        self,
        db: AsyncSession,
        note_id: str,
        user: Optional[User],
    ) -> ActionResult:
        """
        Insert an empty note owned by the user.

        Failure messages:
            no user       → "You must be logged in to create a note"
            duplicate id  → generic persistence message (details logged)
        """
        try:
            author = require_user(user, "You must be logged in to create a note")
            db.add(Note(id=note_id, author_id=author.id, text=""))
            await db.flush()
        except NotewiseError as e:
            return self._failure("create", note_id, e)
        except SQLAlchemyError as e:
            return await self._persistence_failure(db, "create", note_id, e)

        logger.info("Note %s created by user %s", note_id, author.id)
        return ActionResult()

    async def update_note(
        self,
        db: AsyncSession,
        note_id: str,
        text: str,
        user: Optional[User],
    ) -> ActionResult:
        """Replace the full text of a note the user owns."""
        try:
            author = require_user(user, "You must be logged in to update a note")
            note = await self._owned_note(db, note_id, author.id)
            note.text = text
            await db.flush()
        except NotewiseError as e:
            return self._failure("update", note_id, e)
        except SQLAlchemyError as e:
            return await self._persistence_failure(db, "update", note_id, e)

        logger.info("Note %s updated (%d chars)", note_id, len(text))
        return ActionResult()

    async def delete_note(
        self,
        db: AsyncSession,
        note_id: str,
        user: Optional[User],
    ) -> ActionResult:
        """Delete a note only if both its id and its author match."""
        try:
            author = require_user(user, "You must be logged in to delete a note")
            result = await db.execute(
                delete(Note).where(Note.id == note_id, Note.author_id == author.id)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="note", resource_id=note_id)
        except NotewiseError as e:
            return self._failure("delete", note_id, e)
        except SQLAlchemyError as e:
            return await self._persistence_failure(db, "delete", note_id, e)

        logger.info("Note %s deleted by user %s", note_id, author.id)
        return ActionResult()

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_notes(self, db: AsyncSession, user: Optional[User]) -> NoteListResponse:
        """
        List the user's notes, newest first.

        Raises:
            UnauthenticatedError: No signed-in user (→ 401)
            DatabaseError: Query failed (→ 500)
        """
        author = require_user(user, "You must be logged in to view notes")
        notes = await self.notes_for_author(db, author.id)
        return NoteListResponse(
            notes=[NoteResponse.model_validate(note) for note in notes],
            total_count=len(notes),
        )

    async def get_note(self, db: AsyncSession, note_id: str, user: Optional[User]) -> NoteResponse:
        """
        Fetch one note the user owns.

        Raises:
            UnauthenticatedError, NotFoundError, DatabaseError
        """
        author = require_user(user, "You must be logged in to view notes")
        try:
            note = await self._owned_note(db, note_id, author.id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            ) from e
        return NoteResponse.model_validate(note)

    async def notes_for_author(self, db: AsyncSession, author_id: str) -> List[Note]:
        """All notes owned by `author_id`, ordered by creation time descending."""
        try:
            result = await db.execute(
                select(Note)
                .where(Note.author_id == author_id)
                .order_by(Note.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _owned_note(self, db: AsyncSession, note_id: str, author_id: str) -> Note:
        result = await db.execute(
            select(Note).where(Note.id == note_id, Note.author_id == author_id)
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note

    def _failure(self, action: str, note_id: str, error: NotewiseError) -> ActionResult:
        logger.info("Note %s %s rejected: %s", note_id, action, error.message)
        return ActionResult(error_message=error.message)

    async def _persistence_failure(
        self,
        db: AsyncSession,
        action: str,
        note_id: str,
        error: SQLAlchemyError,
    ) -> ActionResult:
        # The session is unusable after a failed flush until rolled back
        await db.rollback()
        logger.error(
            "Database error during note %s of %s: %s",
            action,
            note_id,
            str(error),
        )
        return ActionResult(
            error_message=DatabaseError(
                message=f"Could not {action} the note. Please try again.",
            ).message
        )


note_service = NoteService()
