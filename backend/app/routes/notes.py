"""
Notewise Backend - Notes Route Handlers
========================================

What:  CRUD endpoints for the signed-in user's notes.
How:   Resolves the user and session, delegates to NoteService, returns JSON.
Who:   Called by the note editor and the sidebar note list.

Response conventions:
    POST / PATCH / DELETE always answer 200 with an ActionResult. A failure
    (no session, unknown note, storage error) sets `error_message`, which
    the UI shows inline.
    GET endpoints use HTTP status codes (401, 404, 500) via the global
    exception handlers.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.schemas.note import (
    ActionResult,
    CreateNoteRequest,
    ErrorResponse,
    NoteListResponse,
    NoteResponse,
    UpdateNoteRequest,
)
from app.schemas.user import User
from app.services.note_service import note_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api", tags=["Notes"])


@router.post(
    "/notes",
    response_model=ActionResult,
    summary="Create an empty note",
    description="Creates an empty note with the client-generated id, owned by the caller.",
)
async def create_note(
    body: CreateNoteRequest,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[User] = Depends(get_current_user),
) -> ActionResult:
    return await note_service.create_note(db=db, note_id=body.note_id, user=user)


@router.patch(
    "/notes/{note_id}",
    response_model=ActionResult,
    summary="Replace a note's text",
)
async def update_note(
    note_id: str,
    body: UpdateNoteRequest,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[User] = Depends(get_current_user),
) -> ActionResult:
    return await note_service.update_note(db=db, note_id=note_id, text=body.text, user=user)


@router.delete(
    "/notes/{note_id}",
    response_model=ActionResult,
    summary="Delete a note",
    description="Deletes the note only if the caller owns it.",
)
async def delete_note(
    note_id: str,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[User] = Depends(get_current_user),
) -> ActionResult:
    return await note_service.delete_note(db=db, note_id=note_id, user=user)


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the caller's notes",
    description="Returns every note owned by the caller, newest first.",
)
async def list_notes(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[User] = Depends(get_current_user),
) -> NoteListResponse:
    """
    List notes, newest first.

    X-Total-Count mirrors `total_count` so list views can show a count
    without reading the body.
    """
    result = await note_service.list_notes(db=db, user=user)
    response.headers["X-Total-Count"] = str(result.total_count)
    response.headers["Cache-Control"] = "private, no-cache"
    return result


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single note by id",
)
async def get_note(
    note_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[User] = Depends(get_current_user),
) -> NoteResponse:
    result = await note_service.get_note(db=db, note_id=note_id, user=user)
    # Notes are editable, so clients must revalidate
    response.headers["Cache-Control"] = "private, no-cache"
    return result
