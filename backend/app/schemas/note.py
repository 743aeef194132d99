"""
Notewise Backend - Note Request/Response Schemas
=================================================

What:  Pydantic models defining the note API contract between UI and backend.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate OpenAPI documentation.
Who:   Used by route handlers and by NoteService as return types.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateNoteRequest(BaseModel):
    """Body of POST /api/notes. The id is generated by the client."""
    note_id: str = Field(min_length=1, max_length=255, description="Client-generated note id")


class UpdateNoteRequest(BaseModel):
    """Body of PATCH /api/notes/{id}. Replaces the full note text."""
    text: str = Field(description="New note text (full replacement)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ActionResult(BaseModel):
    """
    What:  Uniform result of the create/update/delete actions.
    How:   `error_message` is None on success, a human-readable message otherwise.
           Failures are reported here rather than as HTTP errors so the UI can
           show them inline.
    """
    error_message: Optional[str] = Field(
        default=None,
        description="Null on success; human-readable failure description otherwise",
    )

    @property
    def ok(self) -> bool:
        return self.error_message is None


class NoteResponse(BaseModel):
    """Full representation of a note owned by the caller."""
    id: str = Field(description="Note identifier")
    text: str = Field(description="Full note text")
    created_at: datetime = Field(description="When the note was created (UTC ISO 8601)")
    updated_at: datetime = Field(description="When the note was last edited (UTC ISO 8601)")

    model_config = {"from_attributes": True}


class NoteListResponse(BaseModel):
    """Returned by GET /api/notes: the caller's notes, newest first."""
    notes: List[NoteResponse] = Field(description="Notes ordered by creation time, newest first")
    total_count: int = Field(description="Number of notes returned")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "unauthenticated",
            "message": "You must be logged in to ask AI questions",
            "request_id": "3f2a9c1e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Gemini API status: available, unavailable, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
