"""
Notewise Backend - AI Assistant Route Handlers
===============================================

What:  Endpoints for the AI-assisted actions.
How:   Resolves the user, session and AssistantService, then delegates.
Who:   Called by the "Ask AI" dialog, the PDF analysis form and the
       suggested-questions panel.

Routes:
    POST /api/assistant/ask                   JSON {questions, responses}
    POST /api/assistant/analyze-pdf           multipart: file, prompt
    GET  /api/assistant/suggested-questions   ?count=N

Errors are raised by the service and formatted by the global handlers:
    400 validation, 401 no session, 500 missing API key, 503 provider failure
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_assistant_service, get_current_user
from app.schemas.assistant import AskRequest, AssistantResponse, SuggestedQuestionsResponse
from app.schemas.note import ErrorResponse
from app.schemas.user import User
from app.services.assistant_service import AssistantService
from app.services.file_service import PdfUpload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["Assistant"])

_ERROR_RESPONSES = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Not signed in", "model": ErrorResponse},
    500: {"description": "Server misconfigured or failed", "model": ErrorResponse},
    503: {"description": "AI service unavailable", "model": ErrorResponse},
}


@router.post(
    "/ask",
    response_model=AssistantResponse,
    responses=_ERROR_RESPONSES,
    summary="Ask a question about your notes",
    description=(
        "Answers the newest question using the caller's notes as context. "
        "The client resends the whole dialogue on every turn."
    ),
)
async def ask(
    body: AskRequest,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[User] = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service),
) -> AssistantResponse:
    answer = await assistant.ask_about_notes(
        db=db,
        user=user,
        questions=body.questions,
        responses=body.responses,
    )
    return AssistantResponse(response=answer)


@router.post(
    "/analyze-pdf",
    response_model=AssistantResponse,
    responses=_ERROR_RESPONSES,
    summary="Summarize or question an uploaded PDF",
    description=(
        "Accepts a PDF and an optional prompt. Without a prompt, returns a "
        "structured summary. The uploaded file is not retained."
    ),
)
async def analyze_pdf(
    file: Optional[UploadFile] = File(None, description="PDF document"),
    prompt: str = Form("", description="What to do with the document"),
    user: Optional[User] = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service),
) -> AssistantResponse:
    """
    The upload is read into memory here; validation, staging and cleanup
    happen in AssistantService.
    """
    upload = None
    if file is not None:
        try:
            content = await file.read()
        finally:
            await file.close()
        upload = PdfUpload(
            filename=file.filename or "",
            content_type=file.content_type,
            content=content,
        )
        logger.info(
            "Received PDF analysis request: filename=%s, size=%d bytes",
            upload.display_name,
            len(content),
        )

    answer = await assistant.analyze_pdf(user=user, upload=upload, prompt=prompt)
    return AssistantResponse(response=answer)


@router.get(
    "/suggested-questions",
    response_model=SuggestedQuestionsResponse,
    responses=_ERROR_RESPONSES,
    summary="Suggest questions to ask about your notes",
)
async def suggested_questions(
    count: float = Query(3, description="Number of questions wanted; clamped to 1-10"),
    db: AsyncSession = Depends(get_db_session),
    user: Optional[User] = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service),
) -> SuggestedQuestionsResponse:
    questions = await assistant.suggest_questions(db=db, user=user, requested_count=count)
    return SuggestedQuestionsResponse(questions=questions)
