"""
Notewise Backend - AI Assistant Service (Orchestration Layer)
==============================================================

What:  The three AI-assisted actions: answer questions about the user's
       notes, summarize an uploaded PDF, and suggest questions to ask.
How:   Coordinates NoteService (notes as context), FileService (temp files)
       and an LLMClient (generation and file hosting).
Who:   Called by routes/assistant.py.

Check Order (every action):
    1. Provider credential configured   → else ConfigurationError
    2. Signed-in user                   → else UnauthenticatedError
    3. Input validation                 → else ValidationError
    Nothing is read, written or sent before these pass.

PDF Analysis Flow:
    1. Validate upload
    2. Stage bytes as a temp file
    3. Upload temp file to the provider → RemoteFile
    4. Generate with (instructions + prompt, RemoteFile)
    5. On every exit path: delete RemoteFile, then delete temp file.
       Cleanup failures are logged, never raised.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConfigurationError, UnauthenticatedError, ValidationError
from app.schemas.user import User
from app.services import prompts
from app.services.file_service import FileService, PdfUpload, file_service
from app.services.llm_base import LLMClient, RemoteFile, Turn
from app.services.note_service import NoteService, note_service
from app.services.question_parser import normalize_questions, parse_questions

logger = logging.getLogger(__name__)


class AssistantService:
    """
    Stateless orchestration of the AI-assisted actions.

    Dependencies are injected so tests can swap the provider for a stub and
    point file staging at a temporary directory.
    """

    def __init__(
        self,
        llm: LLMClient,
        files: Optional[FileService] = None,
        notes: Optional[NoteService] = None,
    ):
        self.llm = llm
        self.files = files or file_service
        self.notes = notes or note_service

    def _check_access(self, user: Optional[User], message: str) -> User:
        if not self.llm.is_configured:
            raise ConfigurationError()
        if user is None:
            raise UnauthenticatedError(message=message)
        return user

    # ── Ask about notes ───────────────────────────────────────────────────

    async def ask_about_notes(
        self,
        db: AsyncSession,
        user: Optional[User],
        questions: List[str],
        responses: List[str],
    ) -> str:
        """
        Answer the newest question with the user's notes as context.

        Args:
            questions: Every question of the session, the newest last.
            responses: Earlier answers; responses[i] answers questions[i].

        Returns:
            An HTML fragment, NO_NOTES_MESSAGE when the user has no notes,
            or EMPTY_RESPONSE_FALLBACK when the model returns nothing.
        """
        author = self._check_access(user, "You must be logged in to ask AI questions")

        if not questions:
            raise ValidationError(message="At least one question is required", field="questions")
        if len(responses) > len(questions) - 1:
            raise ValidationError(
                message="There must be fewer responses than questions",
                field="responses",
                context={"questions": len(questions), "responses": len(responses)},
            )

        notes = await self.notes.notes_for_author(db, author.id)
        if not notes:
            return prompts.NO_NOTES_MESSAGE

        conversation = prompts.build_conversation(
            prompts.build_ask_instructions(notes),
            questions,
            responses,
        )
        logger.info(
            "Asking about %d notes for user %s (%d turns)",
            len(notes),
            author.id,
            len(conversation),
        )
        text = await self.llm.generate_content(conversation)
        return text.strip() or prompts.EMPTY_RESPONSE_FALLBACK

    # ── Analyze PDF ───────────────────────────────────────────────────────

    async def analyze_pdf(
        self,
        user: Optional[User],
        upload: Optional[PdfUpload],
        prompt: Optional[str] = None,
    ) -> str:
        """
        Summarize or answer a prompt about an uploaded PDF.

        Raises:
            ConfigurationError, UnauthenticatedError, ValidationError before
            any file is written; FileStorageError or UpstreamError afterwards.
        """
        self._check_access(user, "You must be logged in to analyze a PDF")
        upload = self.files.validate_pdf(upload)

        async with self._staged_upload() as staged:
            staged.temp_path = await self.files.write_temp_file(upload.content)
            staged.remote = await self.llm.upload_file(
                staged.temp_path,
                mime_type=upload.mime_type,
                display_name=upload.display_name,
            )
            text = await self.llm.generate_with_file(
                prompts.build_pdf_prompt(prompt),
                staged.remote,
            )

        logger.info("Analyzed PDF %s (%d bytes)", upload.display_name, len(upload.content))
        return text.strip() or prompts.EMPTY_RESPONSE_FALLBACK

    @asynccontextmanager
    async def _staged_upload(self) -> AsyncIterator["_StagedUpload"]:
        staged = _StagedUpload()
        try:
            yield staged
        finally:
            await self._release(staged)

    async def _release(self, staged: "_StagedUpload") -> None:
        # Remote copy first, then the local file it was uploaded from
        if staged.remote is not None:
            try:
                await self.llm.delete_file(staged.remote)
            except Exception as e:
                logger.warning("Failed to delete remote file %s: %s", staged.remote.name, str(e))
        if staged.temp_path is not None:
            await self.files.cleanup_file(staged.temp_path)

    # ── Suggested questions ───────────────────────────────────────────────

    async def suggest_questions(
        self,
        db: AsyncSession,
        user: Optional[User],
        requested_count: Optional[float] = None,
    ) -> List[str]:
        """
        Suggest distinct questions the user could ask about their notes.

        Returns [] without calling the provider when the user has no notes.
        Unparseable model output degrades to a line-by-line reading, never
        an exception.
        """
        count = prompts.clamp_question_count(requested_count)
        author = self._check_access(user, "You must be logged in to ask AI questions")

        notes = await self.notes.notes_for_author(db, author.id)
        if not notes:
            return []

        raw = await self.llm.generate_content(
            [Turn.user(prompts.build_suggestions_prompt(notes, count))]
        )
        questions = normalize_questions(parse_questions(raw.strip()), count)
        logger.info("Suggested %d/%d questions for user %s", len(questions), count, author.id)
        return questions


class _StagedUpload:
    """Resources acquired while analyzing a PDF, released in reverse order."""

    def __init__(self) -> None:
        self.temp_path: Optional[str] = None
        self.remote: Optional[RemoteFile] = None
