"""
Notewise Backend - PDF Upload Staging Service
==============================================

What:  Validates uploaded PDFs and stages them as temporary files for the
       provider's file-upload endpoint.
How:   Checks presence, declared media type and size; writes the bytes with
       aiofiles to a uniquely named file; removes it again on request.
Who:   Called by AssistantService.analyze_pdf.

Temporary files:
    <UPLOAD_TMP_DIR>/notewise-upload-<uuid4>.pdf

    The random name keeps concurrent requests apart without locking, and no
    part of the user-supplied filename reaches the file system.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PDF_MIME_TYPE = "application/pdf"
DEFAULT_DISPLAY_NAME = "user-uploaded.pdf"
TEMP_FILE_PREFIX = "notewise-upload-"


@dataclass(frozen=True)
class PdfUpload:
    """An uploaded file as received from the client."""
    filename: str
    content_type: Optional[str]
    content: bytes

    @property
    def mime_type(self) -> str:
        return self.content_type or DEFAULT_PDF_MIME_TYPE

    @property
    def display_name(self) -> str:
        return self.filename or DEFAULT_DISPLAY_NAME


class FileService:
    """
    Manages the local lifecycle of an uploaded PDF.

    Lifecycle:
        1. validate_pdf() rejects missing, non-PDF, empty or oversized uploads
        2. write_temp_file() stores the bytes under a random name
        3. cleanup_file() removes the file; never raises
    """

    def __init__(self, tmp_dir: Optional[str] = None, max_file_size: Optional[int] = None):
        """
        Args:
            tmp_dir: Override the scratch directory (used in tests).
            max_file_size: Override the upload size limit in bytes.
        """
        self.tmp_dir = Path(tmp_dir or settings.upload_tmp_dir).resolve()
        self.max_file_size = max_file_size or settings.max_file_size

    def validate_pdf(self, upload: Optional[PdfUpload]) -> PdfUpload:
        """
        Validate an upload before anything is written or sent.

        Checks run in order and the first failure wins:
            presence → declared media type → empty → size
        A missing media type is treated as application/pdf.

        Raises:
            ValidationError with a message safe to show to the user.
        """
        if upload is None:
            raise ValidationError(message="A valid PDF file is required", field="file")

        if "pdf" not in upload.mime_type.lower():
            raise ValidationError(
                message="Only PDF files are supported",
                field="file",
                context={"content_type": upload.mime_type},
            )

        if not upload.content:
            raise ValidationError(message="The uploaded PDF is empty", field="file")

        size = len(upload.content)
        if size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

        return upload

    def _generate_temp_path(self) -> Path:
        return self.tmp_dir / f"{TEMP_FILE_PREFIX}{uuid.uuid4()}.pdf"

    async def write_temp_file(self, content: bytes) -> str:
        """
        Write upload bytes to a fresh temporary file.

        Returns:
            Absolute path of the written file.

        Raises:
            FileStorageError if the directory or file cannot be written.
        """
        path = self._generate_temp_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to write temp file %s: %s", path, str(e))
            # A partial write may have left the file behind
            await self.cleanup_file(str(path))
            raise FileStorageError(
                message="Failed to stage the uploaded PDF. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.debug("Staged upload at %s (%d bytes)", path.name, len(content))
        return str(path)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a temporary file. Best-effort: missing files are ignored and
        any other failure is logged, never raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.debug("Cleaned up temp file: %s", path.name)
            else:
                logger.debug("Cleanup: temp file already gone: %s", path.name)
        except Exception as e:
            logger.warning("Failed to clean up temp file %s: %s", file_path, str(e))


file_service = FileService()
