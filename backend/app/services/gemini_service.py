"""
Notewise Backend - Google Gemini Client Implementation
=======================================================

What:  LLMClient implementation on the google-generativeai SDK.
How:   Generation goes through the SDK's async API. The File API calls are
       blocking in the SDK and run in a worker thread via asyncio.to_thread.
Who:   Instantiated once at import; injected into AssistantService by routes.

Resilience Strategy:
    - Generation and upload failures surface immediately as UpstreamError.
      There are no retries: the user is waiting on the answer and can resend.
    - After upload, a file still in PROCESSING state is polled with tenacity
      until it becomes ACTIVE, bounded by GEMINI_FILE_READY_TIMEOUT.
    - Remote deletion is cleanup. It is retried with exponential backoff and
      jitter, then reported to the caller, who logs and moves on.
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential_jitter,
    wait_fixed,
)

from app.config import PLACEHOLDER_VALUES, settings
from app.exceptions import UpstreamError
from app.middleware.request_id import request_id_var
from app.services.llm_base import LLMClient, RemoteFile, Turn

logger = logging.getLogger(__name__)

FILE_PROCESSING = "PROCESSING"
FILE_FAILED = "FAILED"


def _state_name(remote: Any) -> str:
    state = getattr(remote, "state", None)
    name = getattr(state, "name", None)
    return name if isinstance(name, str) else ""


def _is_processing(remote: Any) -> bool:
    return _state_name(remote) == FILE_PROCESSING


def _response_text(response: Any) -> str:
    """
    Extract the text of a generation response.

    The SDK's `.text` accessor raises ValueError when the candidate was
    blocked or carries no text parts; that is reported as empty output.
    """
    try:
        text = response.text
    except ValueError:
        return ""
    return (text or "").strip()


def _trace_id() -> str:
    return request_id_var.get("") or str(uuid.uuid4())[:8]


class GeminiService(LLMClient):
    """
    Google Gemini implementation of the provider interface.

    Conversation encoding:
        Turn("user", q) → {"role": "user", "parts": [{"text": q}]}
        Turn("model", r) → {"role": "model", "parts": [{"text": r}]}
        An uploaded file is attached as a `file_data` part referencing its URI.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        file_ready_timeout: Optional[float] = None,
        file_poll_interval: Optional[float] = None,
        cleanup_max_attempts: Optional[int] = None,
        cleanup_min_wait: Optional[float] = None,
        cleanup_max_wait: Optional[float] = None,
    ):
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model_name = model_name or settings.gemini_model
        self.file_ready_timeout = (
            settings.gemini_file_ready_timeout if file_ready_timeout is None else file_ready_timeout
        )
        self.file_poll_interval = (
            settings.gemini_file_poll_interval if file_poll_interval is None else file_poll_interval
        )
        self.cleanup_max_attempts = cleanup_max_attempts or settings.cleanup_max_attempts
        self.cleanup_min_wait = settings.cleanup_min_wait if cleanup_min_wait is None else cleanup_min_wait
        self.cleanup_max_wait = settings.cleanup_max_wait if cleanup_max_wait is None else cleanup_max_wait

        # The SDK keeps credentials in module-level state
        if self.is_configured:
            genai.configure(api_key=self.api_key)

        self.model = genai.GenerativeModel(self.model_name)

        logger.info(
            "GeminiService initialized with model=%s, configured=%s",
            self.model_name,
            self.is_configured,
        )

    @property
    def is_configured(self) -> bool:
        return self.api_key not in PLACEHOLDER_VALUES

    # ── Generation ────────────────────────────────────────────────────────

    async def generate_content(self, turns: Sequence[Turn]) -> str:
        contents = [
            {"role": turn.role, "parts": [{"text": turn.text}]}
            for turn in turns
        ]
        return await self._generate(contents, kind="conversation")

    async def generate_with_file(self, prompt: str, remote_file: RemoteFile) -> str:
        contents = [
            {
                "role": "user",
                "parts": [
                    {"text": prompt},
                    {
                        "file_data": {
                            "mime_type": remote_file.mime_type,
                            "file_uri": remote_file.uri,
                        }
                    },
                ],
            }
        ]
        return await self._generate(contents, kind="file")

    async def _generate(self, contents: List[Dict[str, Any]], kind: str) -> str:
        trace_id = _trace_id()
        start_time = time.perf_counter()

        try:
            response = await self.model.generate_content_async(contents)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] Gemini %s generation failed after %.0fms: %s",
                trace_id,
                kind,
                duration_ms,
                str(e),
            )
            raise UpstreamError(
                message="The AI service failed to generate a response. Please try again later.",
                context={"request_id": trace_id, "error_type": type(e).__name__},
            ) from e

        text = _response_text(response)
        logger.info(
            "[%s] Gemini %s generation completed in %.0fms (%d turns, %d chars)",
            trace_id,
            kind,
            (time.perf_counter() - start_time) * 1000,
            len(contents),
            len(text),
        )
        return text

    # ── File API ──────────────────────────────────────────────────────────

    async def upload_file(self, path: str, mime_type: str, display_name: str) -> RemoteFile:
        """
        Upload a local file and wait until the provider can use it.

        If the file never becomes ACTIVE, the hosted copy is deleted before
        UpstreamError is raised, so no handle escapes this method unreleased.
        """
        trace_id = _trace_id()
        try:
            uploaded = await asyncio.to_thread(
                genai.upload_file,
                path=path,
                mime_type=mime_type,
                display_name=display_name,
            )
        except Exception as e:
            logger.error("[%s] Gemini file upload failed: %s", trace_id, str(e))
            raise UpstreamError(
                message="Failed to upload the file to the AI service. Please try again later.",
                context={"request_id": trace_id, "error_type": type(e).__name__},
            ) from e

        logger.info("[%s] Uploaded %s to Gemini as %s", trace_id, display_name, uploaded.name)

        try:
            ready = await self._wait_until_active(uploaded)
        except UpstreamError:
            await self._discard(uploaded.name, trace_id)
            raise

        return RemoteFile(
            name=ready.name,
            uri=ready.uri,
            mime_type=getattr(ready, "mime_type", None) or mime_type,
            display_name=display_name,
        )

    async def _wait_until_active(self, uploaded: Any) -> Any:
        if _state_name(uploaded) == FILE_FAILED:
            raise UpstreamError(
                message="The AI service could not process the uploaded file.",
                context={"file": uploaded.name},
            )
        if not _is_processing(uploaded):
            return uploaded

        retrying = AsyncRetrying(
            retry=retry_if_result(_is_processing),
            stop=stop_after_delay(self.file_ready_timeout),
            wait=wait_fixed(self.file_poll_interval),
        )
        try:
            current = await retrying(asyncio.to_thread, genai.get_file, uploaded.name)
        except RetryError as e:
            raise UpstreamError(
                message="The AI service took too long to process the uploaded file.",
                context={"file": uploaded.name, "timeout": self.file_ready_timeout},
            ) from e
        except Exception as e:
            raise UpstreamError(
                message="Failed to check the uploaded file's status.",
                context={"file": uploaded.name, "error_type": type(e).__name__},
            ) from e

        if _state_name(current) == FILE_FAILED:
            raise UpstreamError(
                message="The AI service could not process the uploaded file.",
                context={"file": uploaded.name},
            )
        return current

    async def delete_file(self, remote_file: RemoteFile) -> None:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.cleanup_max_attempts),
            wait=wait_exponential_jitter(
                initial=self.cleanup_min_wait,
                max=self.cleanup_max_wait,
                jitter=self.cleanup_min_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            await retrying(asyncio.to_thread, genai.delete_file, remote_file.name)
        except Exception as e:
            raise UpstreamError(
                message="Failed to delete the uploaded file from the AI service.",
                context={"file": remote_file.name, "attempts": self.cleanup_max_attempts},
            ) from e
        logger.info("Deleted Gemini file %s", remote_file.name)

    async def _discard(self, name: str, trace_id: str) -> None:
        try:
            await asyncio.to_thread(genai.delete_file, name)
        except Exception as e:
            logger.warning("[%s] Could not delete unusable Gemini file %s: %s", trace_id, name, str(e))

    # ── Health ────────────────────────────────────────────────────────────

    async def health_check(self) -> bool:
        """
        Check if Gemini API is reachable.

        Lists available models: authenticates the key without consuming tokens.
        """
        if not self.is_configured:
            return False
        try:
            model_names = await asyncio.to_thread(
                lambda: [m.name for m in genai.list_models()]
            )
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False

        target = f"models/{self.model_name}"
        if target not in model_names:
            logger.warning("Configured model %s not found in available models", target)
        return True


gemini_service = GeminiService()
