"""
Notewise Backend - FastAPI Dependencies
========================================

What:  Per-request providers for the signed-in user and the AI services.
How:   Plain functions used with Depends(). Tests replace them through
       app.dependency_overrides.
Who:   Used by routes/notes.py and routes/assistant.py.

The user is resolved once per request and handed to the actions
explicitly; no action reads the session on its own.
"""

from typing import Optional

from fastapi import Depends, Request

from app.schemas.user import User
from app.services.assistant_service import AssistantService
from app.services.gemini_service import gemini_service
from app.services.identity import identity_gateway
from app.services.llm_base import LLMClient


async def get_current_user(request: Request) -> Optional[User]:
    """The signed-in user, or None for anonymous requests."""
    return await identity_gateway.get_user(
        authorization=request.headers.get("Authorization"),
        cookies=request.cookies,
    )


def get_llm_client() -> LLMClient:
    return gemini_service


def get_assistant_service(llm: LLMClient = Depends(get_llm_client)) -> AssistantService:
    return AssistantService(llm=llm)
