"""
Notewise Backend - AI Assistant Request/Response Schemas
=========================================================

What:  API contract for the three AI-assisted actions.
Who:   Used by routes/assistant.py.

Conversation encoding:
    The UI keeps the dialogue and resends it on every turn:
        questions = [q0, q1, q2]   every question asked so far, including the new one
        responses = [r0, r1]       answers already received, one per earlier question
"""

from typing import List

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    """Body of POST /api/assistant/ask."""
    questions: List[str] = Field(description="Questions asked in this session, oldest first")
    responses: List[str] = Field(
        default_factory=list,
        description="Answers already received for the earlier questions, oldest first",
    )


class AssistantResponse(BaseModel):
    """HTML answer from the model (a constrained tag subset, rendered by the UI)."""
    response: str = Field(description="Model answer as an HTML fragment")


class SuggestedQuestionsResponse(BaseModel):
    """Returned by GET /api/assistant/suggested-questions."""
    questions: List[str] = Field(description="Distinct suggested questions, at most the clamped count")
