"""
Notewise Backend - Prompt Construction
=======================================

What:  Builds the instruction text and conversations sent to the model.
How:   Pure functions over notes and user input; no I/O.
Who:   Called by AssistantService.

All three AI actions render notes the same way:

    Text: <note text>
    Created at: <ISO-8601 timestamp>
    Last updated: <ISO-8601 timestamp>

one block per note, newest first, joined by a single newline.
"""

import math
from typing import Iterable, List, Optional, Sequence

from app.models.note import Note
from app.services.llm_base import Turn

EMPTY_RESPONSE_FALLBACK = "A problem has occurred"
NO_NOTES_MESSAGE = "You don't have any notes yet."
DEFAULT_PDF_PROMPT = "Provide a concise, structured summary of the uploaded PDF."

DEFAULT_QUESTION_COUNT = 3
MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 10


ASK_INSTRUCTIONS = """You are a helpful assistant that answers questions about a user's notes.
Assume all questions are related to the user's notes.
Make sure that your answers are not too verbose and you speak succinctly.
Your responses MUST be formatted in clean, valid HTML with proper structure.
Use tags like <p>, <strong>, <em>, <ul>, <ol>, <li>, <h1> to <h6>, and <br> when appropriate.
Do NOT wrap the entire response in a single <p> tag unless it's a single paragraph.
Avoid inline styles, JavaScript, or custom attributes.

The response is inserted directly into the page as HTML.

Here are the user's notes:
{notes}"""


PDF_INSTRUCTIONS = """You are a helpful assistant summarizing the provided PDF.
Return the response as clean, semantically structured HTML suitable for direct rendering.
Use elements like <article>, <section>, <h2>, <h3>, <p>, <ul>, and <li>.
Highlight key differences or takeaways with bullet lists.
Do not include Markdown, code fences, or inline styles."""


SUGGESTIONS_PROMPT = """You are reviewing a user's personal notes.
Generate {count} insightful, distinct questions the user might ask an AI assistant to learn more from their notes.
Return ONLY valid JSON in the following format without extra commentary:
{{"questions": ["Question 1", "Question 2"]}}
Questions should be answerable using the provided notes and avoid duplicates.

Notes:
{notes}"""


def format_note(note: Note) -> str:
    return (
        f"Text: {note.text}\n"
        f"Created at: {note.created_at.isoformat()}\n"
        f"Last updated: {note.updated_at.isoformat()}"
    )


def format_notes(notes: Iterable[Note]) -> str:
    return "\n".join(format_note(note) for note in notes)


def build_ask_instructions(notes: Iterable[Note]) -> str:
    return ASK_INSTRUCTIONS.format(notes=format_notes(notes))


def build_conversation(
    instructions: str,
    questions: Sequence[str],
    responses: Sequence[str],
) -> List[Turn]:
    """
    Interleave the user's questions with the model's earlier answers.

    Layout:
        [instructions, q0, r0, q1, r1, ..., qN]

    The instructions travel as the first user turn. `responses[i]` follows
    `questions[i]` when present, so the last turn is the unanswered question.
    """
    turns = [Turn.user(instructions)]
    for index, question in enumerate(questions):
        turns.append(Turn.user(question))
        if index < len(responses):
            turns.append(Turn.model(responses[index]))
    return turns


def build_pdf_prompt(prompt: Optional[str]) -> str:
    """HTML instructions followed by the user's prompt, or the default summary request."""
    user_prompt = (prompt or "").strip() or DEFAULT_PDF_PROMPT
    return f"{PDF_INSTRUCTIONS}\n\nUser prompt:\n{user_prompt}"


def build_suggestions_prompt(notes: Iterable[Note], count: int) -> str:
    return SUGGESTIONS_PROMPT.format(count=count, notes=format_notes(notes))


def clamp_question_count(requested: Optional[float]) -> int:
    """
    Normalize a requested number of suggestions.

    Missing, NaN or infinite → 3. Otherwise round half up and clamp to [1, 10].
        0 → 1, 2.5 → 3, 15 → 10
    """
    if requested is None:
        return DEFAULT_QUESTION_COUNT
    try:
        value = float(requested)
    except (TypeError, ValueError):
        return DEFAULT_QUESTION_COUNT
    if not math.isfinite(value):
        return DEFAULT_QUESTION_COUNT

    rounded = math.floor(value + 0.5)
    return min(max(rounded, MIN_QUESTION_COUNT), MAX_QUESTION_COUNT)
