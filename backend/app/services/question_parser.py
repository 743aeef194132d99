"""
Notewise Backend - Suggested Question Parsing
==============================================

What:  Turns free-form model output into a clean list of questions.
How:   An ordered chain of parsers. Each returns a list, or None when its
       format does not apply, and the first list wins.
Who:   Called by AssistantService.suggest_questions.

Parsers, in order:
    1. parse_json_questions: the first "{" to last "}" (or the whole text)
       as JSON; a bare list of strings or {"questions": [...]}
    2. parse_line_questions: one question per line, list markers removed

Never raises on malformed input.
"""

import json
import re
from typing import Any, Callable, Iterable, List, Optional

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
LIST_MARKER_PATTERN = re.compile(r"^[-*\d.\s)]+")

QuestionParser = Callable[[str], Optional[List[str]]]


def _string_items(items: Iterable[Any]) -> List[str]:
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def parse_json_questions(raw: str) -> Optional[List[str]]:
    match = JSON_OBJECT_PATTERN.search(raw)
    candidate = match.group(0) if match else raw
    try:
        parsed = json.loads(candidate)
    except ValueError:
        return None

    if isinstance(parsed, list):
        return _string_items(parsed)
    if isinstance(parsed, dict) and isinstance(parsed.get("questions"), list):
        return _string_items(parsed["questions"])
    return None


def parse_line_questions(raw: str) -> Optional[List[str]]:
    lines = (LIST_MARKER_PATTERN.sub("", line).strip() for line in raw.split("\n"))
    return [line for line in lines if line]


QUESTION_PARSERS: List[QuestionParser] = [
    parse_json_questions,
    parse_line_questions,
]


def parse_questions(raw: str) -> List[str]:
    if not raw or not raw.strip():
        return []
    for parser in QUESTION_PARSERS:
        questions = parser(raw)
        if questions is not None:
            return questions
    return []


def normalize_questions(items: Iterable[str], limit: int) -> List[str]:
    """Trim, drop empties, keep the first occurrence of duplicates, cap at `limit`."""
    seen = set()
    result: List[str] = []
    for item in items:
        question = item.strip()
        if not question or question in seen:
            continue
        seen.add(question)
        result.append(question)
        if len(result) >= limit:
            break
    return result
