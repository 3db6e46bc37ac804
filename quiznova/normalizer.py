# quiznova/normalizer.py
"""
Coerce a chat-completion reply into validated quiz questions.

Models are asked for a bare JSON array but often wrap it in a markdown fence,
add a sentence before or after it, drop the "A) " labels, or give the answer
as a bare letter. Everything here is a linear pass over at most ten items.
"""
import json
import logging
import re
from typing import Any, List

from quiznova.errors import (
    AnswerMismatch,
    CountMismatch,
    DuplicateOptions,
    IncompleteQuestion,
    MalformedResponse,
)
from quiznova.schemas import OPTION_LETTERS, QuizQuestion

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")
# "A)", "(A)", "a)", or "A." / "A:" followed by whitespace
_LABEL = re.compile(r"^\(?([A-Da-d])(?:\)|[.:](?=\s))\s*")
_LETTER_ONLY = re.compile(r"\(?([A-Da-d])\)?[.:]?")


def option_prefix(position: int) -> str:
    return f"{OPTION_LETTERS[position]}) "


def strip_fence(raw_text: str) -> str:
    content = raw_text.strip()
    if content.startswith("```"):
        content = _FENCE_OPEN.sub("", content, count=1)
        content = _FENCE_CLOSE.sub("", content.rstrip(), count=1)
    return content.strip()


def extract_array(raw_text: str) -> List[Any]:
    """Return the JSON array found between the first '[' and the last ']'."""
    content = strip_fence(raw_text)
    start = content.find("[")
    end = content.rfind("]")
    if start == -1 or end == -1 or end < start:
        logger.error("No JSON array in model reply: %s", content[:400])
        raise MalformedResponse("Response does not contain a JSON array")

    try:
        items = json.loads(content[start:end + 1])
    except json.JSONDecodeError as e:
        logger.error("Failed to decode JSON array from model reply: %s", content[:400])
        raise MalformedResponse(f"Failed to parse quiz data: {e}") from e

    if not isinstance(items, list):
        raise MalformedResponse("Response is not a valid array")
    return items


def repair_prefix(option: str, position: int) -> str:
    """Make sure ``option`` starts with the label for its position.

    A label already naming this position in a looser form ("A.", "(A)", "a)")
    is rewritten instead of doubled; anything else gets the prefix prepended.
    """
    prefix = option_prefix(position)
    if option.startswith(prefix):
        return option
    match = _LABEL.match(option)
    if match and match.group(1).upper() == OPTION_LETTERS[position]:
        return prefix + option[match.end():]
    return prefix + option


def _resolve_answer(answer: str, options: List[str]) -> str:
    letter_only = _LETTER_ONLY.fullmatch(answer)
    if letter_only:
        return options[OPTION_LETTERS.index(letter_only.group(1).upper())]
    match = _LABEL.match(answer)
    if match:
        return option_prefix(OPTION_LETTERS.index(match.group(1).upper())) + answer[match.end():]
    return answer


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def normalize_question(item: Any, index: int) -> QuizQuestion:
    if not isinstance(item, dict):
        raise IncompleteQuestion(index, "is not an object")

    text = item.get("text")
    options = item.get("options")
    answer = item.get("correctAnswer")

    if not _non_empty_str(text):
        raise IncompleteQuestion(index, "missing text")
    if not isinstance(options, list) or len(options) != len(OPTION_LETTERS):
        raise IncompleteQuestion(index, "must have exactly 4 options")
    if not all(_non_empty_str(o) for o in options):
        raise IncompleteQuestion(index, "has an empty option")
    if not _non_empty_str(answer):
        raise IncompleteQuestion(index, "missing correctAnswer")

    normalized = [repair_prefix(o.strip(), i) for i, o in enumerate(options)]

    bodies = [o[len(option_prefix(i)):].strip().casefold() for i, o in enumerate(normalized)]
    if not all(bodies):
        raise IncompleteQuestion(index, "has an empty option")
    if len(set(bodies)) != len(bodies):
        raise DuplicateOptions(index)

    resolved = _resolve_answer(answer.strip(), normalized)
    if normalized.count(resolved) != 1:
        raise AnswerMismatch(index)

    return QuizQuestion(text=text.strip(), options=normalized, correct_answer=resolved)


def normalize_questions(raw_text: str, count: int) -> List[QuizQuestion]:
    """Turn raw model output into exactly ``count`` validated questions, in source order."""
    items = extract_array(raw_text)
    questions = [normalize_question(item, i) for i, item in enumerate(items)]
    if len(questions) != count:
        raise CountMismatch(count, len(questions))
    return questions
