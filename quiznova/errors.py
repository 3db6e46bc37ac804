# quiznova/errors.py
from typing import Any, Dict, Optional


class QuizNovaError(Exception):
    """Base error carrying the HTTP status and the JSON body fields it maps to."""

    status_code = 500
    error = "Failed to generate quiz"
    code = "quiz_error"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error, "message": self.message, "code": self.code}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class InvalidInput(QuizNovaError):
    status_code = 400
    error = "Invalid input"
    code = "invalid_input"


class UpstreamUnavailable(QuizNovaError):
    """Missing credential, transport failure or non-2xx from the completion API."""

    code = "upstream_unavailable"


class NormalizationError(QuizNovaError):
    """The model replied, but the reply could not be coerced into quiz questions."""

    code = "normalization_failed"


class MalformedResponse(NormalizationError):
    code = "malformed_response"


class IncompleteQuestion(NormalizationError):
    code = "incomplete_question"

    def __init__(self, index: int, reason: str):
        super().__init__(f"Question {index + 1} {reason}", detail={"index": index})
        self.index = index


class DuplicateOptions(NormalizationError):
    code = "duplicate_options"

    def __init__(self, index: int):
        super().__init__(f"Question {index + 1} has duplicate options", detail={"index": index})
        self.index = index


class AnswerMismatch(NormalizationError):
    code = "answer_mismatch"

    def __init__(self, index: int):
        super().__init__(f"Question {index + 1} correctAnswer doesn't match any option", detail={"index": index})
        self.index = index


class CountMismatch(NormalizationError):
    code = "count_mismatch"

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Expected {expected} questions, got {actual}",
            detail={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual
