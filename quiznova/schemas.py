# quiznova/schemas.py
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Difficulty = Literal["easy", "medium", "hard"]

OPTION_LETTERS = "ABCD"
MIN_QUESTIONS = 3
MAX_QUESTIONS = 10


class QuizQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    # Wire name is camelCase, matching what the model is prompted to emit
    correct_answer: str = Field(..., alias="correctAnswer", min_length=1)

    @model_validator(mode="after")
    def check_answer_is_option(self) -> "QuizQuestion":
        if len(set(self.options)) != len(self.options):
            raise ValueError("options must be distinct")
        if self.correct_answer not in self.options:
            raise ValueError("correctAnswer must be one of the options")
        return self


class QuizRequest(BaseModel):
    topic: str
    count: int = Field(..., ge=MIN_QUESTIONS, le=MAX_QUESTIONS)
    difficulty: Optional[Difficulty] = None

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("topic must not be empty")
        return v

    @field_validator("difficulty", mode="before")
    @classmethod
    def lower_difficulty(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v


class QuizResponse(BaseModel):
    questions: List[QuizQuestion]


class ErrorResponse(BaseModel):
    error: str
    message: str
    code: Optional[str] = None
    detail: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
