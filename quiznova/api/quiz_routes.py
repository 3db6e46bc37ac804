# quiznova/api/quiz_routes.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Body, Request
from pydantic import ValidationError

from quiznova.errors import InvalidInput
from quiznova.llm_client import generate_questions
from quiznova.schemas import MAX_QUESTIONS, MIN_QUESTIONS, ErrorResponse, HealthResponse, QuizRequest, QuizResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_FIELD_MESSAGES = {
    "topic": "Please provide a valid topic for the quiz",
    "count": f"Please request between {MIN_QUESTIONS} and {MAX_QUESTIONS} questions",
    "difficulty": "Difficulty must be one of easy, medium or hard",
}


def parse_quiz_request(payload: Any) -> QuizRequest:
    """Validate a raw request body, reporting the first bad field in plain words."""
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object")
    try:
        return QuizRequest.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else ""
        logger.info("Rejected quiz request (%s): %s", field or "body", first.get("msg"))
        raise InvalidInput(_FIELD_MESSAGES.get(field, "Invalid quiz request"), detail={"field": field}) from e


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    return HealthResponse(
        status="ok",
        version=request.app.state.settings.version,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.post(
    "/generate-quiz",
    response_model=QuizResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_quiz(request: Request, payload: Dict[str, Any] = Body(...)):
    logger.info("Quiz generation request received: %s", payload)
    quiz_request = parse_quiz_request(payload)
    questions = await generate_questions(quiz_request, request.app.state.completion_client)
    return QuizResponse(questions=questions)
