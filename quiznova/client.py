# quiznova/client.py
import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from quiznova.schemas import QuizQuestion, QuizResponse

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Failed to generate quiz. Try again."


class GenerationFailed(Exception):
    """Quiz generation did not produce a usable question list."""

    def __init__(self, message: str = GENERATION_FAILED_MESSAGE):
        super().__init__(message)
        self.message = message


class QuizServiceClient:
    """Calls POST /api/generate-quiz on a running QuizNova service."""

    def __init__(self, base_url: str = "http://localhost:8080", timeout: float = 130.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def generate_quiz(self, topic: str, count: int, difficulty: Optional[str] = None) -> List[QuizQuestion]:
        body = {"topic": topic, "count": count}
        if difficulty:
            body["difficulty"] = difficulty

        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post("/api/generate-quiz", json=body)
        except httpx.RequestError as e:
            logger.error("Failed to reach quiz service at %s: %s", self.base_url, e)
            raise GenerationFailed() from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.is_success or not isinstance(data, dict) or not data.get("questions"):
            logger.error("Quiz generation failed: %s %s", resp.status_code, resp.text[:400])
            raise GenerationFailed()

        try:
            return QuizResponse.model_validate(data).questions
        except ValidationError as e:
            logger.error("Quiz service returned questions that do not validate: %s", e)
            raise GenerationFailed() from e
