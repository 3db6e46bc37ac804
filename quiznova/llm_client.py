# quiznova/llm_client.py
import logging
from typing import List, Optional

import httpx

from quiznova.config import Settings
from quiznova.errors import MalformedResponse, UpstreamUnavailable
from quiznova.normalizer import normalize_questions
from quiznova.prompts import SYSTEM_PROMPT, build_prompt
from quiznova.schemas import QuizQuestion, QuizRequest

logger = logging.getLogger(__name__)


class CompletionClient:
    """Text-in/text-out wrapper around the OpenRouter chat-completions endpoint.

    One request per call, no retries: a failure surfaces immediately as
    UpstreamUnavailable.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.openrouter_api_key}",
            "HTTP-Referer": self.settings.app_referer,
            "X-Title": self.settings.app_title,
        }

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        if not self.settings.openrouter_api_key:
            logger.error("Missing OpenRouter API key")
            raise UpstreamUnavailable("Missing OpenRouter API key")

        payload = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.settings.temperature,
        }

        url = self.settings.completion_url
        logger.info("Sending completion request to %s with model %s", url, self.settings.model)
        try:
            async with httpx.AsyncClient(timeout=self.settings.request_timeout, transport=self._transport) as client:
                resp = await client.post(url, json=payload, headers=self._headers())
        except httpx.TimeoutException as e:
            logger.error("Completion API timed out after %ss", self.settings.request_timeout)
            raise UpstreamUnavailable("Completion API timed out") from e
        except httpx.RequestError as e:
            logger.error("Completion API request failed: %s", e)
            raise UpstreamUnavailable(f"Completion API request failed: {e}") from e

        if not resp.is_success:
            logger.error("Completion API error: %s %s", resp.status_code, resp.text[:400])
            raise UpstreamUnavailable(
                f"API Error: {resp.status_code} - {resp.text[:400]}",
                detail={"status": resp.status_code},
            )

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected completion payload: %s", resp.text[:400])
            raise MalformedResponse("Unexpected completion payload from AI") from e

        if not isinstance(content, str) or not content.strip():
            logger.error("Empty response from completion API")
            raise MalformedResponse("Empty response from AI")
        return content.strip()


async def generate_questions(quiz_request: QuizRequest, client: CompletionClient) -> List[QuizQuestion]:
    """Prompt the model for a quiz and normalize its reply."""
    prompt = build_prompt(quiz_request.topic, quiz_request.count, quiz_request.difficulty)
    logger.debug("Quiz prompt:\n%s", prompt)

    content = await client.complete(SYSTEM_PROMPT, prompt)
    logger.debug("Raw model reply:\n%s", content)

    questions = normalize_questions(content, quiz_request.count)
    logger.info("Generated %d questions on %r", len(questions), quiz_request.topic)
    return questions
