# quiznova/config.py
import os
from typing import Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from quiznova import __version__

DEFAULT_COMPLETION_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "deepseek/deepseek-r1-0528-qwen3-8b:free"
DEFAULT_ALLOWED_ORIGINS = (
    "https://quiz-nova-zeta.vercel.app",
    "http://localhost:3000",
)


def _split_origins(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_ALLOWED_ORIGINS
    return tuple(o.strip().rstrip("/") for o in raw.split(",") if o.strip())


class Settings(BaseModel):
    """Everything the service needs at startup. Built once and passed into create_app()."""

    model_config = ConfigDict(frozen=True)

    openrouter_api_key: Optional[str] = None
    completion_url: str = DEFAULT_COMPLETION_URL
    model: str = DEFAULT_MODEL
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    request_timeout: float = Field(120.0, gt=0)
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    app_referer: str = "https://quiz-nova-zeta.vercel.app"
    app_title: str = "QuizNova"
    version: str = __version__
    log_level: str = "INFO"
    log_file: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        env = os.environ
        return cls(
            openrouter_api_key=(env.get("OPENROUTER_API_KEY") or "").strip() or None,
            completion_url=env.get("OPENROUTER_URL", DEFAULT_COMPLETION_URL),
            model=env.get("OPENROUTER_MODEL", DEFAULT_MODEL),
            temperature=float(env.get("LLM_TEMPERATURE", "0.7")),
            request_timeout=float(env.get("LLM_TIMEOUT_SECONDS", "120")),
            allowed_origins=_split_origins(env.get("ALLOWED_ORIGINS")),
            app_referer=env.get("APP_REFERER", "https://quiz-nova-zeta.vercel.app"),
            app_title=env.get("APP_TITLE", "QuizNova"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_file=env.get("LOG_FILE") or None,
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "8080")),
        )
