# quiznova/main.py
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from quiznova.api.quiz_routes import router as quiz_router
from quiznova.config import Settings
from quiznova.errors import InvalidInput, QuizNovaError
from quiznova.llm_client import CompletionClient
from quiznova.logging_config import setup_logging
from quiznova.schemas import MAX_QUESTIONS, MIN_QUESTIONS

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent


def _origin_allowed(origin: str, request: Request, allowed) -> bool:
    origin = origin.rstrip("/")
    if origin in allowed:
        return True
    # The bundled page posts back to the host that served it; only the host is
    # compared since behind a TLS proxy the scheme seen here is http
    host = request.headers.get("host")
    return bool(host) and urlsplit(origin).netloc == host


def create_app(settings: Optional[Settings] = None, completion_client: Optional[CompletionClient] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title="QuizNova", version=settings.version)
    app.state.settings = settings
    app.state.completion_client = completion_client or CompletionClient(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Registered after CORSMiddleware so it runs first
    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and not _origin_allowed(origin, request, settings.allowed_origins):
            logger.warning("CORS origin rejected: %s", origin)
            return JSONResponse(
                status_code=403,
                content={"error": "Not allowed by CORS", "message": f"Origin {origin} is not allowed"},
            )
        return await call_next(request)

    @app.exception_handler(QuizNovaError)
    async def quiznova_error_handler(request: Request, exc: QuizNovaError):
        if exc.status_code >= 500:
            logger.error("Quiz generation error: %s", exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Malformed request body on %s", request.url.path)
        err = InvalidInput("Request body must be a JSON object")
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            logger.info("404 hit for path: %s", request.url.path)
            return JSONResponse(status_code=404, content={"error": "Not Found", "message": f"No route for {request.url.path}"})
        return JSONResponse(status_code=exc.status_code, content={"error": "Request failed", "message": str(exc.detail)})

    app.include_router(quiz_router)

    app.mount("/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static")
    templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))

    @app.get("/", response_class=HTMLResponse)
    async def home(request: Request):
        return templates.TemplateResponse(
            request,
            "index.html",
            {"title": settings.app_title, "min_questions": MIN_QUESTIONS, "max_questions": MAX_QUESTIONS},
        )

    logger.info("%s %s ready; allowed origins: %s", settings.app_title, settings.version, ", ".join(settings.allowed_origins))
    return app


def main() -> None:
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
