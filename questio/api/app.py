"""FastAPI server for Questio"""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from questio.api.routes.analysis import router as analysis_router
from questio.api.routes.health import router as health_router
from questio.api.sessions import SessionRegistry
from questio.config import API_HOST, API_PORT, APP_VERSION, LEADS_FILE
from questio.infrastructure.settings import is_development
from questio.leads import JsonlLeadStore, LeadRecorder
from questio.llm.gemini import GeminiCapability, GenerationCapability
from questio.observability.logging import get_logger
from questio.observability.telemetry import counter, log_event

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Custom validation error handler that prevents leaking internal validation logic.
    """
    logger.warning("Validation error on %s: %d error(s)", request.url.path, len(exc.errors()))
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


def _allowed_origins() -> list[str]:
    origins = [o.strip() for o in os.getenv("QUESTIO_ALLOWED_ORIGINS", "").split(",") if o.strip()]
    # Allow localhost in development only
    if is_development():
        origins.extend(
            [
                "http://localhost:3000",
                "http://localhost:5173",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:5173",
            ]
        )
    return origins


def create_app(
    capability: GenerationCapability | None = None,
    lead_recorder: LeadRecorder | None = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        capability: Generation capability (defaults to GeminiCapability)
        lead_recorder: Lead recorder (defaults to JsonlLeadStore at LEADS_FILE)
    """
    app = FastAPI(title="Questio API", version=APP_VERSION)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    app.state.sessions = SessionRegistry(
        capability=capability or GeminiCapability(),
        lead_recorder=lead_recorder or JsonlLeadStore(LEADS_FILE),
    )

    app.include_router(health_router)
    app.include_router(analysis_router)

    @app.get("/")
    def root() -> dict[str, Any]:
        return {
            "service": "Questio API",
            "version": APP_VERSION,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "analysis": "/api/analysis",
                "report": "/api/analysis/{session_id}/report",
            },
        }

    log_event("api.startup", service="questio", version=APP_VERSION)
    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run("questio.api.app:app", host=API_HOST, port=API_PORT)
