"""
Gemini generation capability.

The orchestrator never touches the SDK: it talks to a GenerationCapability
(one async method per call shape) that is constructed once and injected.
GeminiCapability is the production implementation on top of google-genai;
tests inject deterministic fakes with the same two methods.

Supports two backends through the same client:
  1. Vertex AI (production): uses GOOGLE_CLOUD_PROJECT + service account
  2. Gemini Developer API (local dev): uses GOOGLE_API_KEY
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Protocol

from questio.config import LLM_TIMEOUT_SECONDS
from questio.infrastructure.settings import (
    GEMINI_DEEP_MODEL,
    GEMINI_FAST_MODEL,
    GEMINI_IMAGE_MODEL,
    GEMINI_LOCATION,
    GEMINI_TEMPERATURE,
    GOOGLE_API_KEY,
    GOOGLE_CLOUD_PROJECT,
)
from questio.observability.logging import get_logger
from questio.observability.telemetry import counter

logger = get_logger(__name__)


class GeminiInitializationError(RuntimeError):
    """Raised when the Gemini client cannot be initialized."""


class GenerationError(RuntimeError):
    """Opaque failure of a generation call (network, quota, server, timeout)."""


class ModelTier(str, Enum):
    """Class of model a request needs; mapped to concrete model names in settings."""

    FAST = "fast"
    DEEP = "deep"
    IMAGE = "image"


# ---------------------------------------------------------------------------
# Request / response contract
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextRequest:
    prompt: str
    response_schema: dict[str, Any] | None = None
    model_tier: ModelTier = ModelTier.FAST
    use_search: bool = False


@dataclass(frozen=True)
class GroundingSource:
    """One grounding chunk attached to a response (web page or other corpus)."""

    source_type: str  # "web" | "retrieved_context"
    uri: str
    title: str


@dataclass(frozen=True)
class TextResponse:
    text: str
    grounding_sources: tuple[GroundingSource, ...] = ()


@dataclass(frozen=True)
class ImageRequest:
    prompt: str
    model_tier: ModelTier = ModelTier.IMAGE


@dataclass(frozen=True)
class ResponsePart:
    """A content part of an image response: inline bytes or text."""

    mime_type: str | None = None
    data: bytes | None = None
    text: str | None = None

    @property
    def has_inline_data(self) -> bool:
        return bool(self.data)


@dataclass(frozen=True)
class ImageResponse:
    parts: tuple[ResponsePart, ...] = ()


class GenerationCapability(Protocol):
    """What the report pipeline needs from a generative model service."""

    async def generate_text(self, request: TextRequest) -> TextResponse: ...

    async def generate_image(self, request: ImageRequest) -> ImageResponse: ...


# ---------------------------------------------------------------------------
# Gemini implementation
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_genai_client():
    """
    Get or create the shared google-genai client.

    Uses Vertex AI when GOOGLE_CLOUD_PROJECT is set, otherwise the Gemini
    Developer API with GOOGLE_API_KEY.

    Raises:
        GeminiInitializationError: If neither credential is available
    """
    from google import genai
    from google.genai import types

    # Read env vars fresh (settings may have been imported before dotenv ran)
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    location = os.getenv("GEMINI_LOCATION") or GEMINI_LOCATION
    api_key = os.getenv("GOOGLE_API_KEY") or GOOGLE_API_KEY
    http_options = types.HttpOptions(timeout=LLM_TIMEOUT_SECONDS * 1000)

    try:
        if project:
            client = genai.Client(
                vertexai=True, project=project, location=location, http_options=http_options
            )
            logger.info(
                "Initialized Gemini client (Vertex AI): project=%s, location=%s", project, location
            )
            return client

        if api_key:
            client = genai.Client(api_key=api_key, http_options=http_options)
            logger.info("Initialized Gemini client (Developer API)")
            return client
    except Exception as e:
        logger.error("Failed to initialize Gemini client: %s", e)
        raise GeminiInitializationError(f"Failed to initialize Gemini: {e}") from e

    raise GeminiInitializationError(
        "Neither GOOGLE_CLOUD_PROJECT nor GOOGLE_API_KEY is set."
    )


def clear_client_cache() -> None:
    """
    Clear the cached client instance.

    Useful for testing or when credentials change.
    """
    get_genai_client.cache_clear()
    logger.info("Cleared Gemini client cache")


DEFAULT_MODELS: dict[ModelTier, str] = {
    ModelTier.FAST: GEMINI_FAST_MODEL,
    ModelTier.DEEP: GEMINI_DEEP_MODEL,
    ModelTier.IMAGE: GEMINI_IMAGE_MODEL,
}


class GeminiCapability:
    """GenerationCapability backed by google-genai's async client."""

    def __init__(self, client: Any = None, models: dict[ModelTier, str] | None = None):
        # Client is resolved lazily so the API can start without credentials
        self._client = client
        self._models = {**DEFAULT_MODELS, **(models or {})}

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_genai_client()
        return self._client

    def model_for(self, tier: ModelTier) -> str:
        return self._models[tier]

    async def generate_text(self, request: TextRequest) -> TextResponse:
        from google.genai import types

        config_params: dict[str, Any] = {"temperature": GEMINI_TEMPERATURE}
        if request.response_schema is not None:
            config_params["response_mime_type"] = "application/json"
            config_params["response_schema"] = request.response_schema
        if request.use_search:
            config_params["tools"] = [types.Tool(google_search=types.GoogleSearch())]

        model = self.model_for(request.model_tier)
        response = await self._call(
            model, request.prompt, types.GenerateContentConfig(**config_params)
        )
        return TextResponse(
            text=response.text or "",
            grounding_sources=_grounding_sources(response),
        )

    async def generate_image(self, request: ImageRequest) -> ImageResponse:
        from google.genai import types

        model = self.model_for(request.model_tier)
        response = await self._call(
            model,
            request.prompt,
            types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
        )
        return ImageResponse(parts=_response_parts(response))

    async def _call(self, model: str, prompt: str, config: Any) -> Any:
        """Single attempt; SDK errors are converted to GenerationError."""
        from google.genai import errors

        try:
            return await self.client.aio.models.generate_content(
                model=model, contents=prompt, config=config
            )
        except errors.ServerError as e:
            counter("llm.server_error")
            logger.warning("Gemini server error (model=%s): %s", model, e)
            raise GenerationError(f"Gemini server error: {e}") from e
        except errors.ClientError as e:
            if e.code == 429:
                counter("llm.rate_limited")
                logger.warning("Gemini rate limited (model=%s): %s", model, e)
            else:
                counter("llm.client_error")
                logger.error("Gemini rejected request (model=%s): %s", model, e)
            raise GenerationError(f"Gemini client error: {e}") from e
        except TimeoutError as e:
            counter("llm.timeout")
            logger.warning("Gemini call timed out after %ds (model=%s)", LLM_TIMEOUT_SECONDS, model)
            raise GenerationError(f"Gemini call timed out: {e}") from e


def _first_candidate(response: Any) -> Any:
    candidates = getattr(response, "candidates", None) or []
    return candidates[0] if candidates else None


def _grounding_sources(response: Any) -> tuple[GroundingSource, ...]:
    candidate = _first_candidate(response)
    metadata = getattr(candidate, "grounding_metadata", None) if candidate else None
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is not None and getattr(web, "uri", None):
            sources.append(GroundingSource("web", web.uri, web.title or web.uri))
            continue
        retrieved = getattr(chunk, "retrieved_context", None)
        if retrieved is not None and getattr(retrieved, "uri", None):
            sources.append(
                GroundingSource("retrieved_context", retrieved.uri, retrieved.title or retrieved.uri)
            )
    return tuple(sources)


def _response_parts(response: Any) -> tuple[ResponsePart, ...]:
    candidate = _first_candidate(response)
    content = getattr(candidate, "content", None) if candidate else None
    parts = getattr(content, "parts", None) or []

    result = []
    for part in parts:
        inline = getattr(part, "inline_data", None)
        if inline is not None and getattr(inline, "data", None):
            result.append(ResponsePart(mime_type=inline.mime_type or "image/png", data=inline.data))
        elif getattr(part, "text", None):
            result.append(ResponsePart(text=part.text))
    return tuple(result)
