"""Centralized configuration for the Questio backend.

Re-exports everything from questio.infrastructure.settings so callers have a
single import point, then adds typed constants for scoring, report
generation, prompt input limits and the API.  Environment variable overrides
use safe defaults so the app starts without extra env configuration.
"""

from __future__ import annotations

import os

from questio.infrastructure.settings import *  # noqa: F401, F403

# --- App ---
APP_VERSION: str = "1.0.0"

# --- Recommendation ---
RECOMMENDATION_LIMIT: int = 5
MATCH_RATE_STEP: int = 5

# --- Report ---
REPORT_SECTION_COUNT: int = 15

# --- LLM ---
LLM_TIMEOUT_SECONDS: int = int(os.getenv("QUESTIO_LLM_TIMEOUT", "120"))
PROMPT_TARGET_MAX_CHARS: int = 40

# --- API ---
API_MAX_TARGETS: int = 3
API_EMAIL_MAX_CHARS: int = 254

# --- Sessions ---
SESSION_MAX_ENTRIES: int = 10000
SESSION_TTL_SECONDS: int = int(os.getenv("QUESTIO_SESSION_TTL", "3600"))
