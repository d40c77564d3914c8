"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.parent

ENV = os.getenv("QUESTIO_ENV", "development")

# API Configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# Google Cloud / Gemini
# Vertex AI is used when GOOGLE_CLOUD_PROJECT is set, otherwise GOOGLE_API_KEY.
GOOGLE_CLOUD_PROJECT = os.getenv("GOOGLE_CLOUD_PROJECT")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GEMINI_LOCATION = os.getenv("GEMINI_LOCATION", "global")
GEMINI_FAST_MODEL = os.getenv("GEMINI_FAST_MODEL", "gemini-3-flash-preview")
GEMINI_DEEP_MODEL = os.getenv("GEMINI_DEEP_MODEL", "gemini-3-pro-preview")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "1.0"))

# Lead capture
LEADS_FILE = Path(os.getenv("QUESTIO_LEADS_FILE", str(PROJECT_ROOT / "data" / "leads.jsonl")))


def is_development() -> bool:
    """Check if running in development"""
    return os.getenv("QUESTIO_ENV", ENV) == "development"
