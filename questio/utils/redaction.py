"""
Redaction helpers for contacts and free-text survey input.

Provides:
- redact(): Hash a contact address for log correlation without exposure
- sanitize_for_prompt(): Strip prompt-injection patterns from user text
"""

from __future__ import annotations

import re
from hashlib import sha256

# Patterns that could be used for prompt injection
INJECTION_PATTERNS = [
    r"ignore\s+(previous|above|all)\s+instructions?",
    r"disregard\s+(previous|above|all)\s+instructions?",
    r"new\s+instructions?:",
    r"system\s*:",
    r"assistant\s*:",
    r"이전\s*지시(를|는)?\s*무시",
]
INJECTION_REGEX = re.compile("|".join(INJECTION_PATTERNS), re.IGNORECASE)


def redact(value: str | None) -> str:
    """
    Return a stable hash representation of a sensitive string.
    """
    if not value:
        return "hash:missing"
    digest = sha256(value.strip().lower().encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def sanitize_for_prompt(text: str | None, max_length: int = 40) -> str:
    """
    Sanitize a user-typed value (e.g. a target university) before it is
    interpolated into a prompt.

    Truncates, removes known injection phrases, and drops characters that
    would collide with the JSON/format braces used in the templates.
    """
    if not text:
        return ""

    text = text.strip()[:max_length]
    text = INJECTION_REGEX.sub("", text)
    text = re.sub(r"[<>{}|\\`$]", "", text)
    text = re.sub(r"\s+", " ", text)

    return text.strip()
