"""Logger factory shared by every Questio module.

One stream handler is attached to the root logger the first time a logger is
requested. Contact addresses reach the lead-capture path, so the handler
carries a filter that masks anything shaped like an email address.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Final

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_EMAIL_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


class ContactRedactionFilter(logging.Filter):
    """Replace email addresses in the rendered message with [EMAIL]."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "@" in message:
            record.msg = _EMAIL_RE.sub("[EMAIL]", message)
            record.args = None
        return True


def _resolve_level() -> int:
    level_name = os.getenv("QUESTIO_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; the root handler is installed once per process."""
    global _HANDLER_ATTACHED

    level = _resolve_level()
    root = logging.getLogger()

    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler.addFilter(ContactRedactionFilter())
        root.addHandler(handler)
        _HANDLER_ATTACHED = True

    root.setLevel(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
