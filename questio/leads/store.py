"""
Lead recorder interface and the bundled JSON-lines implementation.

The pipeline only depends on LeadRecorder.record(); where leads end up is
the recorder's business. JsonlLeadStore appends one
{contact, answers, timestamp} object per line and never reads the file back.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from questio.observability.logging import get_logger
from questio.observability.telemetry import counter, log_event
from questio.recommend.models import SurveyAnswers
from questio.utils.redaction import redact

logger = get_logger(__name__)


class LeadCaptureError(RuntimeError):
    """The contact could not be recorded; report generation must not start."""


@dataclass(frozen=True)
class LeadAck:
    success: bool
    recorded_at: datetime


class LeadRecorder(Protocol):
    async def record(self, contact: str, answers: SurveyAnswers) -> LeadAck: ...


class JsonlLeadStore:
    """Append-only lead log on the local filesystem."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _append(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    async def record(self, contact: str, answers: SurveyAnswers) -> LeadAck:
        """
        Append a lead record.

        Raises:
            LeadCaptureError: If the record cannot be written

        Side Effects:
            - Appends one line to self.path (creates parent directories)
            - Increments leads.recorded / leads.error
        """
        recorded_at = datetime.now(UTC)
        entry = {
            "contact": contact,
            "answers": answers.model_dump(mode="json"),
            "timestamp": recorded_at.isoformat(),
        }
        line = json.dumps(entry, ensure_ascii=False)

        try:
            await asyncio.to_thread(self._append, line)
        except OSError as e:
            counter("leads.error")
            logger.error("Failed to record lead %s: %s", redact(contact), e)
            raise LeadCaptureError(f"could not record lead: {e}") from e

        counter("leads.recorded")
        log_event("leads.recorded", contact=redact(contact))
        return LeadAck(success=True, recorded_at=recorded_at)
