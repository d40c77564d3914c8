"""In-process registry of consulting sessions (lives as long as the API process)."""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable

from cachetools import TTLCache

from questio.config import SESSION_MAX_ENTRIES, SESSION_TTL_SECONDS
from questio.leads import LeadRecorder
from questio.llm.gemini import GenerationCapability
from questio.pipeline import ConsultingSession


class SessionRegistry:
    def __init__(
        self,
        capability: GenerationCapability,
        lead_recorder: LeadRecorder,
        maxsize: int = SESSION_MAX_ENTRIES,
        ttl: float = SESSION_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.capability = capability
        self.lead_recorder = lead_recorder
        # TTLCache bounds memory: abandoned sessions expire, oldest evicted at maxsize
        self._sessions: TTLCache[str, ConsultingSession] = TTLCache(
            maxsize=maxsize, ttl=ttl, timer=timer
        )

    def create(self) -> tuple[str, ConsultingSession]:
        session_id = str(uuid.uuid4())
        session = ConsultingSession(self.capability, self.lead_recorder)
        self._sessions[session_id] = session
        return session_id, session

    def get(self, session_id: str) -> ConsultingSession | None:
        return self._sessions.get(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
