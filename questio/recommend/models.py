"""
Survey and catalog domain models.

SurveyAnswers is the fully-populated questionnaire the scoring engine and the
generation pipeline consume. It knows nothing about wizard steps; the wizard
(questio.survey.wizard) is responsible for producing one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Tier(str, Enum):
    """Target university line."""

    TOP = "상위권"
    MIDDLE = "중위권"
    SHORT_ANSWER = "약술형"


class Subject(str, Enum):
    """Elective math subject taken on the CSAT (수능)."""

    CALCULUS = "미적분"
    PROBABILITY = "확률과 통계"
    GEOMETRY = "기하"


class ScopeTag(str, Enum):
    """Curriculum unit a student can cover / a university examines."""

    MATH_1 = "수학 I"
    MATH_2 = "수학 II"
    CALCULUS = "미적분"
    PROBABILITY = "확률과 통계"
    GEOMETRY = "기하"


class SolvingStyle(str, Enum):
    CALCULATION = "연산 중심"
    ARGUMENT = "논증 중심"


class Concern(str, Enum):
    """Biggest worry when writing answers."""

    TIME_AND_ARITHMETIC = "시간 부족/계산 실수"
    LOGIC_GAPS = "논리 비약/서술 부족"


class SurveyAnswers(BaseModel):
    """
    A completed questionnaire.

    target_universities keeps the student's preference order (1지망 first)
    and may contain blank entries; only the first one is required, and only
    by the report flows. study_scope is a set: membership matters, order
    does not.
    """

    model_config = ConfigDict(frozen=True)

    tier: Tier
    target_universities: tuple[str, ...] = Field(default=("", "", ""), max_length=3)
    csat_subject: Subject
    study_scope: frozenset[ScopeTag]
    solving_style: SolvingStyle
    writing_concern: Concern

    @field_validator("target_universities", mode="before")
    @classmethod
    def coerce_targets(cls, v: object) -> object:
        if isinstance(v, list):
            return tuple("" if t is None else t for t in v)
        return v

    @property
    def primary_target(self) -> str:
        """First-choice university, trimmed ('' when not given)."""
        if not self.target_universities:
            return ""
        return self.target_universities[0].strip()

    def valid_targets(self) -> list[str]:
        """Trimmed, non-empty target names in preference order."""
        return [t.strip() for t in self.target_universities if t.strip()]

    def scope_labels(self) -> list[str]:
        """Scope tags in curriculum order, for prompts and display."""
        return [tag.value for tag in ScopeTag if tag in self.study_scope]


@dataclass(frozen=True)
class University:
    """A catalog entry. Loaded once at import time and never mutated."""

    name: str
    type: int
    tier: Tier
    scope: frozenset[ScopeTag]
    preferred_style: SolvingStyle
    features: str

    def covers(self, scope: frozenset[ScopeTag]) -> bool:
        """True when every unit this university examines is in ``scope``."""
        return self.scope <= scope
