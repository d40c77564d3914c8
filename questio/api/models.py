"""
API request/response models.

Requests are converted into domain objects (SurveyAnswers) at the boundary;
responses are flattened views of an AnalysisResult for the web client.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

from questio.config import API_EMAIL_MAX_CHARS, API_MAX_TARGETS
from questio.recommend.models import (
    Concern,
    ScopeTag,
    SolvingStyle,
    Subject,
    SurveyAnswers,
    Tier,
)
from questio.recommend.scoring import describe_recommendations
from questio.report.models import AnalysisResult, ReportSection

_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


# ============================================================================
# Requests
# ============================================================================


class SurveyRequest(BaseModel):
    """A completed questionnaire submitted by the wizard."""

    tier: Tier
    target_universities: list[str] = Field(..., min_length=1, max_length=API_MAX_TARGETS)
    csat_subject: Subject
    study_scope: list[ScopeTag] = Field(..., min_length=1)
    solving_style: SolvingStyle
    writing_concern: Concern

    @field_validator("target_universities")
    @classmethod
    def first_target_required(cls, v: list[str]) -> list[str]:
        if not v[0].strip():
            raise ValueError("first-choice university is required")
        return v

    def to_answers(self) -> SurveyAnswers:
        padded = self.target_universities + [""] * (API_MAX_TARGETS - len(self.target_universities))
        return SurveyAnswers(
            tier=self.tier,
            target_universities=tuple(padded),
            csat_subject=self.csat_subject,
            study_scope=frozenset(self.study_scope),
            solving_style=self.solving_style,
            writing_concern=self.writing_concern,
        )


class ReportRequest(BaseModel):
    """Contact submitted to unlock the detailed report."""

    email: str = Field(..., max_length=API_EMAIL_MAX_CHARS)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not _EMAIL_RE.match(v):
            raise ValueError("invalid email address")
        return v


# ============================================================================
# Responses
# ============================================================================


class RecommendationOut(BaseModel):
    rank: int
    name: str
    tier: str
    features: str
    is_target: bool
    style_match: bool
    match_rate: int


class ReportSectionOut(BaseModel):
    title: str
    content: str
    pro_tip: str | None = None
    diagram_description: str | None = None
    diagram: dict[str, Any] | None = None

    @classmethod
    def from_section(cls, section: ReportSection) -> ReportSectionOut:
        return cls(
            title=section.title,
            content=section.content,
            pro_tip=section.pro_tip,
            diagram_description=section.diagram_description,
            diagram=section.diagram.to_dict() if section.diagram is not None else None,
        )


class CitationOut(BaseModel):
    uri: str
    title: str


class AnalysisResponse(BaseModel):
    session_id: str
    state: str
    persona_name: str
    analysis_text: str
    recommendations: list[RecommendationOut]
    detailed_report: list[ReportSectionOut] | None = None
    persona_image_url: str | None = None
    citations: list[CitationOut] = Field(default_factory=list)

    @classmethod
    def from_result(
        cls, session_id: str, answers: SurveyAnswers, result: AnalysisResult
    ) -> AnalysisResponse:
        recommendations = [
            RecommendationOut(
                rank=rec.rank,
                name=rec.university.name,
                tier=rec.university.tier.value,
                features=rec.university.features,
                is_target=rec.is_target,
                style_match=rec.style_match,
                match_rate=rec.match_rate,
            )
            for rec in describe_recommendations(answers, result.recommendations)
        ]
        report = None
        if result.detailed_report is not None:
            report = [ReportSectionOut.from_section(s) for s in result.detailed_report]

        return cls(
            session_id=session_id,
            state=result.state.value,
            persona_name=result.persona_name,
            analysis_text=result.analysis_text,
            recommendations=recommendations,
            detailed_report=report,
            persona_image_url=result.persona_image.data_uri if result.persona_image else None,
            citations=[CitationOut(uri=c.uri, title=c.title) for c in result.citations],
        )
