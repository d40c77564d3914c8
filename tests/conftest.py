"""
Pytest configuration for Questio tests

Provides deterministic fakes for the generation capability and the lead
recorder, plus sample surveys and model payloads.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from questio.leads import LeadAck, LeadCaptureError
from questio.llm.gemini import (
    GenerationError,
    GroundingSource,
    ImageResponse,
    ModelTier,
    ResponsePart,
    TextResponse,
)
from questio.observability.telemetry import reset_telemetry
from questio.recommend.models import (
    Concern,
    ScopeTag,
    SolvingStyle,
    Subject,
    SurveyAnswers,
    Tier,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


def make_report_payload(count: int = 15) -> str:
    """A well-formed detailed-report response with ``count`` sections."""
    diagrams = [
        {"type": "radar", "data": {"labels": ["논리", "연산", "직관"], "studentValues": [70, 80, 60], "targetValues": [90, 85, 80]}},
        {"type": "flowchart", "data": {"steps": ["개념 정리", "기출 분석", "실전 연습", "첨삭"]}},
        {"type": "comparison", "data": {"categories": ["속도", "정확성"], "score": [65, 88]}},
    ]
    sections = [
        {
            "title": f"섹션 {i}",
            "content": f"본문 {i}: $f'(x) = 3x^2$ 를 이용한다.",
            "proTip": f"팁 {i}",
            "diagramDescription": f"도식 {i}",
            "diagram": diagrams[(i - 1) % len(diagrams)],
        }
        for i in range(1, count + 1)
    ]
    return json.dumps(sections, ensure_ascii=False)


ANALYSIS_PAYLOAD = json.dumps(
    {"personaName": "미적분 연산 특화 - 건국대형", "analysisText": "연산 속도가 강점입니다."},
    ensure_ascii=False,
)

WEB_SOURCES = (
    GroundingSource("web", "https://example.com/konkuk-2027", "건국대 2027 모집요강"),
    GroundingSource("retrieved_context", "gs://corpus/notes.txt", "internal notes"),
    GroundingSource("web", "https://example.com/essay-tips", "수리논술 기출 분석"),
)


class FakeCapability:
    """
    Deterministic GenerationCapability.

    Records every request. Text responses are picked by model tier (FAST ->
    analysis, DEEP -> report); set the matching *_error to make a call raise.
    """

    def __init__(
        self,
        analysis_text: str = ANALYSIS_PAYLOAD,
        report_text: str | None = None,
        grounding_sources: tuple[GroundingSource, ...] = WEB_SOURCES,
        image_parts: tuple[ResponsePart, ...] = (ResponsePart(mime_type="image/png", data=PNG_BYTES),),
        analysis_error: Exception | None = None,
        report_error: Exception | None = None,
        image_error: Exception | None = None,
    ):
        self.analysis_text = analysis_text
        self.report_text = make_report_payload() if report_text is None else report_text
        self.grounding_sources = grounding_sources
        self.image_parts = image_parts
        self.analysis_error = analysis_error
        self.report_error = report_error
        self.image_error = image_error
        self.text_requests = []
        self.image_requests = []

    async def generate_text(self, request):
        self.text_requests.append(request)
        if request.model_tier == ModelTier.DEEP:
            if self.report_error is not None:
                raise self.report_error
            return TextResponse(text=self.report_text, grounding_sources=self.grounding_sources)
        if self.analysis_error is not None:
            raise self.analysis_error
        return TextResponse(text=self.analysis_text)

    async def generate_image(self, request):
        self.image_requests.append(request)
        if self.image_error is not None:
            raise self.image_error
        return ImageResponse(parts=self.image_parts)


class FakeLeadRecorder:
    """Collects leads in memory; optionally fails every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records = []

    async def record(self, contact, answers):
        if self.fail:
            raise LeadCaptureError("storage unavailable")
        self.records.append((contact, answers))
        return LeadAck(success=True, recorded_at=datetime.now(UTC))


@pytest.fixture(autouse=True)
def _reset_telemetry():
    """Counters are module-global; start every test from zero."""
    reset_telemetry()
    yield
    reset_telemetry()


@pytest.fixture
def answers() -> SurveyAnswers:
    """중위권, 수학 I/II only, calculation style, 1지망 건국대."""
    return SurveyAnswers(
        tier=Tier.MIDDLE,
        target_universities=("건국대", "", ""),
        csat_subject=Subject.CALCULUS,
        study_scope=frozenset({ScopeTag.MATH_1, ScopeTag.MATH_2}),
        solving_style=SolvingStyle.CALCULATION,
        writing_concern=Concern.TIME_AND_ARITHMETIC,
    )


@pytest.fixture
def argument_answers() -> SurveyAnswers:
    """상위권 full-range argument-style student aiming at 연세대/고려대."""
    return SurveyAnswers(
        tier=Tier.TOP,
        target_universities=("연세대", "고려대", ""),
        csat_subject=Subject.GEOMETRY,
        study_scope=frozenset(ScopeTag),
        solving_style=SolvingStyle.ARGUMENT,
        writing_concern=Concern.LOGIC_GAPS,
    )


@pytest.fixture
def capability() -> FakeCapability:
    return FakeCapability()


@pytest.fixture
def failing_capability() -> FakeCapability:
    error = GenerationError("network down")
    return FakeCapability(analysis_error=error, report_error=error, image_error=error)


@pytest.fixture
def lead_recorder() -> FakeLeadRecorder:
    return FakeLeadRecorder()


@pytest.fixture
def make_capability():
    """Factory for FakeCapability with per-test overrides."""
    return FakeCapability


@pytest.fixture
def report_payload():
    """Factory for detailed-report JSON with a given section count."""
    return make_report_payload


@pytest.fixture
def failing_lead_recorder() -> FakeLeadRecorder:
    return FakeLeadRecorder(fail=True)
