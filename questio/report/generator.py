"""
Report generator - the three Gemini calls of a consulting session.

1. Short analysis (fast model)   -> AnalysisSummary
2. Persona image (image model)   -> PersonaImage | None
3. Detailed report (deep model,  -> DetailedReport (15 sections + citations)
   search grounding)

Each call gets exactly one attempt. Failures never propagate: every method
resolves to deterministic fallback content (or "no image") so the session
always ends with a structurally complete result.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from questio.config import REPORT_SECTION_COUNT
from questio.llm.gemini import (
    GenerationCapability,
    ImageRequest,
    ModelTier,
    TextRequest,
    TextResponse,
)
from questio.llm.prompts import (
    build_analysis_prompt,
    build_persona_image_prompt,
    build_report_prompt,
)
from questio.observability.logging import get_logger
from questio.observability.telemetry import counter, log_event, time_block
from questio.recommend.models import SurveyAnswers
from questio.report.diagrams import normalize_diagram
from questio.report.models import (
    AnalysisSchema,
    AnalysisSummary,
    Citation,
    DetailedReport,
    FlowchartDiagram,
    PersonaImage,
    ReportSection,
    ReportSectionSchema,
)
from questio.report.retrieval import retrieve_reference_text

logger = get_logger(__name__)


class ReportParseError(ValueError):
    """The model's report payload could not be turned into 15 sections."""


# Gemini structured output schemas (OpenAPI subset, upper-case type names)
ANALYSIS_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "personaName": {"type": "STRING"},
        "analysisText": {"type": "STRING"},
    },
    "required": ["personaName", "analysisText"],
}

REPORT_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING"},
            "content": {"type": "STRING"},
            "proTip": {"type": "STRING"},
            "diagramDescription": {"type": "STRING"},
            "diagram": {
                "type": "OBJECT",
                "properties": {
                    "type": {"type": "STRING", "enum": ["radar", "flowchart", "comparison"]},
                    "data": {
                        "type": "OBJECT",
                        "properties": {
                            "labels": {"type": "ARRAY", "items": {"type": "STRING"}},
                            "studentValues": {"type": "ARRAY", "items": {"type": "NUMBER"}},
                            "targetValues": {"type": "ARRAY", "items": {"type": "NUMBER"}},
                            "steps": {"type": "ARRAY", "items": {"type": "STRING"}},
                            "categories": {"type": "ARRAY", "items": {"type": "STRING"}},
                            "score": {"type": "ARRAY", "items": {"type": "NUMBER"}},
                        },
                        "description": (
                            "Diagram data fields. Use labels/studentValues/targetValues for radar, "
                            "steps for flowchart, or categories/score for comparison."
                        ),
                    },
                },
                "required": ["type", "data"],
            },
        },
        "required": ["title", "content", "proTip", "diagramDescription", "diagram"],
    },
}

ANALYSIS_FALLBACK_TEXT = (
    "분석 중 오류가 발생했습니다. 하지만 귀하의 지망 대학들을 중심으로 최적의 분석 결과를 제공합니다."
)

FALLBACK_SECTION_CONTENT = "상세 내용을 생성하는 중 오류가 발생했습니다."
FALLBACK_SECTION_TIP = "다시 시도해 주세요."
FALLBACK_SECTION_DIAGRAM_DESCRIPTION = "데이터 시각화 영역"
FALLBACK_SECTION_DIAGRAM = FlowchartDiagram(steps=("데이터 수집", "AI 분석", "전략 생성"))


def fallback_summary(answers: SurveyAnswers) -> AnalysisSummary:
    """Deterministic summary used when the analysis call fails."""
    return AnalysisSummary(
        persona_name=f"{answers.primary_target} 전략가",
        analysis_text=ANALYSIS_FALLBACK_TEXT,
    )


def fallback_report() -> DetailedReport:
    """Deterministic 15-section report used when the report call fails."""
    sections = tuple(
        ReportSection(
            title=f"{i}번 섹션: 분석 보고서",
            content=FALLBACK_SECTION_CONTENT,
            pro_tip=FALLBACK_SECTION_TIP,
            diagram_description=FALLBACK_SECTION_DIAGRAM_DESCRIPTION,
            diagram=FALLBACK_SECTION_DIAGRAM,
        )
        for i in range(1, REPORT_SECTION_COUNT + 1)
    )
    return DetailedReport(sections=sections, citations=())


def _strip_code_fence(text: str) -> str:
    json_text = text.strip()
    if json_text.startswith("```"):
        # Should not happen with a response schema, but models still do it
        counter("llm.code_fence_fallback")
        json_text = re.sub(r"^```(?:json)?\n?", "", json_text)
        json_text = re.sub(r"\n?```$", "", json_text)
    return json_text


def parse_analysis(response_text: str) -> AnalysisSummary:
    """Parse the short-analysis JSON object. Raises ValueError on bad payloads."""
    data = json.loads(_strip_code_fence(response_text))
    validated = AnalysisSchema.model_validate(data)
    return AnalysisSummary(
        persona_name=validated.personaName.strip(),
        analysis_text=validated.analysisText.strip(),
    )


def parse_report_sections(response_text: str) -> tuple[ReportSection, ...]:
    """
    Parse the detailed-report JSON array into exactly REPORT_SECTION_COUNT sections.

    Extra sections are dropped; too few is an error, since a short report
    would break the page numbering the reader relies on.

    Raises:
        ReportParseError: On invalid JSON, wrong shape, or too few sections
    """
    try:
        data = json.loads(_strip_code_fence(response_text))
    except json.JSONDecodeError as e:
        raise ReportParseError(f"report is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ReportParseError(f"expected a JSON array, got {type(data).__name__}")

    if len(data) != REPORT_SECTION_COUNT:
        counter("report.section_count_mismatch")
        logger.warning(
            "Report returned %d sections (expected %d)", len(data), REPORT_SECTION_COUNT
        )
        if len(data) < REPORT_SECTION_COUNT:
            raise ReportParseError(f"only {len(data)} sections returned")

    sections = []
    for index, item in enumerate(data[:REPORT_SECTION_COUNT], start=1):
        try:
            validated = ReportSectionSchema.model_validate(item)
        except ValidationError as e:
            raise ReportParseError(f"section {index} is malformed: {e}") from e
        sections.append(
            ReportSection(
                title=validated.title,
                content=validated.content,
                pro_tip=validated.proTip,
                diagram_description=validated.diagramDescription,
                diagram=normalize_diagram(validated.diagram),
            )
        )
    return tuple(sections)


def extract_citations(response: TextResponse) -> tuple[Citation, ...]:
    """Web grounding sources as citations, in the order the model returned them."""
    return tuple(
        Citation(uri=source.uri, title=source.title)
        for source in response.grounding_sources
        if source.source_type == "web"
    )


class ReportGenerator:
    """
    Issues the generation calls for one survey.

    The capability is injected so tests can substitute deterministic fakes.
    """

    def __init__(self, capability: GenerationCapability):
        self.capability = capability

    async def generate_short_analysis(self, answers: SurveyAnswers) -> AnalysisSummary:
        """
        Persona label + 3-4 sentence analysis.

        Side Effects:
            - Calls Gemini (fast model)
            - Increments analysis.success / analysis.fallback
        """
        request = TextRequest(
            prompt=build_analysis_prompt(answers),
            response_schema=ANALYSIS_RESPONSE_SCHEMA,
            model_tier=ModelTier.FAST,
        )
        try:
            with time_block("analysis.latency"):
                response = await self.capability.generate_text(request)
            summary = parse_analysis(response.text)
        except Exception as e:
            counter("analysis.fallback")
            logger.error("Short analysis failed, using fallback: %s", e)
            log_event("analysis.fallback", error=type(e).__name__)
            return fallback_summary(answers)

        counter("analysis.success")
        logger.info("Short analysis ready: persona=%s", summary.persona_name)
        return summary

    async def generate_persona_image(
        self, answers: SurveyAnswers, persona_name: str
    ) -> PersonaImage | None:
        """
        Persona illustration, or None when the model returned no image.

        Side Effects:
            - Calls Gemini (image model)
            - Increments image.success / image.missing / image.error
        """
        request = ImageRequest(prompt=build_persona_image_prompt(answers, persona_name))
        try:
            with time_block("image.latency"):
                response = await self.capability.generate_image(request)
        except Exception as e:
            counter("image.error")
            logger.warning("Persona image generation failed: %s", e)
            return None

        for part in response.parts:
            if part.has_inline_data:
                counter("image.success")
                return PersonaImage(mime_type=part.mime_type or "image/png", data=part.data)

        counter("image.missing")
        logger.info("Image response had no inline image part")
        return None

    async def generate_detailed_report(
        self, answers: SurveyAnswers, persona_name: str
    ) -> DetailedReport:
        """
        15-section strategy report with search grounding.

        Any failure (network, schema, JSON, section count) discards partial
        output and returns fallback_report().

        Side Effects:
            - Calls Gemini (deep model, google_search tool)
            - Increments report.success / report.fallback
        """
        targets = answers.valid_targets()
        reference_text = retrieve_reference_text(targets)
        request = TextRequest(
            prompt=build_report_prompt(answers, persona_name, reference_text),
            response_schema=REPORT_RESPONSE_SCHEMA,
            model_tier=ModelTier.DEEP,
            use_search=True,
        )

        try:
            with time_block("report.latency"):
                response = await self.capability.generate_text(request)
            sections = parse_report_sections(response.text)
            citations = extract_citations(response)
        except Exception as e:
            if isinstance(e, ReportParseError):
                counter("report.parse_error")
            counter("report.fallback")
            logger.error("Report generation failed, using fallback: %s", e)
            log_event("report.fallback", error=type(e).__name__, targets=len(targets))
            return fallback_report()

        counter("report.success")
        log_event("report.success", sections=len(sections), citations=len(citations))
        return DetailedReport(sections=sections, citations=citations)
