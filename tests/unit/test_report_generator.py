"""Unit tests for ReportGenerator and its parsing helpers.

Generation calls go through a FakeCapability, so every fallback path can be
forced deterministically.
"""

import asyncio
import json

import pytest

from questio.llm.gemini import GenerationError, ModelTier, ResponsePart
from questio.observability.telemetry import get_counter
from questio.report.generator import (
    ANALYSIS_FALLBACK_TEXT,
    FALLBACK_SECTION_CONTENT,
    ReportGenerator,
    ReportParseError,
    fallback_report,
    parse_analysis,
    parse_report_sections,
)
from questio.report.models import Citation, ComparisonDiagram, FlowchartDiagram, RadarDiagram


def run(coro):
    return asyncio.run(coro)


class TestParseAnalysis:
    def test_valid(self):
        summary = parse_analysis('{"personaName": " 논증형 ", "analysisText": "분석"}')
        assert summary.persona_name == "논증형"
        assert summary.analysis_text == "분석"

    def test_code_fence_stripped(self):
        summary = parse_analysis('```json\n{"personaName": "A", "analysisText": "B"}\n```')
        assert summary.persona_name == "A"

    @pytest.mark.parametrize(
        "text",
        ["not json", "[]", '{"personaName": "A"}', '{"personaName": "", "analysisText": "B"}'],
    )
    def test_invalid_raises(self, text):
        with pytest.raises(ValueError):
            parse_analysis(text)


class TestParseReportSections:
    def test_fifteen_sections(self, report_payload):
        sections = parse_report_sections(report_payload(15))

        assert len(sections) == 15
        assert sections[0].title == "섹션 1"
        assert sections[0].pro_tip == "팁 1"
        assert isinstance(sections[0].diagram, RadarDiagram)
        assert isinstance(sections[1].diagram, FlowchartDiagram)
        assert isinstance(sections[2].diagram, ComparisonDiagram)

    def test_extra_sections_truncated(self, report_payload):
        sections = parse_report_sections(report_payload(17))
        assert len(sections) == 15
        assert sections[-1].title == "섹션 15"
        assert get_counter("report.section_count_mismatch") == 1

    def test_too_few_sections_rejected(self, report_payload):
        with pytest.raises(ReportParseError):
            parse_report_sections(report_payload(14))

    def test_not_an_array(self):
        with pytest.raises(ReportParseError):
            parse_report_sections('{"title": "x"}')

    def test_malformed_section(self, report_payload):
        data = json.loads(report_payload(15))
        del data[3]["content"]
        with pytest.raises(ReportParseError, match="section 4"):
            parse_report_sections(json.dumps(data))

    def test_unknown_diagram_type_dropped(self, report_payload):
        data = json.loads(report_payload(15))
        data[0]["diagram"] = {"type": "pie", "data": {}}
        sections = parse_report_sections(json.dumps(data))
        assert sections[0].diagram is None
        assert sections[0].title == "섹션 1"

    @pytest.mark.parametrize("diagram", ["radar", [], 3, None])
    def test_non_object_diagram_keeps_section(self, report_payload, diagram):
        data = json.loads(report_payload(15))
        data[0]["diagram"] = diagram
        sections = parse_report_sections(json.dumps(data))

        assert len(sections) == 15
        assert sections[0].diagram is None
        assert sections[0].content.startswith("본문 1")
        assert isinstance(sections[1].diagram, FlowchartDiagram)


class TestShortAnalysis:
    def test_success(self, capability, answers):
        summary = run(ReportGenerator(capability).generate_short_analysis(answers))

        assert summary.persona_name == "미적분 연산 특화 - 건국대형"
        assert get_counter("analysis.success") == 1

        request = capability.text_requests[0]
        assert request.model_tier == ModelTier.FAST
        assert request.use_search is False
        assert request.response_schema["required"] == ["personaName", "analysisText"]

    def test_generation_error_falls_back(self, make_capability, answers):
        capability = make_capability(analysis_error=GenerationError("quota"))
        summary = run(ReportGenerator(capability).generate_short_analysis(answers))

        assert summary.persona_name == "건국대 전략가"
        assert summary.analysis_text == ANALYSIS_FALLBACK_TEXT
        assert get_counter("analysis.fallback") == 1

    def test_malformed_json_falls_back(self, make_capability, answers):
        capability = make_capability(analysis_text="{broken")
        summary = run(ReportGenerator(capability).generate_short_analysis(answers))
        assert summary.analysis_text == ANALYSIS_FALLBACK_TEXT


class TestPersonaImage:
    def test_first_inline_part_wins(self, make_capability, answers):
        capability = make_capability(
            image_parts=(
                ResponsePart(text="here you go"),
                ResponsePart(mime_type="image/jpeg", data=b"jpeg-bytes"),
                ResponsePart(mime_type="image/png", data=b"png-bytes"),
            )
        )
        image = run(ReportGenerator(capability).generate_persona_image(answers, "연산형"))

        assert image.mime_type == "image/jpeg"
        assert image.data == b"jpeg-bytes"
        assert image.data_uri.startswith("data:image/jpeg;base64,")
        assert capability.image_requests[0].model_tier == ModelTier.IMAGE

    def test_no_inline_part_is_none(self, make_capability, answers):
        capability = make_capability(image_parts=(ResponsePart(text="I cannot draw that"),))
        assert run(ReportGenerator(capability).generate_persona_image(answers, "연산형")) is None
        assert get_counter("image.missing") == 1

    def test_error_is_none(self, failing_capability, answers):
        assert run(ReportGenerator(failing_capability).generate_persona_image(answers, "x")) is None
        assert get_counter("image.error") == 1


class TestDetailedReport:
    def test_success_with_web_citations(self, capability, answers):
        report = run(ReportGenerator(capability).generate_detailed_report(answers, "연산형"))

        assert len(report.sections) == 15
        assert report.citations == (
            Citation("https://example.com/konkuk-2027", "건국대 2027 모집요강"),
            Citation("https://example.com/essay-tips", "수리논술 기출 분석"),
        )
        assert get_counter("report.success") == 1

    def test_request_uses_deep_model_with_search(self, capability, answers):
        run(ReportGenerator(capability).generate_detailed_report(answers, "연산형"))

        request = capability.text_requests[0]
        assert request.model_tier == ModelTier.DEEP
        assert request.use_search is True
        assert request.response_schema["type"] == "ARRAY"
        assert "건국대: 미적분 포함 논술" in request.prompt

    def test_failure_returns_fallback(self, failing_capability, answers):
        report = run(ReportGenerator(failing_capability).generate_detailed_report(answers, "x"))

        assert report == fallback_report()
        assert report.citations == ()
        assert get_counter("report.fallback") == 1
        for i, section in enumerate(report.sections, start=1):
            assert section.title == f"{i}번 섹션: 분석 보고서"
            assert section.content == "상세 내용을 생성하는 중 오류가 발생했습니다."
            assert section.pro_tip == "다시 시도해 주세요."
            assert section.diagram_description == "데이터 시각화 영역"
            assert section.diagram == FlowchartDiagram(("데이터 수집", "AI 분석", "전략 생성"))

    def test_short_report_returns_fallback(self, make_capability, report_payload, answers):
        capability = make_capability(report_text=report_payload(14))
        report = run(ReportGenerator(capability).generate_detailed_report(answers, "x"))

        assert report == fallback_report()
        assert get_counter("report.parse_error") == 1

    def test_partial_output_discarded(self, make_capability, answers):
        capability = make_capability(report_text='[{"title": "only one"')
        report = run(ReportGenerator(capability).generate_detailed_report(answers, "x"))
        assert [s.content for s in report.sections] == [FALLBACK_SECTION_CONTENT] * 15


class TestFallbackReport:
    def test_shape(self):
        report = fallback_report()

        assert len(report.sections) == 15
        assert report.sections[0].title == "1번 섹션: 분석 보고서"
        assert report.sections[14].title == "15번 섹션: 분석 보고서"
        assert all(s.diagram == FlowchartDiagram(("데이터 수집", "AI 분석", "전략 생성")) for s in report.sections)

    def test_deterministic(self):
        assert fallback_report() == fallback_report()


class TestMalformedDiagramInReport:
    def test_string_diagram_does_not_discard_report(self, make_capability, report_payload, answers):
        data = json.loads(report_payload(15))
        data[0]["diagram"] = "radar"
        capability = make_capability(report_text=json.dumps(data, ensure_ascii=False))

        report = run(ReportGenerator(capability).generate_detailed_report(answers, "x"))

        assert [s.title for s in report.sections] == [f"섹션 {i}" for i in range(1, 16)]
        assert report.sections[0].diagram is None
        assert get_counter("report.fallback") == 0
        assert get_counter("report.success") == 1
