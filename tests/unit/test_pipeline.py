"""Unit tests for ConsultingSession (scoring + generation orchestration)."""

import asyncio

import pytest

from questio.leads import LeadCaptureError
from questio.llm.gemini import ImageResponse, TextResponse
from questio.pipeline import ConsultingSession, SessionStateError
from questio.report.generator import ANALYSIS_FALLBACK_TEXT, fallback_report
from questio.report.models import ResultState


def run(coro):
    return asyncio.run(coro)


class TestAnalyze:
    def test_summary_ready_result(self, capability, lead_recorder, answers):
        session = ConsultingSession(capability, lead_recorder)
        result = run(session.analyze(answers))

        assert result.state == ResultState.SUMMARY_READY
        assert [u.name for u in result.recommendations][0] == "가천대"
        assert result.persona_name == "미적분 연산 특화 - 건국대형"
        assert len(capability.text_requests) == 1
        assert capability.image_requests == []
        assert lead_recorder.records == []

    def test_generation_failure_still_yields_result(self, failing_capability, lead_recorder, answers):
        session = ConsultingSession(failing_capability, lead_recorder)
        result = run(session.analyze(answers))

        assert result.analysis_text == ANALYSIS_FALLBACK_TEXT
        assert len(result.recommendations) == 5


class TestRequestReport:
    def test_full_flow(self, capability, lead_recorder, answers):
        session = ConsultingSession(capability, lead_recorder)

        async def scenario():
            await session.analyze(answers)
            return await session.request_report("student@example.com")

        result = run(scenario())

        assert result.is_report_ready
        assert len(result.detailed_report) == 15
        assert len(result.citations) == 2
        assert result.persona_image is not None
        assert lead_recorder.records == [("student@example.com", answers)]
        assert len(capability.image_requests) == 1

    def test_report_before_analysis(self, capability, lead_recorder):
        session = ConsultingSession(capability, lead_recorder)
        with pytest.raises(SessionStateError):
            run(session.request_report("student@example.com"))

    def test_report_only_once(self, capability, lead_recorder, answers):
        session = ConsultingSession(capability, lead_recorder)

        async def scenario():
            await session.analyze(answers)
            await session.request_report("student@example.com")
            await session.request_report("student@example.com")

        with pytest.raises(SessionStateError):
            run(scenario())

    def test_lead_failure_blocks_generation(self, capability, failing_lead_recorder, answers):
        session = ConsultingSession(capability, failing_lead_recorder)

        async def scenario():
            await session.analyze(answers)
            await session.request_report("student@example.com")

        with pytest.raises(LeadCaptureError):
            run(scenario())

        # Only the short analysis was issued
        assert len(capability.text_requests) == 1
        assert capability.image_requests == []
        assert session.result.state == ResultState.SUMMARY_READY

    def test_unexpected_recorder_error_wrapped(self, capability, answers):
        class BrokenRecorder:
            async def record(self, contact, answers):
                raise ConnectionError("webhook unreachable")

        session = ConsultingSession(capability, BrokenRecorder())

        async def scenario():
            await session.analyze(answers)
            await session.request_report("student@example.com")

        with pytest.raises(LeadCaptureError):
            run(scenario())

    def test_report_fallback_with_image(self, make_capability, lead_recorder, answers):
        capability = make_capability(report_text="not json")
        session = ConsultingSession(capability, lead_recorder)

        async def scenario():
            await session.analyze(answers)
            return await session.request_report("student@example.com")

        result = run(scenario())

        assert result.detailed_report == fallback_report().sections
        assert result.citations == ()
        assert result.persona_image is not None

    def test_report_and_image_run_concurrently(self, lead_recorder, answers, report_payload):
        """Neither call can finish until both have started."""

        class GatedCapability:
            def __init__(self):
                self.started = 0
                self.both_started = None

            async def _enter(self):
                if self.both_started is None:
                    self.both_started = asyncio.Event()
                self.started += 1
                if self.started >= 3:  # analysis + report + image
                    self.both_started.set()

            async def generate_text(self, request):
                await self._enter()
                if request.model_tier.value == "deep":
                    await asyncio.wait_for(self.both_started.wait(), timeout=1)
                    return TextResponse(text=report_payload(15))
                return TextResponse(text='{"personaName": "A", "analysisText": "B"}')

            async def generate_image(self, request):
                await self._enter()
                await asyncio.wait_for(self.both_started.wait(), timeout=1)
                return ImageResponse(parts=())

        session = ConsultingSession(GatedCapability(), lead_recorder)

        async def scenario():
            await session.analyze(answers)
            return await session.request_report("student@example.com")

        result = run(scenario())

        assert len(result.detailed_report) == 15
        assert result.detailed_report[0].title == "섹션 1"
        assert result.persona_image is None


class TestOverlappingReportRequests:
    def test_second_request_rejected_while_first_runs(self, capability, lead_recorder, answers):
        session = ConsultingSession(capability, lead_recorder)

        async def scenario():
            await session.analyze(answers)
            return await asyncio.gather(
                session.request_report("student@example.com"),
                session.request_report("student@example.com"),
                return_exceptions=True,
            )

        first, second = run(scenario())

        assert first.is_report_ready
        assert isinstance(second, SessionStateError)
        assert len(lead_recorder.records) == 1
        deep_requests = [r for r in capability.text_requests if r.model_tier.value == "deep"]
        assert len(deep_requests) == 1
        assert len(capability.image_requests) == 1

    def test_retry_allowed_after_lead_failure(self, capability, answers):
        class FlakyRecorder:
            def __init__(self):
                self.calls = 0

            async def record(self, contact, answers):
                self.calls += 1
                if self.calls == 1:
                    raise LeadCaptureError("temporarily down")

        session = ConsultingSession(capability, FlakyRecorder())

        async def scenario():
            await session.analyze(answers)
            with pytest.raises(LeadCaptureError):
                await session.request_report("student@example.com")
            return await session.request_report("student@example.com")

        assert run(scenario()).is_report_ready
