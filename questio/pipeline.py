"""
Consulting session - control flow of one questionnaire run.

Stage 1  analyze(answers)        scoring (sync) + short analysis (1 Gemini call)
Stage 2  request_report(contact) lead capture, then report + persona image
                                 concurrently, then one additive merge

Lead capture is awaited before stage 2 spends any generation budget; a
failed capture aborts stage 2 and is the only error a caller ever sees from
this module besides misuse (SessionStateError).
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from questio.leads import LeadCaptureError, LeadRecorder
from questio.llm.gemini import GenerationCapability
from questio.observability.logging import get_logger
from questio.observability.telemetry import counter, log_event
from questio.recommend.catalog import UNIVERSITIES
from questio.recommend.models import SurveyAnswers, University
from questio.recommend.scoring import rank
from questio.report.aggregator import ResultAggregator
from questio.report.generator import ReportGenerator
from questio.report.models import AnalysisResult
from questio.utils.redaction import redact

logger = get_logger(__name__)


class SessionStateError(RuntimeError):
    """An operation was requested out of order (e.g. report before analysis)."""


class ConsultingSession:
    """
    One user's pass through the pipeline.

    Not shared between users; the single AnalysisResult it owns is only
    mutated through ResultAggregator.
    """

    def __init__(
        self,
        capability: GenerationCapability,
        lead_recorder: LeadRecorder,
        catalog: Iterable[University] = UNIVERSITIES,
    ):
        self.generator = ReportGenerator(capability)
        self.lead_recorder = lead_recorder
        self.catalog = tuple(catalog)
        self.answers: SurveyAnswers | None = None
        self.result: AnalysisResult | None = None
        self._report_in_flight = False

    async def analyze(self, answers: SurveyAnswers) -> AnalysisResult:
        """
        Rank the catalog and produce the persona summary.

        Returns:
            The summary-ready AnalysisResult (also kept on self.result)
        """
        if not answers.study_scope:
            # Accepted by the scoring engine, but the wizard/API should prevent it
            logger.warning("Analyzing a survey with an empty study scope")

        recommendations = rank(answers, self.catalog)
        summary = await self.generator.generate_short_analysis(answers)

        self.answers = answers
        self.result = ResultAggregator.summarize(recommendations, summary)
        log_event(
            "session.analyzed",
            tier=answers.tier.value,
            top=recommendations[0].name if recommendations else None,
        )
        return self.result

    async def request_report(self, contact: str) -> AnalysisResult:
        """
        Record the lead, then generate the detailed report and persona image.

        Raises:
            SessionStateError: If analyze() has not completed, or the report
                was already generated or is being generated
            LeadCaptureError: If the lead could not be recorded (nothing is
                generated in that case)
        """
        if self.result is None or self.answers is None:
            raise SessionStateError("analyze() must complete before requesting a report")
        if self.result.is_report_ready:
            raise SessionStateError("report already generated for this session")
        if self._report_in_flight:
            counter("session.duplicate_report_request")
            raise SessionStateError("report is already being generated for this session")

        # Set before the first await so an overlapping request is rejected
        self._report_in_flight = True
        try:
            await self.lead_recorder.record(contact, self.answers)
        except LeadCaptureError:
            self._report_in_flight = False
            raise
        except Exception as e:
            self._report_in_flight = False
            counter("session.lead_error")
            logger.error("Lead capture failed for %s: %s", redact(contact), e)
            raise LeadCaptureError(f"lead capture failed: {e}") from e

        persona_name = self.result.persona_name
        report, image = await asyncio.gather(
            self.generator.generate_detailed_report(self.answers, persona_name),
            self.generator.generate_persona_image(self.answers, persona_name),
        )

        return ResultAggregator.attach_report(self.result, report, image)
