"""
Result aggregator - the only writer of a published AnalysisResult.

summarize() publishes the summary-ready result; attach_report() extends the
same object once with the report, citations and image. Fields that were
already published are never rebuilt.
"""

from __future__ import annotations

from collections.abc import Sequence

from questio.observability.logging import get_logger
from questio.observability.telemetry import log_event
from questio.recommend.models import University
from questio.report.models import (
    AnalysisResult,
    AnalysisSummary,
    DetailedReport,
    PersonaImage,
    ResultState,
)

logger = get_logger(__name__)


class ResultAlreadyCompleteError(RuntimeError):
    """attach_report() was called on a result that already has its report."""


class ResultAggregator:
    @staticmethod
    def summarize(
        recommendations: Sequence[University], summary: AnalysisSummary
    ) -> AnalysisResult:
        """Publish the initial result (state: summary_ready)."""
        result = AnalysisResult(summary=summary, recommendations=tuple(recommendations))
        log_event(
            "result.summary_ready",
            recommendations=len(result.recommendations),
        )
        return result

    @staticmethod
    def attach_report(
        result: AnalysisResult,
        report: DetailedReport,
        image: PersonaImage | None,
    ) -> AnalysisResult:
        """
        Extend ``result`` in place with the report, citations and image.

        Raises:
            ResultAlreadyCompleteError: If the report was already attached
        """
        if result.state == ResultState.REPORT_READY:
            raise ResultAlreadyCompleteError("report already attached to this result")

        result.detailed_report = report.sections
        result.citations = report.citations
        result.persona_image = image
        result.state = ResultState.REPORT_READY

        logger.info(
            "Report attached: sections=%d citations=%d image=%s",
            len(report.sections),
            len(report.citations),
            image is not None,
        )
        log_event(
            "result.report_ready",
            sections=len(report.sections),
            citations=len(report.citations),
            has_image=image is not None,
        )
        return result
