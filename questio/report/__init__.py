"""
Questio report module - generation pipeline, diagram normalization and the
aggregate result.
"""

from questio.report.aggregator import ResultAggregator, ResultAlreadyCompleteError
from questio.report.diagrams import normalize_diagram
from questio.report.generator import ReportGenerator, fallback_report, fallback_summary
from questio.report.models import (
    AnalysisResult,
    AnalysisSummary,
    Citation,
    ComparisonDiagram,
    DetailedReport,
    DiagramPayload,
    FlowchartDiagram,
    PersonaImage,
    RadarDiagram,
    ReportSection,
    ResultState,
)
from questio.report.retrieval import retrieve_reference_text

__all__ = [
    # Models
    "AnalysisResult",
    "AnalysisSummary",
    "Citation",
    "ComparisonDiagram",
    "DetailedReport",
    "DiagramPayload",
    "FlowchartDiagram",
    "PersonaImage",
    "RadarDiagram",
    "ReportSection",
    "ResultState",
    # Pipeline
    "ReportGenerator",
    "ResultAggregator",
    "ResultAlreadyCompleteError",
    "fallback_report",
    "fallback_summary",
    "normalize_diagram",
    "retrieve_reference_text",
]
