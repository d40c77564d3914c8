"""
Report domain types.

Leaf module: imported by the diagram normalizer, the generator, the
aggregator and the API layer. Nothing here talks to Gemini.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union

from pydantic import BaseModel, Field

from questio.recommend.models import University

# ---------------------------------------------------------------------------
# Diagram payloads (one variant per visual archetype)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RadarDiagram:
    """Student profile vs. target profile on shared axes."""

    kind: ClassVar[str] = "radar"

    labels: tuple[str, ...]
    student_values: tuple[float, ...]
    target_values: tuple[float, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "data": {
                "labels": list(self.labels),
                "studentValues": list(self.student_values),
                "targetValues": list(self.target_values),
            },
        }


@dataclass(frozen=True)
class FlowchartDiagram:
    kind: ClassVar[str] = "flowchart"

    steps: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "data": {"steps": list(self.steps)}}


@dataclass(frozen=True)
class ComparisonDiagram:
    """Horizontal percentage bars, one per category."""

    kind: ClassVar[str] = "comparison"

    categories: tuple[str, ...]
    scores: tuple[float, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "data": {"categories": list(self.categories), "score": list(self.scores)},
        }


DiagramPayload = Union[RadarDiagram, FlowchartDiagram, ComparisonDiagram]


# ---------------------------------------------------------------------------
# Generation outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisSummary:
    """Persona label plus a short narrative, produced once per session."""

    persona_name: str
    analysis_text: str


@dataclass(frozen=True)
class ReportSection:
    """One page of the strategy report. Position in the report is its page number."""

    title: str
    content: str
    pro_tip: str | None = None
    diagram_description: str | None = None
    diagram: DiagramPayload | None = None


@dataclass(frozen=True)
class Citation:
    """Web source attached by search grounding."""

    uri: str
    title: str


@dataclass(frozen=True)
class PersonaImage:
    """Generated persona illustration (raw bytes from the image model)."""

    mime_type: str
    data: bytes

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True)
class DetailedReport:
    """Ordered report sections and their grounding citations."""

    sections: tuple[ReportSection, ...]
    citations: tuple[Citation, ...] = ()


# ---------------------------------------------------------------------------
# Aggregate result
# ---------------------------------------------------------------------------


class ResultState(str, Enum):
    SUMMARY_READY = "summary_ready"
    REPORT_READY = "report_ready"


@dataclass
class AnalysisResult:
    """
    Everything the presentation layer shows for one session.

    Created by ResultAggregator.summarize() and extended exactly once by
    ResultAggregator.attach_report(). No other code mutates it.
    """

    summary: AnalysisSummary
    recommendations: tuple[University, ...]
    state: ResultState = ResultState.SUMMARY_READY
    detailed_report: tuple[ReportSection, ...] | None = None
    citations: tuple[Citation, ...] = field(default_factory=tuple)
    persona_image: PersonaImage | None = None

    @property
    def persona_name(self) -> str:
        return self.summary.persona_name

    @property
    def analysis_text(self) -> str:
        return self.summary.analysis_text

    @property
    def is_report_ready(self) -> bool:
        return self.state == ResultState.REPORT_READY


# ---------------------------------------------------------------------------
# LLM response validation schemas
# ---------------------------------------------------------------------------


class AnalysisSchema(BaseModel):
    """Schema for the short-analysis response."""

    personaName: str = Field(min_length=1)
    analysisText: str = Field(min_length=1)


class ReportSectionSchema(BaseModel):
    """Schema for one element of the detailed-report array.

    The diagram is left untyped here, whatever shape the model returned;
    questio.report.diagrams turns it into a DiagramPayload or None.
    """

    title: str
    content: str
    proTip: str | None = None
    diagramDescription: str | None = None
    diagram: Any = None
