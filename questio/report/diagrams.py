"""
Diagram normalizer - turns the model's free-form diagram object into one of
the three renderable payloads.

The model is asked for {"type": ..., "data": {...}} but the schema cannot
force the per-type fields, so anything may be missing, mistyped or of the
wrong length. Bad fields are replaced with defaults; nothing is rejected.
An unknown type yields None and the page simply has no diagram.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from questio.observability.logging import get_logger
from questio.observability.telemetry import counter
from questio.report.models import (
    ComparisonDiagram,
    DiagramPayload,
    FlowchartDiagram,
    RadarDiagram,
)

logger = get_logger(__name__)

RADAR_DEFAULT_LABELS = ("논리", "연산", "직관", "수식", "창의")
RADAR_DEFAULT_STUDENT = (80.0, 60.0, 90.0, 70.0, 85.0)
RADAR_DEFAULT_TARGET = (90.0, 80.0, 85.0, 90.0, 80.0)
RADAR_FILL_STUDENT = 70.0
RADAR_FILL_TARGET = 85.0

FLOWCHART_DEFAULT_STEPS = ("시작", "과정", "결과")

COMPARISON_DEFAULT_CATEGORIES = ("집중도", "속도", "정확성")
COMPARISON_DEFAULT_SCORES = (70.0, 50.0, 90.0)
COMPARISON_FILL_SCORE = 70.0


def _labels(value: Any) -> tuple[str, ...] | None:
    if not isinstance(value, (list, tuple)) or not value:
        return None
    labels = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            return None
        labels.append(item.strip())
    return tuple(labels)


def _values(value: Any, expected_length: int) -> tuple[float, ...] | None:
    if not isinstance(value, (list, tuple)) or len(value) != expected_length:
        return None
    values = []
    for item in value:
        # bool is an int subclass; true/false is not a score
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            return None
        values.append(min(100.0, max(0.0, float(item))))
    return tuple(values)


def _default_values(
    length: int, defaults: tuple[float, ...], fill: float
) -> tuple[float, ...]:
    if length == len(defaults):
        return defaults
    return (fill,) * length


def _normalize_radar(data: Mapping[str, Any]) -> RadarDiagram:
    labels = _labels(data.get("labels")) or RADAR_DEFAULT_LABELS
    n = len(labels)
    student = _values(data.get("studentValues"), n) or _default_values(
        n, RADAR_DEFAULT_STUDENT, RADAR_FILL_STUDENT
    )
    target = _values(data.get("targetValues"), n) or _default_values(
        n, RADAR_DEFAULT_TARGET, RADAR_FILL_TARGET
    )
    return RadarDiagram(labels=labels, student_values=student, target_values=target)


def _normalize_flowchart(data: Mapping[str, Any]) -> FlowchartDiagram:
    return FlowchartDiagram(steps=_labels(data.get("steps")) or FLOWCHART_DEFAULT_STEPS)


def _normalize_comparison(data: Mapping[str, Any]) -> ComparisonDiagram:
    categories = _labels(data.get("categories")) or COMPARISON_DEFAULT_CATEGORIES
    n = len(categories)
    scores = _values(data.get("score"), n) or _default_values(
        n, COMPARISON_DEFAULT_SCORES, COMPARISON_FILL_SCORE
    )
    return ComparisonDiagram(categories=categories, scores=scores)


_NORMALIZERS = {
    RadarDiagram.kind: _normalize_radar,
    FlowchartDiagram.kind: _normalize_flowchart,
    ComparisonDiagram.kind: _normalize_comparison,
}


def normalize_diagram(raw: Any) -> DiagramPayload | None:
    """
    Normalize a raw diagram object from the model.

    Args:
        raw: Whatever the model put in a section's "diagram" field.

    Returns:
        A RadarDiagram, FlowchartDiagram or ComparisonDiagram whose value
        vectors match their label vectors in length, or None when the type
        tag is missing or unknown.
    """
    if not isinstance(raw, Mapping):
        return None

    tag = raw.get("type")
    normalizer = _NORMALIZERS.get(tag.strip().lower()) if isinstance(tag, str) else None
    if normalizer is None:
        counter("report.diagram.unknown_type")
        logger.debug("Dropping diagram with unknown type: %r", tag)
        return None

    data = raw.get("data")
    if not isinstance(data, Mapping):
        data = {}

    return normalizer(data)
