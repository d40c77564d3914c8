"""Questio - math-essay (수리논술) admission diagnosis and strategy reports"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so lightweight modules can be used without the Gemini SDK loaded
def __getattr__(name: str):
    """
    Lazy imports to avoid loading heavy dependencies when only importing lightweight modules.
    """
    if name in ("SurveyAnswers", "University"):
        from questio.recommend import models

        if name == "SurveyAnswers":
            return models.SurveyAnswers
        if name == "University":
            return models.University

    if name == "rank":
        from questio.recommend.scoring import rank

        return rank

    if name == "ConsultingSession":
        from questio.pipeline import ConsultingSession

        return ConsultingSession

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ConsultingSession",
    "SurveyAnswers",
    "University",
    "rank",
]
