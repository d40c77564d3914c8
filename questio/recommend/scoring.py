"""
Scoring engine - ranks catalog universities against a survey.

Pure and synchronous: no I/O, no LLM. The weights below are hand-tuned
and ranking outcomes depend on their exact values.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from questio.config import MATCH_RATE_STEP, RECOMMENDATION_LIMIT
from questio.recommend.catalog import UNIVERSITIES
from questio.recommend.models import SurveyAnswers, University

SCOPE_COVERED_BONUS = 100
SCOPE_MISSING_PENALTY = -200
TIER_MATCH_BONUS = 60
STYLE_MATCH_BONUS = 50
STYLE_MISMATCH_PENALTY = -30
TARGET_BONUS = 40


@dataclass(frozen=True)
class ScoredUniversity:
    """A university paired with its score; only lives during ranking."""

    university: University
    score: int


@dataclass(frozen=True)
class Recommendation:
    """A ranked university annotated for the result screen."""

    rank: int
    university: University
    is_target: bool
    style_match: bool
    match_rate: int


def is_target_university(answers: SurveyAnswers, university: University) -> bool:
    """True if any non-blank target name appears inside the university name."""
    return any(target in university.name for target in answers.valid_targets())


def score_university(answers: SurveyAnswers, university: University) -> int:
    """Additive score; every rule is evaluated, none short-circuits."""
    score = 0

    # Hard gate expressed as a penalty no bonus combination can overcome
    if university.covers(answers.study_scope):
        score += SCOPE_COVERED_BONUS
    else:
        score += SCOPE_MISSING_PENALTY

    if university.tier == answers.tier:
        score += TIER_MATCH_BONUS

    if university.preferred_style == answers.solving_style:
        score += STYLE_MATCH_BONUS
    else:
        score += STYLE_MISMATCH_PENALTY

    if is_target_university(answers, university):
        score += TARGET_BONUS

    return score


def score_catalog(
    answers: SurveyAnswers, catalog: Iterable[University] = UNIVERSITIES
) -> list[ScoredUniversity]:
    """Score every university, sorted by descending score (stable for ties)."""
    scored = [ScoredUniversity(u, score_university(answers, u)) for u in catalog]
    # sorted() is stable: ties keep catalog order
    return sorted(scored, key=lambda item: item.score, reverse=True)


def rank(
    answers: SurveyAnswers,
    catalog: Iterable[University] = UNIVERSITIES,
    limit: int = RECOMMENDATION_LIMIT,
) -> list[University]:
    """
    Rank the catalog for a survey and return the top ``limit`` universities.

    An empty study scope is not an error: every university takes the scope
    penalty and the ordering falls back to tier/style/target.
    """
    return [item.university for item in score_catalog(answers, catalog)[:limit]]


def describe_recommendations(
    answers: SurveyAnswers, universities: Sequence[University]
) -> list[Recommendation]:
    """Annotate ranked universities with target/style badges and match rate."""
    return [
        Recommendation(
            rank=index + 1,
            university=university,
            is_target=is_target_university(answers, university),
            style_match=university.preferred_style == answers.solving_style,
            match_rate=100 - index * MATCH_RATE_STEP,
        )
        for index, university in enumerate(universities)
    ]
