"""
Questio recommendation module - catalog, survey answers and scoring.
"""

from questio.recommend.catalog import UNIVERSITIES
from questio.recommend.models import (
    Concern,
    ScopeTag,
    SolvingStyle,
    Subject,
    SurveyAnswers,
    Tier,
    University,
)
from questio.recommend.scoring import (
    Recommendation,
    ScoredUniversity,
    describe_recommendations,
    rank,
    score_university,
)

__all__ = [
    # Models
    "Concern",
    "ScopeTag",
    "SolvingStyle",
    "Subject",
    "SurveyAnswers",
    "Tier",
    "University",
    # Catalog
    "UNIVERSITIES",
    # Scoring
    "Recommendation",
    "ScoredUniversity",
    "describe_recommendations",
    "rank",
    "score_university",
]
