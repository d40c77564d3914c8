"""
Questionnaire wizard as an explicit state machine.

The presentation layer drives the wizard one event at a time; the wizard
keeps a draft, validates each step, and hands a frozen SurveyAnswers to the
core once the last question is answered. Nothing in the scoring or
generation code knows about wizard stages.
"""

from __future__ import annotations

from enum import Enum

from questio.config import API_MAX_TARGETS
from questio.recommend.models import (
    Concern,
    ScopeTag,
    SolvingStyle,
    Subject,
    SurveyAnswers,
    Tier,
)


class WizardStage(str, Enum):
    INTRO = "intro"
    TIER = "tier"
    TARGETS = "targets"
    SUBJECT = "subject"
    SCOPE = "scope"
    STYLE = "style"
    CONCERN = "concern"
    ANALYZING = "analyzing"


class WizardEvent(str, Enum):
    START = "start"
    CHOOSE_TIER = "choose_tier"
    CONFIRM_TARGETS = "confirm_targets"
    CHOOSE_SUBJECT = "choose_subject"
    BACK = "back"
    CONFIRM_SCOPE = "confirm_scope"
    CHOOSE_STYLE = "choose_style"
    CHOOSE_CONCERN = "choose_concern"


TRANSITIONS: dict[tuple[WizardStage, WizardEvent], WizardStage] = {
    (WizardStage.INTRO, WizardEvent.START): WizardStage.TIER,
    (WizardStage.TIER, WizardEvent.CHOOSE_TIER): WizardStage.TARGETS,
    (WizardStage.TARGETS, WizardEvent.CONFIRM_TARGETS): WizardStage.SUBJECT,
    (WizardStage.SUBJECT, WizardEvent.CHOOSE_SUBJECT): WizardStage.SCOPE,
    (WizardStage.SUBJECT, WizardEvent.BACK): WizardStage.TARGETS,
    (WizardStage.SCOPE, WizardEvent.CONFIRM_SCOPE): WizardStage.STYLE,
    (WizardStage.STYLE, WizardEvent.CHOOSE_STYLE): WizardStage.CONCERN,
    (WizardStage.CONCERN, WizardEvent.CHOOSE_CONCERN): WizardStage.ANALYZING,
}


class WizardTransitionError(ValueError):
    """Event not allowed in the current stage, or the step's input is invalid."""


class SurveyWizard:
    """Draft questionnaire plus the current stage."""

    def __init__(self):
        self.stage = WizardStage.INTRO
        # Pre-selected values shown on first visit
        self.tier = Tier.MIDDLE
        self.targets: list[str] = [""] * API_MAX_TARGETS
        self.csat_subject = Subject.CALCULUS
        self.study_scope: set[ScopeTag] = {ScopeTag.MATH_1, ScopeTag.MATH_2}
        self.solving_style = SolvingStyle.CALCULATION
        self.writing_concern = Concern.TIME_AND_ARITHMETIC

    def _transition(self, event: WizardEvent) -> WizardStage:
        next_stage = TRANSITIONS.get((self.stage, event))
        if next_stage is None:
            raise WizardTransitionError(f"{event.value} is not allowed in stage {self.stage.value}")
        self.stage = next_stage
        return next_stage

    def _require_stage(self, stage: WizardStage) -> None:
        if self.stage != stage:
            raise WizardTransitionError(f"expected stage {stage.value}, in {self.stage.value}")

    def start(self) -> WizardStage:
        return self._transition(WizardEvent.START)

    def choose_tier(self, tier: Tier) -> WizardStage:
        self._require_stage(WizardStage.TIER)
        self.tier = Tier(tier)
        return self._transition(WizardEvent.CHOOSE_TIER)

    def set_target(self, index: int, name: str) -> None:
        """Edit one of the ranked target fields (stays on the targets stage)."""
        self._require_stage(WizardStage.TARGETS)
        if not 0 <= index < len(self.targets):
            raise WizardTransitionError(f"target index {index} out of range")
        self.targets[index] = name

    def confirm_targets(self) -> WizardStage:
        self._require_stage(WizardStage.TARGETS)
        if not self.targets[0].strip():
            raise WizardTransitionError("the first-choice university is required")
        return self._transition(WizardEvent.CONFIRM_TARGETS)

    def choose_subject(self, subject: Subject) -> WizardStage:
        self._require_stage(WizardStage.SUBJECT)
        self.csat_subject = Subject(subject)
        return self._transition(WizardEvent.CHOOSE_SUBJECT)

    def back(self) -> WizardStage:
        return self._transition(WizardEvent.BACK)

    def toggle_scope(self, tag: ScopeTag) -> None:
        self._require_stage(WizardStage.SCOPE)
        tag = ScopeTag(tag)
        if tag in self.study_scope:
            self.study_scope.remove(tag)
        else:
            self.study_scope.add(tag)

    def confirm_scope(self) -> WizardStage:
        self._require_stage(WizardStage.SCOPE)
        if not self.study_scope:
            raise WizardTransitionError("select at least one study scope")
        return self._transition(WizardEvent.CONFIRM_SCOPE)

    def choose_style(self, style: SolvingStyle) -> WizardStage:
        self._require_stage(WizardStage.STYLE)
        self.solving_style = SolvingStyle(style)
        return self._transition(WizardEvent.CHOOSE_STYLE)

    def choose_concern(self, concern: Concern) -> SurveyAnswers:
        """Answer the last question; returns the completed survey."""
        self._require_stage(WizardStage.CONCERN)
        self.writing_concern = Concern(concern)
        self._transition(WizardEvent.CHOOSE_CONCERN)
        return self.answers()

    def answers(self) -> SurveyAnswers:
        if self.stage != WizardStage.ANALYZING:
            raise WizardTransitionError("survey is not complete")
        return SurveyAnswers(
            tier=self.tier,
            target_universities=tuple(self.targets),
            csat_subject=self.csat_subject,
            study_scope=frozenset(self.study_scope),
            solving_style=self.solving_style,
            writing_concern=self.writing_concern,
        )
