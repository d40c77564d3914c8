"""Unit tests for the questionnaire wizard state machine."""

import pytest

from questio.recommend.models import Concern, ScopeTag, SolvingStyle, Subject, Tier
from questio.survey.wizard import SurveyWizard, WizardStage, WizardTransitionError


@pytest.fixture
def wizard_at_targets():
    wizard = SurveyWizard()
    wizard.start()
    wizard.choose_tier(Tier.TOP)
    return wizard


class TestHappyPath:
    def test_full_run(self, wizard_at_targets):
        wizard = wizard_at_targets
        wizard.set_target(0, "연세대")
        wizard.set_target(1, "고려대")
        assert wizard.confirm_targets() == WizardStage.SUBJECT
        assert wizard.choose_subject(Subject.GEOMETRY) == WizardStage.SCOPE
        for tag in (ScopeTag.CALCULUS, ScopeTag.PROBABILITY, ScopeTag.GEOMETRY):
            wizard.toggle_scope(tag)
        assert wizard.confirm_scope() == WizardStage.STYLE
        assert wizard.choose_style(SolvingStyle.ARGUMENT) == WizardStage.CONCERN

        answers = wizard.choose_concern(Concern.LOGIC_GAPS)

        assert wizard.stage == WizardStage.ANALYZING
        assert answers.tier == Tier.TOP
        assert answers.target_universities == ("연세대", "고려대", "")
        assert answers.study_scope == frozenset(ScopeTag)
        assert answers.writing_concern == Concern.LOGIC_GAPS

    def test_defaults(self):
        wizard = SurveyWizard()
        assert wizard.stage == WizardStage.INTRO
        assert wizard.tier == Tier.MIDDLE
        assert wizard.study_scope == {ScopeTag.MATH_1, ScopeTag.MATH_2}
        assert wizard.solving_style == SolvingStyle.CALCULATION


class TestGuards:
    def test_first_target_required(self, wizard_at_targets):
        wizard_at_targets.set_target(1, "고려대")
        with pytest.raises(WizardTransitionError):
            wizard_at_targets.confirm_targets()
        assert wizard_at_targets.stage == WizardStage.TARGETS

    def test_empty_scope_blocked(self, wizard_at_targets):
        wizard = wizard_at_targets
        wizard.set_target(0, "연세대")
        wizard.confirm_targets()
        wizard.choose_subject(Subject.CALCULUS)
        wizard.toggle_scope(ScopeTag.MATH_1)
        wizard.toggle_scope(ScopeTag.MATH_2)

        with pytest.raises(WizardTransitionError):
            wizard.confirm_scope()

    def test_back_from_subject_keeps_targets(self, wizard_at_targets):
        wizard = wizard_at_targets
        wizard.set_target(0, "연세대")
        wizard.confirm_targets()

        assert wizard.back() == WizardStage.TARGETS
        assert wizard.targets[0] == "연세대"

    def test_back_not_allowed_elsewhere(self, wizard_at_targets):
        with pytest.raises(WizardTransitionError):
            wizard_at_targets.back()

    def test_out_of_order_event(self):
        wizard = SurveyWizard()
        with pytest.raises(WizardTransitionError):
            wizard.choose_tier(Tier.TOP)

    def test_target_index_range(self, wizard_at_targets):
        with pytest.raises(WizardTransitionError):
            wizard_at_targets.set_target(3, "연세대")

    def test_answers_before_completion(self):
        with pytest.raises(WizardTransitionError):
            SurveyWizard().answers()
