"""
UNIT TESTS - POLICY SCORER
==========================
Tests for core/policy_scorer.py (liberation principle scoring)
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from core.policy_scorer import PolicyScorer
from models.data_models import EconomicImpact, OperationDescriptor
from shared.enums import LiberationPrinciple
from shared.exceptions import ValidationError
from shared.rules_config import GovernanceRules, LiberationRules
from tests.factories import operation


@pytest.fixture
def scorer(rules):
    return PolicyScorer(rules)


# =============================================================================
# OVERALL SCORE
# =============================================================================

class TestOverallScore:

    def test_strong_operation_is_valid(self, scorer):
        result = scorer.score(operation(0.9))

        assert result.valid is True
        assert result.score == pytest.approx(0.9)
        assert result.passed_principles == tuple(LiberationPrinciple)
        assert result.failed_principles == ()
        assert result.recommendations == ()
        assert result.liberation_threshold == 0.70

    def test_validity_threshold_is_inclusive(self, scorer):
        result = scorer.score(operation(0.7))

        assert result.score == 0.7
        assert result.valid is True

    def test_just_below_threshold_is_invalid(self, scorer):
        result = scorer.score(operation(0.69))

        assert result.valid is False
        # Every principle still passes its own threshold
        assert result.failed_principles == ()

    def test_score_stays_in_unit_interval(self, scorer):
        assert scorer.score(operation(1.0)).score == 1.0
        assert scorer.score(operation(0.0)).score == 0.0

    def test_weights_applied(self, scorer):
        result = scorer.score(operation(
            0.0, empowerment=1.0, community_liberation=1.0
        ))
        assert result.score == pytest.approx(0.5)

    def test_custom_weights(self):
        equal = {p: 0.2 for p in LiberationPrinciple}
        rules = GovernanceRules(liberation=LiberationRules(weights=equal))
        result = PolicyScorer(rules).score(operation(0.0, empowerment=1.0))

        assert result.score == pytest.approx(0.2)

    def test_deterministic(self, scorer):
        op = operation(0.75, mutual_aid=0.4)
        assert scorer.score(op) == scorer.score(op)


# =============================================================================
# PRINCIPLE PASS / FAIL
# =============================================================================

class TestPrinciples:

    def test_principle_threshold_is_inclusive(self, scorer):
        result = scorer.score(operation(0.9, empowerment=0.6))

        assert LiberationPrinciple.EMPOWERMENT in result.passed_principles

    def test_failed_principle_gets_recommendations(self, scorer):
        result = scorer.score(operation(0.9, mutual_aid=0.3))

        assert result.failed_principles == (LiberationPrinciple.MUTUAL_AID,)
        assert result.recommendations == (
            "Add direct mutual aid contribution",
            "Include community care elements",
            "Facilitate resource sharing",
        )
        # Failing one light-weight principle does not invalidate the operation
        assert result.valid is True

    def test_empowerment_recommendation_names_revenue_minimum(self, scorer):
        result = scorer.score(operation(0.9, empowerment=0.5))

        assert "Increase creator revenue share to 75% minimum" in result.recommendations

    def test_failed_principles_in_canonical_order(self, scorer):
        result = scorer.score(operation(0.9, mutual_aid=0.1, empowerment=0.1))

        assert result.failed_principles == (
            LiberationPrinciple.EMPOWERMENT,
            LiberationPrinciple.MUTUAL_AID,
        )


# =============================================================================
# FEEDBACK
# =============================================================================

class TestFeedback:

    def test_one_line_per_principle(self, scorer):
        result = scorer.score(operation(0.9))
        assert len(result.feedback) == len(LiberationPrinciple)
        assert result.feedback[0] == "Excellent empowerment alignment (90%)"

    def test_feedback_tiers(self, scorer):
        result = scorer.score(operation(
            0.9, empowerment=0.85, community_liberation=0.65,
            oppression_resistance=0.5, power_building=0.2
        ))

        assert result.feedback[0] == "Excellent empowerment alignment (85%)"
        assert result.feedback[1] == "Good community liberation alignment (65%)"
        assert result.feedback[2] == (
            "Moderate oppression resistance alignment (50%) - room for improvement"
        )
        assert result.feedback[3] == (
            "Low power building alignment (20%) - significant improvement needed"
        )


# =============================================================================
# SIGNALS
# =============================================================================

class TestSignals:

    def test_declared_scores_pass_through_without_signals(self, scorer):
        result = scorer.score(operation(0.3))
        assert all(v == 0.0 for v in result.signal_scores.values())
        assert all(v == 0.3 for v in result.principle_scores.values())

    def test_cultural_signal_raises_empowerment(self, scorer):
        result = scorer.score(operation(
            0.1, description="Black queer storytelling series"
        ))

        assert result.signal_scores[LiberationPrinciple.EMPOWERMENT] == pytest.approx(0.24)
        assert result.principle_scores[LiberationPrinciple.EMPOWERMENT] == pytest.approx(0.24)

    def test_declared_score_is_a_floor(self, scorer):
        result = scorer.score(operation(
            0.9, description="Black queer storytelling series"
        ))
        assert result.principle_scores[LiberationPrinciple.EMPOWERMENT] == 0.9

    def test_economic_signals(self, scorer):
        economic = EconomicImpact(
            creator_revenue_share=0.80,
            community_revenue_share=0.15,
            platform_costs=0.05,
        )
        signals = scorer.signal_scores(operation(0.0, economic=economic))

        # 0.3 for meeting the creator minimum + 0.2 for community share
        assert signals[LiberationPrinciple.EMPOWERMENT] == pytest.approx(0.5)

    def test_mutual_aid_contribution_signal(self, scorer):
        economic = EconomicImpact(
            creator_revenue_share=0.75,
            community_revenue_share=0.15,
            platform_costs=0.10,
            mutual_aid_contribution=0.05,
        )
        signals = scorer.signal_scores(operation(0.0, economic=economic))

        assert signals[LiberationPrinciple.MUTUAL_AID] == pytest.approx(0.4)


# =============================================================================
# ERRORS
# =============================================================================

class TestErrors:

    def test_missing_liberation_impact(self, scorer):
        with pytest.raises(ValidationError) as exc_info:
            scorer.score(OperationDescriptor(description="No impact"))
        assert exc_info.value.field == "liberation_impact"

    def test_wrong_type(self, scorer):
        with pytest.raises(ValidationError):
            scorer.score({"description": "dict instead of descriptor"})
