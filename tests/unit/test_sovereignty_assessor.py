"""
UNIT TESTS - SOVEREIGNTY ASSESSOR
=================================
Tests for core/sovereignty_assessor.py (creator revenue, narrative, consent)
"""

import sys
from datetime import timedelta
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from core.sovereignty_assessor import SovereigntyAssessor
from shared.exceptions import ValidationError
from tests.factories import FIXED_NOW, creator_action


BASIC_SCOPE = (
    "content_creation", "content_distribution", "content_monetization",
    "revenue_sharing", "economic_terms",
    "narrative_ownership", "editorial_control",
)


@pytest.fixture
def assessor(rules, clock):
    return SovereigntyAssessor(rules, clock=clock)


# =============================================================================
# FULL COMPLIANCE
# =============================================================================

class TestCompliantAction:

    def test_compliant_action_approved(self, assessor):
        decision = assessor.assess(creator_action())

        assert decision.approved is True
        assert decision.revenue_share_compliant is True
        assert decision.narrative_control_maintained is True
        assert decision.creator_consent_obtained is True
        assert decision.consent_score == 1.0
        assert decision.missing_consent == ()
        assert decision.required_actions == ()
        assert decision.minimum_revenue_share == 0.75
        assert decision.actual_revenue_share == 0.80
        assert decision.creator_id == "creator-1"

    def test_findings_cover_all_three_checks(self, assessor):
        decision = assessor.assess(creator_action())

        assert len(decision.findings) == 3
        assert decision.findings[0] == "Creator revenue share 80% meets the 75% minimum"

    def test_boundaries_are_inclusive(self, assessor):
        decision = assessor.assess(creator_action(
            creator_share=0.75, community_share=0.20, platform_costs=0.05,
            narrative=0.80,
        ))

        assert decision.revenue_share_compliant is True
        assert decision.narrative_control_maintained is True

    def test_wrong_type(self, assessor):
        with pytest.raises(ValidationError):
            assessor.assess("creator-1")


# =============================================================================
# REVENUE SHARE
# =============================================================================

class TestRevenueShare:

    def test_low_share_rejected_with_remediation(self, assessor):
        decision = assessor.assess(creator_action(
            creator_share=0.70, community_share=0.20, platform_costs=0.10
        ))

        assert decision.approved is False
        assert decision.revenue_share_compliant is False
        assert decision.required_actions[0] == (
            "Increase creator revenue share by 5% to meet 75% minimum"
        )
        assert "Schedule creator sovereignty compliance review" in decision.required_actions

    def test_just_below_minimum(self, assessor):
        decision = assessor.assess(creator_action(
            creator_share=0.7499, community_share=0.2001, platform_costs=0.05
        ))

        assert decision.revenue_share_compliant is False
        assert decision.approved is False

    def test_unowned_narrative_low_share_no_explicit_consent(self, assessor):
        action = creator_action(
            creator_share=0.6, community_share=0.35, platform_costs=0.05,
            creator_ownership=False, explicit=False,
        )
        decision = assessor.assess(action)

        assert decision.approved is False
        assert decision.revenue_share_compliant is False
        assert decision.creator_consent_obtained is False
        assert decision.missing_consent == ("explicit_consent",)
        assert "Increase creator revenue share by 15% to meet 75% minimum" in (
            decision.required_actions
        )
        # No narrative ownership, so no narrative scopes are required
        assert assessor.required_scope(action) == BASIC_SCOPE[:5]

    def test_advisory_share_recommendation(self, assessor):
        decision = assessor.assess(creator_action(
            creator_share=0.70, community_share=0.20, platform_costs=0.10
        ))
        assert "Consider increasing to 80% share for enhanced creator sovereignty" in (
            decision.required_actions
        )


# =============================================================================
# NARRATIVE CONTROL
# =============================================================================

class TestNarrativeControl:

    def test_low_narrative_control(self, assessor):
        decision = assessor.assess(creator_action(narrative=0.70))

        assert decision.narrative_control_maintained is False
        assert decision.approved is False
        assert decision.narrative_control_score == 0.70
        assert (
            "Increase creator narrative control by 10% to meet 80% minimum"
            in decision.required_actions
        )

    def test_missing_editing_rights_recommendation(self, assessor):
        decision = assessor.assess(creator_action(narrative=0.70, editing_rights=()))

        assert "Provide creators with final edit approval rights" in decision.required_actions


# =============================================================================
# CONSENT
# =============================================================================

class TestConsent:

    def test_missing_flag_blocks_even_above_minimum(self, assessor):
        decision = assessor.assess(creator_action(explicit=False))

        # 10 of 11 requirements met is above 0.90, but something is missing
        assert decision.consent_score == pytest.approx(10 / 11)
        assert decision.creator_consent_obtained is False
        assert decision.missing_consent == ("explicit_consent",)
        assert "Obtain creator consent: explicit_consent" in decision.required_actions

    def test_cultural_content_needs_cultural_scope(self, assessor):
        decision = assessor.assess(creator_action(cultural=0.75, scope=BASIC_SCOPE))

        assert decision.missing_consent == ("cultural_representation", "community_impact")
        assert decision.creator_consent_obtained is False

    def test_required_scope_grows_with_messaging(self, assessor):
        scope = assessor.required_scope(creator_action(messaging=0.5))

        assert "liberation_alignment" in scope
        assert "political_messaging" in scope
        assert "cultural_representation" not in scope

    def test_expired_ongoing_consent(self, assessor):
        action = creator_action(consent_date=FIXED_NOW - timedelta(days=366))
        decision = assessor.assess(action)

        assert assessor.is_consent_expired(action) is True
        assert "consent_renewal" in decision.missing_consent
        assert "Renew ongoing creator consent (older than 365 days)" in decision.required_actions

    def test_consent_exactly_at_validity_is_not_expired(self, assessor):
        action = creator_action(consent_date=FIXED_NOW - timedelta(days=365))
        assert assessor.is_consent_expired(action) is False

    def test_one_time_consent_never_expires(self, assessor):
        action = creator_action(
            ongoing=False, consent_date=FIXED_NOW - timedelta(days=1000)
        )
        assert assessor.is_consent_expired(action) is False


# =============================================================================
# CLASSIFICATION / PLANNING
# =============================================================================

class TestConsentType:

    def test_enhanced_for_high_share(self, assessor):
        assert assessor.consent_type(creator_action()) == "enhanced_explicit"

    def test_enhanced_for_cultural_content(self, assessor):
        action = creator_action(
            creator_share=0.70, community_share=0.20, platform_costs=0.10, cultural=0.85
        )
        assert assessor.consent_type(action) == "enhanced_explicit"

    def test_political(self, assessor):
        action = creator_action(
            creator_share=0.70, community_share=0.20, platform_costs=0.10, messaging=0.75
        )
        assert assessor.consent_type(action) == "political_explicit"

    def test_economic(self, assessor):
        action = creator_action(creator_share=0.70, community_share=0.20, platform_costs=0.10)
        assert assessor.consent_type(action) == "economic_explicit"

    def test_standard(self, assessor):
        action = creator_action(creator_share=0.0, community_share=0.90, platform_costs=0.10)
        assert assessor.consent_type(action) == "standard_explicit"


class TestPlanning:

    def test_priority_score(self, assessor):
        decision = assessor.assess(creator_action())
        expected = (0.80 / 0.75) * 0.4 + 0.90 * 0.3 + 1.0 * 0.3
        assert assessor.priority_score(decision) == pytest.approx(expected)

    def test_roadmap_for_compliant_action(self, assessor):
        roadmap = assessor.roadmap(assessor.assess(creator_action()))

        assert roadmap.immediate_actions == ()
        assert roadmap.long_term_actions[0] == (
            "Explore increasing creator revenue share beyond 75%"
        )

    def test_roadmap_for_failing_revenue(self, assessor):
        decision = assessor.assess(creator_action(
            creator_share=0.70, community_share=0.20, platform_costs=0.10
        ))
        roadmap = assessor.roadmap(decision)

        assert roadmap.immediate_actions[0] == "Adjust revenue sharing to meet 75% minimum"
        assert roadmap.long_term_actions == ()


class TestMultipleCreators:

    def test_all_compliant(self, assessor):
        result = assessor.assess_many([
            creator_action(creator_id="creator-1"),
            creator_action(creator_id="creator-2"),
        ])

        assert result.overall_compliant is True
        assert result.conflicting_requirements == ()
        assert len(result.decision_for("creator-2")) == 1

    def test_mixed_verdicts_for_one_creator_conflict(self, assessor):
        result = assessor.assess_many([
            creator_action(creator_id="creator-1"),
            creator_action(creator_id="creator-1", narrative=0.5),
        ])

        assert result.overall_compliant is False
        assert result.conflicting_requirements == (
            "Conflicting sovereignty verdicts for creator creator-1",
        )
