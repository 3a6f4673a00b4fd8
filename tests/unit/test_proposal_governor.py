"""
UNIT TESTS - PROPOSAL GOVERNOR
==============================
Tests for proposals/governor.py (proposal validation and voting rules)
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from proposals.governor import ProposalGovernor, decision_type_for, govern_proposal
from proposals.member_registry import MemberRegistry, StaticMemberRegistry, VoterRoll
from shared.enums import GovernanceDecisionType, LiberationPrinciple, VotingRuleType
from shared.exceptions import CollaboratorFailure
from shared.rules_config import GovernanceRules, LiberationRules
from tests.factories import FIXED_NOW, proposal


NEUTRAL_LONG_DESCRIPTION = "Neutral platform update. " * 5

KEYWORD_HEAVY_DESCRIPTION = (
    "Workshops teach members to organize a community network and build collective "
    "power, sharing resources through a mutual aid fund with care and solidarity."
)


class RecordingRegistry(MemberRegistry):
    """Async registry that records every lookup."""

    def __init__(self, roll=None):
        self.roll = roll or VoterRoll(eligible=("member-1",))
        self.calls = []

    async def resolve_eligible_voters(self, proposal):
        self.calls.append(proposal.proposal_id)
        return self.roll


class FailingRegistry(MemberRegistry):

    async def resolve_eligible_voters(self, proposal):
        raise CollaboratorFailure("member_registry", "connection refused")


@pytest.fixture
def governor(rules, clock):
    return ProposalGovernor(rules, clock=clock)


# =============================================================================
# VOTING RULES
# =============================================================================

class TestVotingRules:

    def test_defaults(self, governor):
        rules = governor.voting_rules_for(proposal("platform_change", 0.85))

        assert rules.quorum == 0.30
        assert rules.passing_threshold == 0.60
        assert rules.voting_period_days == 14
        assert rules.rule_type == VotingRuleType.LIBERATION_WEIGHTED
        assert rules.liberation_weighting is True

    def test_governance_rule_tightens(self, governor):
        rules = governor.voting_rules_for(proposal("governance_rule", 0.85))

        assert rules.quorum == 0.40
        assert rules.passing_threshold == 0.67

    def test_high_liberation_discount(self, governor):
        rules = governor.voting_rules_for(proposal("platform_change", 0.95))
        assert rules.passing_threshold == 0.55

    def test_discount_requires_strictly_above(self, governor):
        rules = governor.voting_rules_for(proposal("platform_change", 0.9))
        assert rules.passing_threshold == 0.60

    def test_governance_rule_with_discount(self, governor):
        rules = governor.voting_rules_for(proposal("governance_rule", 0.95))

        assert rules.quorum == 0.40
        assert rules.passing_threshold == 0.62

    def test_creator_dispute_overrides_discount(self, governor):
        rules = governor.voting_rules_for(proposal("creator_dispute", 0.95))
        assert rules.passing_threshold == 0.75

    def test_derived_overall_uses_rule_weights(self, clock):
        weights = {p: 0.1 for p in LiberationPrinciple}
        weights[LiberationPrinciple.MUTUAL_AID] = 0.6
        governor = ProposalGovernor(
            GovernanceRules(liberation=LiberationRules(weights=weights)), clock=clock
        )
        # 0.865 with the default weights, 0.94 with these
        item = proposal("platform_change", 0.85, mutual_aid=1.0)

        assert governor.declared_overall(item) == pytest.approx(0.94)
        assert governor.voting_rules_for(item).passing_threshold == 0.55

    def test_declared_overall_kept_under_custom_weights(self, clock):
        weights = {p: 0.1 for p in LiberationPrinciple}
        weights[LiberationPrinciple.MUTUAL_AID] = 0.6
        governor = ProposalGovernor(
            GovernanceRules(liberation=LiberationRules(weights=weights)), clock=clock
        )
        item = proposal("platform_change", 0.85, mutual_aid=1.0, overall_score=0.85)

        assert governor.voting_rules_for(item).passing_threshold == 0.60

    @pytest.mark.parametrize("proposal_type", [
        "governance_rule", "platform_change", "creator_dispute", "liberation_standard",
    ])
    @pytest.mark.parametrize("value", [0.6, 0.9, 0.95, 1.0])
    def test_never_below_defaults_floor(self, governor, proposal_type, value):
        rules = governor.voting_rules_for(proposal(proposal_type, value))

        assert rules.quorum >= 0.30
        assert rules.passing_threshold >= 0.50


# =============================================================================
# VALIDATION
# =============================================================================

class TestValidation:

    @pytest.mark.asyncio
    async def test_valid_proposal(self, governor):
        result = await governor.govern(proposal("platform_change", 0.85))

        assert result.approved is True
        assert result.required_quorum == 0.30
        assert result.passing_threshold == 0.60
        assert result.reason == (
            "Proposal approved for community vote: quorum 30%, "
            "passing threshold 60%, 14-day voting period"
        )
        assert result.proposal_validation.valid is True
        assert result.proposal_id == "prop-001"

    @pytest.mark.asyncio
    async def test_short_title(self, governor):
        result = await governor.govern(proposal(title="Fund"))

        assert result.approved is False
        assert result.voting_rules is None
        assert result.required_quorum == 0.0
        assert result.passing_threshold == 0.0
        assert result.reason == (
            "Proposal validation failed: Title must be at least 10 characters"
        )
        assert "Provide more descriptive proposal title" in (
            result.proposal_validation.required_improvements
        )

    @pytest.mark.asyncio
    async def test_short_description(self, governor):
        result = await governor.govern(proposal(description="Too short"))

        assert result.approved is False
        assert result.proposal_validation.democratic_process is False
        assert "Description must be at least 100 characters" in (
            result.proposal_validation.validation_errors
        )

    @pytest.mark.asyncio
    async def test_deadline_must_be_in_future(self, governor):
        result = await governor.govern(proposal(deadline=FIXED_NOW))

        assert result.approved is False
        assert result.proposal_validation.validation_errors == (
            "Voting deadline must be in the future",
        )

    @pytest.mark.asyncio
    async def test_short_title_and_past_deadline(self, governor):
        result = await governor.govern(proposal(
            title="Bad Prop", deadline=FIXED_NOW - timedelta(days=1)
        ))

        assert result.approved is False
        assert result.proposal_validation.validation_errors == (
            "Title must be at least 10 characters",
            "Voting deadline must be in the future",
        )
        assert result.reason == (
            "Proposal validation failed: Title must be at least 10 characters, "
            "Voting deadline must be in the future"
        )

    @pytest.mark.asyncio
    async def test_keywords_do_not_replace_declared_impact(self, governor):
        result = await governor.govern(proposal(
            value=0.0,
            empowerment=0.6,
            description=KEYWORD_HEAVY_DESCRIPTION,
        ))
        validation = result.proposal_validation

        # The description alone would score power building as compliant
        assert validation.liberation.principle_scores[LiberationPrinciple.POWER_BUILDING] >= 0.6
        assert result.approved is False
        assert validation.liberation_compliant is False
        assert validation.community_beneficial is False
        assert "Increase overall liberation impact" in validation.required_improvements

    @pytest.mark.asyncio
    async def test_low_principle_blocks(self, governor):
        result = await governor.govern(proposal(
            "platform_change", 0.9,
            description=NEUTRAL_LONG_DESCRIPTION,
            power_building=0.4,
        ))
        validation = result.proposal_validation

        assert result.approved is False
        assert validation.liberation_compliant is False
        assert validation.community_beneficial is False
        assert validation.validation_errors == ("Proposal does not meet liberation principles",)
        assert validation.required_improvements.count(
            "Demonstrate how proposal builds community power"
        ) == 1

    @pytest.mark.asyncio
    async def test_consensus_advisory_does_not_block(self, governor):
        result = await governor.govern(proposal(
            value=0.75, requested_vote_type="consensus"
        ))

        assert result.approved is True
        assert "Consensus voting requires higher liberation alignment" in (
            result.proposal_validation.required_improvements
        )

    @pytest.mark.asyncio
    async def test_profit_wording_advisory(self, governor):
        description = (
            "Introduce a profit sharing plan for creators, paid monthly from "
            "platform earnings, with statements published for every member."
        )
        result = await governor.govern(proposal(description=description))

        assert result.approved is True
        assert "Clarify community benefit beyond profit" in (
            result.proposal_validation.required_improvements
        )


# =============================================================================
# ELIGIBILITY
# =============================================================================

class TestEligibility:

    @pytest.mark.asyncio
    async def test_no_registry_gives_empty_roll(self, governor):
        result = await governor.govern(proposal())

        assert result.vote_eligibility.eligible_voters == ()
        assert len(result.vote_eligibility.eligibility_requirements) == 4
        assert result.vote_eligibility.special_voting_rights["liberation_leaders"] == (
            "weighted_vote_1.5x",
        )

    @pytest.mark.asyncio
    async def test_registry_roll_and_rights_merged(self, rules, clock):
        registry = StaticMemberRegistry(
            eligible=("member-1", "member-2"),
            ineligible=("member-3",),
            special_rights={"liberation_leaders": ("agenda_setting",)},
        )
        governor = ProposalGovernor(rules, registry=registry, clock=clock)
        eligibility = (await governor.govern(proposal())).vote_eligibility

        assert eligibility.eligible_voters == ("member-1", "member-2")
        assert eligibility.ineligible_voters == ("member-3",)
        assert eligibility.special_voting_rights["liberation_leaders"] == (
            "weighted_vote_1.5x", "agenda_setting",
        )

    @pytest.mark.asyncio
    async def test_creator_dispute_grants_veto(self, governor):
        result = await governor.govern(proposal("creator_dispute"))

        assert result.vote_eligibility.special_voting_rights["affected_creators"] == (
            "veto_right",
        )
        assert "Affected creators must consent to resolution" in (
            result.implementation_requirements
        )

    @pytest.mark.asyncio
    async def test_invalid_proposal_never_reaches_registry(self, rules, clock):
        registry = RecordingRegistry()
        governor = ProposalGovernor(rules, registry=registry, clock=clock)

        result = await governor.govern(proposal(title="Fund"))

        assert result.approved is False
        assert registry.calls == []

    @pytest.mark.asyncio
    async def test_async_registry_is_awaited(self, rules, clock):
        registry = RecordingRegistry()
        governor = ProposalGovernor(rules, registry=registry, clock=clock)

        result = await governor.govern(proposal())

        assert registry.calls == ["prop-001"]
        assert result.vote_eligibility.eligible_voters == ("member-1",)

    @pytest.mark.asyncio
    async def test_registry_failure_propagates(self, rules, clock):
        governor = ProposalGovernor(rules, registry=FailingRegistry(), clock=clock)

        with pytest.raises(CollaboratorFailure):
            await governor.govern(proposal())


# =============================================================================
# HELPERS
# =============================================================================

class TestHelpers:

    @pytest.mark.parametrize("proposal_type,expected", [
        ("governance_rule", GovernanceDecisionType.GOVERNANCE_RULE_UPDATE),
        ("creator_dispute", GovernanceDecisionType.CREATOR_SOVEREIGNTY),
        ("platform_change", GovernanceDecisionType.LIBERATION_VALIDATION),
        ("liberation_standard", GovernanceDecisionType.COMMUNITY_VOTE),
    ])
    def test_decision_type_for(self, proposal_type, expected):
        assert decision_type_for(proposal(proposal_type)) == expected

    def test_governance_rule_implementation_requirements(self, governor):
        requirements = governor._implementation_requirements(
            proposal("governance_rule"), liberation_aligned=True
        )
        assert requirements[0] == "Monitor liberation impact during implementation"
        assert "Provide 30-day transition period" in requirements

    def test_sync_wrapper(self):
        result = govern_proposal(proposal(
            deadline=datetime.now(timezone.utc) + timedelta(days=30)
        ))
        assert result.approved is True
