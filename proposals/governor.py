# =============================================================================
# GOVERNANCE DECISION ENGINE - PROPOSAL GOVERNOR
# =============================================================================
#
# GOVERNANCE INTENT:
# The ProposalGovernor decides whether a community proposal may go to a
# vote and, if so, under which voting rules.
#
# CRITICAL: It does NOT store, count or tally votes.
#
# PROPOSAL VALIDATION (blocking):
# - Title at least 10 characters
# - Description at least 100 characters
# - Deadline in the future
# - Liberation compliance: every DECLARED principle sub-score >= 0.60
#   (the PolicyScorer result is attached as evidence, it never decides)
#
# ADVISORY (adds improvements, never blocks):
# - Community benefit: power building >= 0.50 and overall >= 0.60
# - Consensus votes need overall liberation >= 0.80
# - "profit" wording without any mention of community
#
# VOTING RULES (applied in this order):
# 1. Defaults: quorum 0.30, threshold 0.60, 14 days, liberation weighted
# 2. governance_rule:  quorum >= 0.40, threshold >= 0.67
# 3. overall liberation > 0.90: threshold - 0.05, never below 0.50
# 4. creator_dispute:  threshold = 0.75, regardless of step 3
#
# =============================================================================

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from core.policy_scorer import PolicyScorer
from models.data_models import OperationDescriptor, ensure_utc, utc_now
from proposals.member_registry import MemberRegistry, VoterRoll
from proposals.models import (
    CommunityProposal,
    ProposalValidation,
    VoteEligibility,
    VoteResult,
    VotingRules,
)
from shared.awaitables import resolve
from shared.enums import (
    GovernanceDecisionType,
    LiberationPrinciple,
    ProposalType,
    VotingRuleType,
)
from shared.exceptions import ValidationError
from shared.rules_config import GovernanceRules

logger = logging.getLogger(__name__)


def decision_type_for(proposal: CommunityProposal) -> GovernanceDecisionType:
    """Decision type a proposal's vote is recorded under."""
    if proposal.proposal_type == ProposalType.GOVERNANCE_RULE:
        return GovernanceDecisionType.GOVERNANCE_RULE_UPDATE
    if proposal.proposal_type == ProposalType.CREATOR_DISPUTE:
        return GovernanceDecisionType.CREATOR_SOVEREIGNTY
    if proposal.proposal_type == ProposalType.PLATFORM_CHANGE:
        return GovernanceDecisionType.LIBERATION_VALIDATION
    return GovernanceDecisionType.COMMUNITY_VOTE


class ProposalGovernor:
    """
    Validates proposals and computes their voting rules.

    GOVERNANCE:
    - All checks are EXPLICIT and NAMED
    - Invalid proposals never reach the member registry
    - No state is kept between proposals
    """

    LIBERATION_IMPROVEMENTS: Dict[LiberationPrinciple, str] = {
        LiberationPrinciple.EMPOWERMENT: "Increase Black queer empowerment focus",
        LiberationPrinciple.COMMUNITY_LIBERATION: "Strengthen community liberation benefits",
        LiberationPrinciple.OPPRESSION_RESISTANCE: "Consider anti-oppression implications",
        LiberationPrinciple.POWER_BUILDING: "Demonstrate how proposal builds community power",
        LiberationPrinciple.MUTUAL_AID: "Add mutual aid components",
    }

    ELIGIBILITY_DESCRIPTIONS: Tuple[str, ...] = (
        "Community member for at least 30 days",
        "Has contributed to liberation-aligned activities",
        "Consented to democratic governance process",
        "No active governance violations",
    )

    # Community benefit advisory
    POWER_BUILDING_BENEFIT = 0.5
    OVERALL_BENEFIT = 0.6

    def __init__(
        self,
        rules: Optional[GovernanceRules] = None,
        scorer: Optional[PolicyScorer] = None,
        registry: Optional[MemberRegistry] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            rules: Governance rules (defaults to the documented defaults)
            scorer: PolicyScorer for liberation compliance
            registry: Member registry for the voter roll (None -> empty roll)
            clock: Returns the current time (defaults to UTC now)
        """
        self.rules = rules or GovernanceRules()
        self.scorer = scorer or PolicyScorer(self.rules)
        self.registry = registry
        self.clock = clock or utc_now

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def govern(self, proposal: CommunityProposal) -> VoteResult:
        """
        Decide whether a proposal goes to a vote and under which rules.

        Args:
            proposal: The proposal

        Returns:
            VoteResult. approved=False with a "Proposal validation failed"
            reason when any blocking check fails.

        Raises:
            CollaboratorFailure: the member registry failed
        """
        if not isinstance(proposal, CommunityProposal):
            raise ValidationError(
                f"Expected a CommunityProposal, got {type(proposal).__name__}",
                field="proposal"
            )

        # ---------------------------------------------------------------------
        # STEP 1: Validate form and liberation compliance
        # ---------------------------------------------------------------------
        validation = await self.validate_proposal(proposal)

        if not validation.valid:
            reason = f"Proposal validation failed: {', '.join(validation.validation_errors)}"
            logger.info(f"Proposal {proposal.proposal_id or '<unnamed>'} rejected: {reason}")
            return VoteResult(
                approved=False,
                voting_rules=None,
                required_quorum=0.0,
                passing_threshold=0.0,
                proposal_validation=validation,
                vote_eligibility=VoteEligibility.empty(),
                reason=reason,
                proposal_id=proposal.proposal_id,
            )

        # ---------------------------------------------------------------------
        # STEP 2: Voting rules
        # ---------------------------------------------------------------------
        voting_rules = self.voting_rules_for(proposal)

        # ---------------------------------------------------------------------
        # STEP 3: Eligibility (registry failures propagate)
        # ---------------------------------------------------------------------
        eligibility = await self.determine_eligibility(proposal)

        reason = (
            f"Proposal approved for community vote: quorum {voting_rules.quorum:.0%}, "
            f"passing threshold {voting_rules.passing_threshold:.0%}, "
            f"{voting_rules.voting_period_days}-day voting period"
        )
        logger.info(f"Proposal {proposal.proposal_id or '<unnamed>'}: {reason}")

        return VoteResult(
            approved=True,
            voting_rules=voting_rules,
            required_quorum=voting_rules.quorum,
            passing_threshold=voting_rules.passing_threshold,
            proposal_validation=validation,
            vote_eligibility=eligibility,
            reason=reason,
            implementation_requirements=tuple(
                self._implementation_requirements(proposal, validation.liberation_compliant)
            ),
            proposal_id=proposal.proposal_id,
        )

    async def validate_proposal(self, proposal: CommunityProposal) -> ProposalValidation:
        """Run every blocking and advisory check on a proposal."""
        errors: List[str] = []
        improvements: List[str] = []

        # Liberation compliance
        operation = OperationDescriptor(
            description=proposal.description,
            liberation_impact=proposal.liberation_impact,
            operation_id=proposal.proposal_id,
            operation_type=f"proposal:{proposal.proposal_type.value}",
        )
        # Scored for the record only; compliance is judged on the declared impact
        liberation = await resolve(self.scorer.score(operation))

        declared = proposal.liberation_impact
        declared_overall = self.declared_overall(proposal)
        minimum = self.rules.voting.principle_minimum
        below = [p for p in LiberationPrinciple if declared.score_for(p) < minimum]
        liberation_compliant = not below
        if not liberation_compliant:
            errors.append("Proposal does not meet liberation principles")
            improvements.extend(self.LIBERATION_IMPROVEMENTS[p] for p in below)

        # Democratic process (form)
        democratic_errors = self._check_form(proposal)
        democratic_process = not democratic_errors
        if democratic_errors:
            errors.extend(democratic_errors)
            improvements.extend(self._form_improvements(democratic_errors))

        # Advisory checks
        community_beneficial, benefit_improvements = self._check_community_benefit(
            proposal, declared.power_building, declared_overall
        )
        improvements.extend(benefit_improvements)

        if (proposal.requested_vote_type == VotingRuleType.CONSENSUS
                and declared_overall < self.rules.voting.consensus_liberation_score):
            improvements.append("Consensus voting requires higher liberation alignment")

        return ProposalValidation(
            valid=not errors,
            liberation_compliant=liberation_compliant,
            community_beneficial=community_beneficial,
            democratic_process=democratic_process,
            validation_errors=tuple(errors),
            required_improvements=tuple(dict.fromkeys(improvements)),
            liberation=liberation,
        )

    def voting_rules_for(self, proposal: CommunityProposal) -> VotingRules:
        """
        Voting rules for a valid proposal.

        Adjustments are applied in a fixed order; the creator dispute
        threshold is applied last and overrides the liberation discount.
        """
        voting = self.rules.voting
        quorum = voting.default_quorum
        threshold = voting.default_threshold

        if proposal.proposal_type == ProposalType.GOVERNANCE_RULE:
            quorum = max(quorum, voting.governance_rule_quorum)
            threshold = max(threshold, voting.governance_rule_threshold)

        if self.declared_overall(proposal) > voting.high_liberation_score:
            threshold = max(threshold - voting.high_liberation_discount, voting.threshold_floor)

        if proposal.proposal_type == ProposalType.CREATOR_DISPUTE:
            threshold = voting.creator_dispute_threshold

        return VotingRules(
            rule_type=VotingRuleType.LIBERATION_WEIGHTED,
            quorum=round(quorum, 4),
            passing_threshold=round(threshold, 4),
            voting_period_days=voting.voting_period_days,
            eligibility_requirements=voting.eligibility_requirements,
            liberation_weighting=True,
        )

    def declared_overall(self, proposal: CommunityProposal) -> float:
        """Overall declared liberation score, weighted with the rules in force when not given."""
        return proposal.liberation_impact.overall_for(self.rules.liberation.weights)

    async def determine_eligibility(self, proposal: CommunityProposal) -> VoteEligibility:
        """Package the registry's voter roll with requirements and special rights."""
        if self.registry is None:
            roll = VoterRoll()
        else:
            roll = await resolve(self.registry.resolve_eligible_voters(proposal))

        special_rights = self._special_rights(proposal)
        for group, rights in roll.special_rights.items():
            merged = list(special_rights.get(group, ()))
            merged.extend(r for r in rights if r not in merged)
            special_rights[group] = tuple(merged)

        return VoteEligibility(
            eligible_voters=roll.eligible,
            ineligible_voters=roll.ineligible,
            eligibility_requirements=self.ELIGIBILITY_DESCRIPTIONS,
            special_voting_rights=special_rights,
        )

    # =========================================================================
    # CHECKS
    # =========================================================================

    def _check_form(self, proposal: CommunityProposal) -> List[str]:
        voting = self.rules.voting
        errors = []
        if len(proposal.title.strip()) < voting.min_title_length:
            errors.append(f"Title must be at least {voting.min_title_length} characters")
        if len(proposal.description.strip()) < voting.min_description_length:
            errors.append(
                f"Description must be at least {voting.min_description_length} characters"
            )
        if proposal.deadline <= ensure_utc(self.clock()):
            errors.append("Voting deadline must be in the future")
        return errors

    def _form_improvements(self, errors: List[str]) -> List[str]:
        voting = self.rules.voting
        improvements = []
        for error in errors:
            if error.startswith("Title"):
                improvements.append("Provide more descriptive proposal title")
            elif error.startswith("Description"):
                improvements.append(
                    f"Provide detailed proposal description "
                    f"(minimum {voting.min_description_length} characters)"
                )
            else:
                improvements.append("Set appropriate voting deadline in the future")
        return improvements

    def _check_community_benefit(
        self,
        proposal: CommunityProposal,
        power_building: float,
        overall: float
    ) -> Tuple[bool, List[str]]:
        improvements = []
        beneficial = True

        if power_building < self.POWER_BUILDING_BENEFIT:
            beneficial = False
            improvements.append("Demonstrate how proposal builds community power")

        if overall < self.OVERALL_BENEFIT:
            beneficial = False
            improvements.append("Increase overall liberation impact")

        description = proposal.description.lower()
        if "profit" in description and "community" not in description:
            improvements.append("Clarify community benefit beyond profit")

        return beneficial, improvements

    def _special_rights(self, proposal: CommunityProposal) -> Dict[str, Tuple[str, ...]]:
        rights: Dict[str, Tuple[str, ...]] = {
            "liberation_leaders": ("weighted_vote_1.5x",),
            "community_elders": ("advisory_voice",),
        }
        if proposal.proposal_type == ProposalType.CREATOR_DISPUTE:
            rights["affected_creators"] = ("veto_right",)
        return rights

    def _implementation_requirements(
        self,
        proposal: CommunityProposal,
        liberation_aligned: bool
    ) -> List[str]:
        if liberation_aligned:
            requirements = [
                "Monitor liberation impact during implementation",
                "Report community benefits quarterly",
            ]
        else:
            requirements = [
                "Mandatory liberation alignment review before implementation",
                "Community consent required for each implementation phase",
            ]

        if proposal.proposal_type == ProposalType.GOVERNANCE_RULE:
            requirements.extend([
                "Update governance documentation",
                "Notify all community members of rule changes",
                "Provide 30-day transition period",
            ])
        elif proposal.proposal_type == ProposalType.CREATOR_DISPUTE:
            requirements.extend([
                "Affected creators must consent to resolution",
                "Revenue redistribution must occur within 48 hours",
            ])

        return requirements


def govern_proposal(
    proposal: CommunityProposal,
    rules: Optional[GovernanceRules] = None,
    registry: Optional[MemberRegistry] = None
) -> VoteResult:
    """
    Convenience function to govern a proposal from synchronous code.

    GOVERNANCE:
    This is a STATELESS function.
    Each call is independent.

    Args:
        proposal: The CommunityProposal
        rules: Optional governance rules
        registry: Optional member registry

    Returns:
        VoteResult
    """
    governor = ProposalGovernor(rules=rules, registry=registry)
    return asyncio.run(governor.govern(proposal))
