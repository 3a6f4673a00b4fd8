# =============================================================================
# GOVERNANCE DECISION ENGINE - COMMUNITY PROPOSALS
# =============================================================================
#
# GOVERNANCE INTENT:
# This package decides whether a community proposal may go to a vote and
# under which rules. It does NOT record, count or tally votes.
#
# ARCHITECTURE:
#   CommunityProposal -> ProposalGovernor -> VoteResult
#                             |
#                        MemberRegistry (voter roll)
#
# The governor lives in proposals.governor and is not imported here,
# because it depends on core.policy_scorer.
#
# =============================================================================

from proposals.models import (
    CommunityProposal,
    ProposalValidation,
    VoteEligibility,
    VoteResult,
    VotingRules,
)
from proposals.member_registry import MemberRegistry, StaticMemberRegistry, VoterRoll

__all__ = [
    "CommunityProposal",
    "ProposalValidation",
    "VoteEligibility",
    "VoteResult",
    "VotingRules",
    "MemberRegistry",
    "StaticMemberRegistry",
    "VoterRoll",
]
