# =============================================================================
# GOVERNANCE DECISION ENGINE - PROPOSAL DATA MODELS
# =============================================================================
#
# GOVERNANCE INTENT:
# These dataclasses define the IMMUTABLE structure of community proposals
# and of the voting process decided for them.
# Immutability ensures audit trail integrity.
# All fields are explicit - no hidden state.
#
# A VoteResult decides HOW a proposal is voted on (quorum, threshold,
# who may vote). It never records or counts votes.
#
# =============================================================================

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple
import json

from models.data_models import (
    LiberationImpact,
    LiberationValidation,
    ensure_utc,
    freeze_mapping,
    parse_datetime,
)
from shared.enums import ProposalType, VotingRuleType
from shared.exceptions import ValidationError


@dataclass(frozen=True)
class CommunityProposal:
    """
    A proposal submitted to the community assembly.

    GOVERNANCE:
    - This object is IMMUTABLE (frozen=True)
    - deadline is normalised to UTC
    """
    title: str
    description: str
    proposal_type: ProposalType
    proposer_id: str
    liberation_impact: LiberationImpact
    deadline: datetime
    requested_vote_type: VotingRuleType = VotingRuleType.LIBERATION_WEIGHTED
    proposal_id: str = ""
    attachments: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate and normalise proposal fields after initialization."""
        for name in ("title", "description"):
            if not isinstance(getattr(self, name), str):
                raise ValidationError(f"Proposal {name} must be a string", field=name,
                                      subject_id=self.proposal_id or None)

        if not isinstance(self.proposal_type, ProposalType):
            try:
                object.__setattr__(self, "proposal_type", ProposalType(self.proposal_type))
            except ValueError:
                raise ValidationError(
                    f"Invalid proposal_type: {self.proposal_type}",
                    field="proposal_type", subject_id=self.proposal_id or None
                ) from None

        if not isinstance(self.requested_vote_type, VotingRuleType):
            try:
                object.__setattr__(
                    self, "requested_vote_type", VotingRuleType(self.requested_vote_type)
                )
            except ValueError:
                raise ValidationError(
                    f"Invalid requested_vote_type: {self.requested_vote_type}",
                    field="requested_vote_type", subject_id=self.proposal_id or None
                ) from None

        if not isinstance(self.liberation_impact, LiberationImpact):
            raise ValidationError(
                "Proposal requires a LiberationImpact",
                field="liberation_impact", subject_id=self.proposal_id or None
            )

        object.__setattr__(self, "deadline", ensure_utc(self.deadline, "deadline"))
        object.__setattr__(self, "attachments", tuple(self.attachments or ()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "proposal_id": self.proposal_id,
            "title": self.title,
            "description": self.description,
            "proposal_type": self.proposal_type.value,
            "proposer_id": self.proposer_id,
            "liberation_impact": self.liberation_impact.to_dict(),
            "requested_vote_type": self.requested_vote_type.value,
            "deadline": self.deadline.isoformat(),
            "attachments": list(self.attachments),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CommunityProposal":
        """
        Create CommunityProposal from dictionary.

        Missing required fields raise ValidationError.
        """
        for key in ("title", "description", "proposal_type", "proposer_id",
                    "liberation_impact", "deadline"):
            if data.get(key) is None:
                raise ValidationError("Missing required field in proposal", field=key)

        return cls(
            title=data["title"],
            description=data["description"],
            proposal_type=data["proposal_type"],
            proposer_id=data["proposer_id"],
            liberation_impact=LiberationImpact.from_dict(data["liberation_impact"]),
            deadline=parse_datetime(data["deadline"], "deadline"),
            requested_vote_type=data.get(
                "requested_vote_type", VotingRuleType.LIBERATION_WEIGHTED.value
            ),
            proposal_id=data.get("proposal_id", ""),
            attachments=tuple(data.get("attachments", ())),
        )


@dataclass(frozen=True)
class VotingRules:
    """Voting procedure decided for one proposal."""
    rule_type: VotingRuleType
    quorum: float
    passing_threshold: float
    voting_period_days: int
    eligibility_requirements: Tuple[str, ...]
    liberation_weighting: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_type": self.rule_type.value,
            "quorum": self.quorum,
            "passing_threshold": self.passing_threshold,
            "voting_period_days": self.voting_period_days,
            "eligibility_requirements": list(self.eligibility_requirements),
            "liberation_weighting": self.liberation_weighting,
        }


@dataclass(frozen=True)
class ProposalValidation:
    """
    Form and content checks of a proposal.

    GOVERNANCE:
    - validation_errors: every reason the proposal may not go to a vote
    - required_improvements: remediation, including advisory items that do
      not block the vote
    """
    valid: bool
    liberation_compliant: bool
    community_beneficial: bool
    democratic_process: bool
    validation_errors: Tuple[str, ...]
    required_improvements: Tuple[str, ...]
    liberation: Optional[LiberationValidation] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "liberation_compliant": self.liberation_compliant,
            "community_beneficial": self.community_beneficial,
            "democratic_process": self.democratic_process,
            "validation_errors": list(self.validation_errors),
            "required_improvements": list(self.required_improvements),
            "liberation": self.liberation.to_dict() if self.liberation else None,
        }


@dataclass(frozen=True)
class VoteEligibility:
    """Who may vote on a proposal, and with which special rights."""
    eligible_voters: Tuple[str, ...]
    ineligible_voters: Tuple[str, ...]
    eligibility_requirements: Tuple[str, ...]
    special_voting_rights: Mapping[str, Tuple[str, ...]] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(
            self, "special_voting_rights",
            freeze_mapping({g: tuple(r) for g, r in (self.special_voting_rights or {}).items()})
        )

    @classmethod
    def empty(cls) -> "VoteEligibility":
        """Used when a proposal never reaches the eligibility lookup."""
        return cls(
            eligible_voters=(),
            ineligible_voters=(),
            eligibility_requirements=(),
            special_voting_rights={},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eligible_voters": list(self.eligible_voters),
            "ineligible_voters": list(self.ineligible_voters),
            "eligibility_requirements": list(self.eligibility_requirements),
            "special_voting_rights": {
                group: list(rights) for group, rights in self.special_voting_rights.items()
            },
        }


@dataclass(frozen=True)
class VoteResult:
    """
    ProposalGovernor verdict.

    approved means "approved for the voting process", not "passed".
    voting_rules is None when the proposal failed validation.
    """
    approved: bool
    voting_rules: Optional[VotingRules]
    required_quorum: float
    passing_threshold: float
    proposal_validation: ProposalValidation
    vote_eligibility: VoteEligibility
    reason: str
    implementation_requirements: Tuple[str, ...] = ()
    proposal_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "approved": self.approved,
            "voting_rules": self.voting_rules.to_dict() if self.voting_rules else None,
            "required_quorum": self.required_quorum,
            "passing_threshold": self.passing_threshold,
            "proposal_validation": self.proposal_validation.to_dict(),
            "vote_eligibility": self.vote_eligibility.to_dict(),
            "reason": self.reason,
            "implementation_requirements": list(self.implementation_requirements),
        }
