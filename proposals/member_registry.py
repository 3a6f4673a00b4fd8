# =============================================================================
# GOVERNANCE DECISION ENGINE - MEMBER REGISTRY COLLABORATOR
# =============================================================================
#
# The member registry owns the member records. The ProposalGovernor only
# asks it for the voter roll of one proposal and packages the answer.
#
# CONTRACT:
# - resolve_eligible_voters(proposal) -> VoterRoll
# - Implementations may be sync or async
# - Failures are raised as CollaboratorFailure and reach the caller
#   untouched: no retry, no fallback roll
#
# =============================================================================

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from models.data_models import freeze_mapping
from proposals.models import CommunityProposal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoterRoll:
    """Eligible / ineligible partition of members for one proposal."""
    eligible: Tuple[str, ...] = ()
    ineligible: Tuple[str, ...] = ()
    special_rights: Mapping[str, Tuple[str, ...]] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "eligible", tuple(self.eligible))
        object.__setattr__(self, "ineligible", tuple(self.ineligible))
        object.__setattr__(
            self, "special_rights",
            freeze_mapping({group: tuple(rights) for group, rights in self.special_rights.items()})
        )


class MemberRegistry(ABC):
    """Supplies the voter roll for a proposal."""

    @abstractmethod
    def resolve_eligible_voters(self, proposal: CommunityProposal) -> VoterRoll:
        """
        Resolve who may vote on a proposal.

        Args:
            proposal: The proposal going to a vote

        Returns:
            VoterRoll (or an awaitable of one)

        Raises:
            CollaboratorFailure: registry unavailable
        """
        ...


class StaticMemberRegistry(MemberRegistry):
    """
    In-memory registry with a fixed membership.

    Useful for tests and for deployments where the roll is exported to a
    file ahead of a vote.
    """

    def __init__(
        self,
        eligible: Iterable[str] = (),
        ineligible: Iterable[str] = (),
        special_rights: Optional[Mapping[str, Sequence[str]]] = None
    ):
        self._roll = VoterRoll(
            eligible=tuple(eligible),
            ineligible=tuple(ineligible),
            special_rights={k: tuple(v) for k, v in (special_rights or {}).items()},
        )

    def resolve_eligible_voters(self, proposal: CommunityProposal) -> VoterRoll:
        logger.debug(
            f"Resolved {len(self._roll.eligible)} eligible voters for proposal "
            f"{proposal.proposal_id or '<unnamed>'}"
        )
        return self._roll
