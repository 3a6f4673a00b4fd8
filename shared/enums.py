# =============================================================================
# GOVERNANCE DECISION ENGINE - SHARED ENUMS
# =============================================================================
#
# GOVERNANCE:
# These enums define the shared vocabulary across the engine.
# They encode the governance model at the type level.
#
# String values are the wire-facing names used in to_dict() output and in
# config/governance_rules.yaml.
#
# =============================================================================

from enum import Enum


class LiberationPrinciple(Enum):
    """
    The five weighted policy dimensions an operation is scored against.

    Declaration order is the canonical reporting order.
    """
    EMPOWERMENT = "empowerment"
    COMMUNITY_LIBERATION = "community_liberation"
    OPPRESSION_RESISTANCE = "oppression_resistance"
    POWER_BUILDING = "power_building"
    MUTUAL_AID = "mutual_aid"

    @property
    def label(self) -> str:
        """Human-readable name for feedback strings."""
        return self.value.replace("_", " ")


class HarmCategory(Enum):
    """Harmful-pattern categories the content safety detector reports."""
    RACIST = "racist"
    HOMOPHOBIC = "homophobic"
    TRANSPHOBIC = "transphobic"
    CLASSIST = "classist"
    SEXIST = "sexist"
    ABLEIST = "ableist"
    EXPLOITATIVE = "exploitative"


class Severity(Enum):
    """
    Content harm severity, derived from the number of detected categories.

    0 -> LOW, 1 -> MEDIUM, 2 -> HIGH, 3+ -> CRITICAL
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SensitivityTier(Enum):
    """Sensitivity of community data. Drives required consent."""
    PUBLIC = "public"
    COMMUNITY = "community"
    PRIVATE = "private"


class ProposalType(Enum):
    """Kinds of community proposal. Some types tighten voting rules."""
    GOVERNANCE_RULE = "governance_rule"
    PLATFORM_CHANGE = "platform_change"
    CREATOR_DISPUTE = "creator_dispute"
    LIBERATION_STANDARD = "liberation_standard"


class VotingRuleType(Enum):
    """Voting procedure families."""
    SIMPLE_MAJORITY = "simple_majority"
    SUPERMAJORITY = "supermajority"
    CONSENSUS = "consensus"
    LIBERATION_WEIGHTED = "liberation_weighted"


class GovernanceDecisionType(Enum):
    """What kind of platform action a governance request concerns."""
    CONTENT_APPROVAL = "content_approval"
    CREATOR_SOVEREIGNTY = "creator_sovereignty"
    COMMUNITY_CONSENT = "community_consent"
    LIBERATION_VALIDATION = "liberation_validation"
    ANTI_OPPRESSION_CHECK = "anti_oppression_check"
    COMMUNITY_VOTE = "community_vote"
    GOVERNANCE_RULE_UPDATE = "governance_rule_update"


class IssueSeverity(Enum):
    """Severity of a GovernanceIssue."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
