# =============================================================================
# GOVERNANCE DECISION ENGINE
# Module: models/data_models.py
# Purpose: Input descriptors, evaluator verdicts and the final decision record
# =============================================================================
#
# AUDIT NOTE:
# All data models are:
# - Immutable after creation (frozen dataclasses)
# - Fully serializable to JSON for audit trails (to_dict)
# - Normalised on construction: fractions clamped to [0, 1], sequences
#   stored as tuples, mappings stored read-only, naive datetimes
#   interpreted as UTC
#
# Malformed input raises ValidationError at construction. A well-formed
# request that fails thresholds is NOT an error; it becomes a verdict with
# approved/valid/safe False and explicit findings.
#
# =============================================================================

import math
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from shared.enums import (
    GovernanceDecisionType,
    HarmCategory,
    IssueSeverity,
    LiberationPrinciple,
    SensitivityTier,
    Severity,
)
from shared.exceptions import ValidationError
from shared.rules_config import DEFAULT_PRINCIPLE_WEIGHTS

if TYPE_CHECKING:
    from proposals.models import CommunityProposal, VoteResult


REVENUE_SUM_TOLERANCE = 1e-6


# =============================================================================
# NORMALISATION HELPERS
# =============================================================================


def clamp_fraction(value: Any, field_name: str) -> float:
    """Clamp a numeric value to [0, 1]. Non-numbers and NaN are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"Expected a number, got {type(value).__name__}", field=field_name
        )
    if math.isnan(value):
        raise ValidationError("Value is NaN", field=field_name)
    return min(max(float(value), 0.0), 1.0)


def freeze_mapping(mapping: Optional[Mapping]) -> Mapping:
    """Read-only copy of a mapping, so frozen records stay frozen."""
    return MappingProxyType(dict(mapping or {}))


def ensure_utc(value: datetime, field_name: str = "timestamp") -> datetime:
    """Return an aware UTC datetime. Naive values are taken to be UTC already."""
    if not isinstance(value, datetime):
        raise ValidationError(
            f"Expected a datetime, got {type(value).__name__}", field=field_name
        )
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any, field_name: str) -> datetime:
    """Accept a datetime or an ISO 8601 string."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise ValidationError(f"Invalid ISO datetime '{value}'", field=field_name) from None
    return ensure_utc(value, field_name)


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def _as_tuple(value: Any, field_name: str) -> Tuple:
    if value is None:
        return ()
    if isinstance(value, str):
        raise ValidationError("Expected a sequence, got a string", field=field_name)
    try:
        return tuple(value)
    except TypeError:
        raise ValidationError(
            f"Expected a sequence, got {type(value).__name__}", field=field_name
        ) from None


def _require(data: Mapping[str, Any], key: str, owner: str) -> Any:
    if key not in data or data[key] is None:
        raise ValidationError(f"Missing required field in {owner}", field=key)
    return data[key]


# =============================================================================
# IMPACT TYPES
# =============================================================================


@dataclass(frozen=True)
class EconomicImpact:
    """
    Revenue split of one operation.

    creator + community + platform must sum to 1.0. Mutual aid and
    liberation investment are sub-allocations and are not part of the sum.
    """
    creator_revenue_share: float
    community_revenue_share: float
    platform_costs: float
    mutual_aid_contribution: float = 0.0
    liberation_investment: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(
                self, f.name,
                clamp_fraction(getattr(self, f.name), f"economic_impact.{f.name}")
            )

        total = self.revenue_total
        if abs(total - 1.0) > REVENUE_SUM_TOLERANCE:
            raise ValidationError(
                f"Creator, community and platform fractions must sum to 1.0, got {total:.6f}",
                field="economic_impact"
            )

    @property
    def revenue_total(self) -> float:
        return self.creator_revenue_share + self.community_revenue_share + self.platform_costs

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EconomicImpact":
        owner = "economic_impact"
        return cls(
            creator_revenue_share=_require(data, "creator_revenue_share", owner),
            community_revenue_share=_require(data, "community_revenue_share", owner),
            platform_costs=_require(data, "platform_costs", owner),
            mutual_aid_contribution=data.get("mutual_aid_contribution", 0.0),
            liberation_investment=data.get("liberation_investment", 0.0),
        )


@dataclass(frozen=True)
class LiberationImpact:
    """
    Declared liberation sub-scores of an operation or proposal.

    overall_score is precomputed by the caller. When omitted it is derived
    from the sub-scores with the default principle weights, and
    overall_for() re-derives it with the weights of the rules in force.
    """
    empowerment: float
    community_liberation: float
    oppression_resistance: float
    power_building: float
    mutual_aid: float
    overall_score: Optional[float] = None

    overall_declared: bool = field(default=True, init=False, compare=False, repr=False)

    def __post_init__(self):
        for principle in LiberationPrinciple:
            name = principle.value
            object.__setattr__(
                self, name, clamp_fraction(getattr(self, name), f"liberation_impact.{name}")
            )

        if self.overall_score is None:
            object.__setattr__(self, "overall_declared", False)
            object.__setattr__(self, "overall_score", self.weighted(DEFAULT_PRINCIPLE_WEIGHTS))
        else:
            object.__setattr__(
                self, "overall_score",
                clamp_fraction(self.overall_score, "liberation_impact.overall_score")
            )

    def score_for(self, principle: LiberationPrinciple) -> float:
        """Declared sub-score for one principle."""
        return getattr(self, principle.value)

    def weighted(self, weights: Mapping[LiberationPrinciple, float]) -> float:
        """Sub-scores combined with the given principle weights."""
        overall = sum(weights[p] * self.score_for(p) for p in LiberationPrinciple)
        return round(overall, 10)

    def overall_for(self, weights: Mapping[LiberationPrinciple, float]) -> float:
        """The declared overall score, or the sub-scores weighted with these weights."""
        if self.overall_declared:
            return self.overall_score
        return self.weighted(weights)

    def to_dict(self) -> Dict[str, Optional[float]]:
        result = {p.value: self.score_for(p) for p in LiberationPrinciple}
        # A derived overall score is left out so it is derived again on load
        result["overall_score"] = self.overall_score if self.overall_declared else None
        return result


    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LiberationImpact":
        owner = "liberation_impact"
        return cls(
            **{p.value: _require(data, p.value, owner) for p in LiberationPrinciple},
            overall_score=data.get("overall_score"),
        )


@dataclass(frozen=True)
class ContentImpact:
    """How a creator action affects the content's narrative and community."""
    narrative_control: float
    cultural_significance: float = 0.0
    community_resonance: float = 0.0
    liberation_messaging: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(
                self, f.name, clamp_fraction(getattr(self, f.name), f"content_impact.{f.name}")
            )

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContentImpact":
        return cls(
            narrative_control=_require(data, "narrative_control", "content_impact"),
            cultural_significance=data.get("cultural_significance", 0.0),
            community_resonance=data.get("community_resonance", 0.0),
            liberation_messaging=data.get("liberation_messaging", 0.0),
        )


@dataclass(frozen=True)
class NarrativeControl:
    """Which editorial levers the creator holds over their content."""
    creator_ownership: bool
    editing_rights: Tuple[str, ...] = ()
    distribution_control: bool = False
    contextual_framing: bool = False
    cultural_authenticity: float = 0.0

    def __post_init__(self):
        object.__setattr__(
            self, "editing_rights",
            _as_tuple(self.editing_rights, "narrative_control.editing_rights")
        )
        object.__setattr__(
            self, "cultural_authenticity",
            clamp_fraction(self.cultural_authenticity, "narrative_control.cultural_authenticity")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "creator_ownership": self.creator_ownership,
            "editing_rights": list(self.editing_rights),
            "distribution_control": self.distribution_control,
            "contextual_framing": self.contextual_framing,
            "cultural_authenticity": self.cultural_authenticity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NarrativeControl":
        return cls(
            creator_ownership=bool(_require(data, "creator_ownership", "narrative_control")),
            editing_rights=data.get("editing_rights", ()),
            distribution_control=bool(data.get("distribution_control", False)),
            contextual_framing=bool(data.get("contextual_framing", False)),
            cultural_authenticity=data.get("cultural_authenticity", 0.0),
        )


@dataclass(frozen=True)
class ConsentStatus:
    """
    Consent a creator has given for an action.

    ongoing consent lapses once it is older than the configured validity
    period; one-time consent never lapses.
    """
    explicit: bool
    informed: bool
    ongoing: bool
    withdrawable: bool
    consent_date: datetime
    consent_scope: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self, "consent_date", ensure_utc(self.consent_date, "consent_status.consent_date")
        )
        object.__setattr__(
            self, "consent_scope", _as_tuple(self.consent_scope, "consent_status.consent_scope")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "explicit": self.explicit,
            "informed": self.informed,
            "ongoing": self.ongoing,
            "withdrawable": self.withdrawable,
            "consent_date": self.consent_date.isoformat(),
            "consent_scope": list(self.consent_scope),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsentStatus":
        owner = "consent_status"
        return cls(
            explicit=bool(_require(data, "explicit", owner)),
            informed=bool(_require(data, "informed", owner)),
            ongoing=bool(_require(data, "ongoing", owner)),
            withdrawable=bool(_require(data, "withdrawable", owner)),
            consent_date=parse_datetime(_require(data, "consent_date", owner), "consent_date"),
            consent_scope=data.get("consent_scope", ()),
        )


# =============================================================================
# INPUT DESCRIPTORS
# =============================================================================


@dataclass(frozen=True)
class OperationDescriptor:
    """
    A proposed platform operation.

    liberation_impact may be omitted at construction, but the PolicyScorer
    rejects an operation without one.
    """
    description: str
    liberation_impact: Optional[LiberationImpact] = None
    economic_impact: Optional[EconomicImpact] = None
    affected_communities: Tuple[str, ...] = ()
    affected_creators: Tuple[str, ...] = ()
    required_permissions: Tuple[str, ...] = ()
    operation_id: str = ""
    operation_type: str = ""

    def __post_init__(self):
        if not isinstance(self.description, str):
            raise ValidationError("Description must be a string", field="description",
                                  subject_id=self.operation_id or None)
        for name in ("affected_communities", "affected_creators", "required_permissions"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name), name))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation_id": self.operation_id,
            "operation_type": self.operation_type,
            "description": self.description,
            "affected_communities": list(self.affected_communities),
            "affected_creators": list(self.affected_creators),
            "economic_impact": self.economic_impact.to_dict() if self.economic_impact else None,
            "liberation_impact": self.liberation_impact.to_dict() if self.liberation_impact else None,
            "required_permissions": list(self.required_permissions),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OperationDescriptor":
        economic = data.get("economic_impact")
        liberation = data.get("liberation_impact")
        return cls(
            description=_require(data, "description", "operation"),
            liberation_impact=LiberationImpact.from_dict(liberation) if liberation else None,
            economic_impact=EconomicImpact.from_dict(economic) if economic else None,
            affected_communities=data.get("affected_communities", ()),
            affected_creators=data.get("affected_creators", ()),
            required_permissions=data.get("required_permissions", ()),
            operation_id=data.get("operation_id", ""),
            operation_type=data.get("operation_type", ""),
        )


@dataclass(frozen=True)
class CreatorActionDescriptor:
    """An action taken on a creator's content or revenue."""
    creator_id: str
    content_impact: ContentImpact
    economic_impact: EconomicImpact
    narrative_control: NarrativeControl
    consent_status: ConsentStatus
    action_id: str = ""
    action_type: str = ""

    def __post_init__(self):
        required = {
            "content_impact": ContentImpact,
            "economic_impact": EconomicImpact,
            "narrative_control": NarrativeControl,
            "consent_status": ConsentStatus,
        }
        for name, expected in required.items():
            if not isinstance(getattr(self, name), expected):
                raise ValidationError(
                    f"Creator action requires a {expected.__name__}",
                    field=name, subject_id=self.action_id or None
                )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_id": self.action_id,
            "action_type": self.action_type,
            "creator_id": self.creator_id,
            "content_impact": self.content_impact.to_dict(),
            "economic_impact": self.economic_impact.to_dict(),
            "narrative_control": self.narrative_control.to_dict(),
            "consent_status": self.consent_status.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CreatorActionDescriptor":
        owner = "creator_action"
        return cls(
            creator_id=_require(data, "creator_id", owner),
            content_impact=ContentImpact.from_dict(_require(data, "content_impact", owner)),
            economic_impact=EconomicImpact.from_dict(_require(data, "economic_impact", owner)),
            narrative_control=NarrativeControl.from_dict(_require(data, "narrative_control", owner)),
            consent_status=ConsentStatus.from_dict(_require(data, "consent_status", owner)),
            action_id=data.get("action_id", ""),
            action_type=data.get("action_type", ""),
        )


@dataclass(frozen=True)
class CommunityDataDescriptor:
    """
    A data access or processing request over community data.

    obtained_consent lists the consent scopes already recorded for the data,
    as supplied by the caller's consent tracking.
    """
    data_type: str
    sensitivity: SensitivityTier
    creator_ids: Tuple[str, ...] = ()
    community_ids: Tuple[str, ...] = ()
    consent_required: bool = False
    obtained_consent: Tuple[str, ...] = ()
    data_id: str = ""

    def __post_init__(self):
        sensitivity = self.sensitivity
        if not isinstance(sensitivity, SensitivityTier):
            try:
                sensitivity = SensitivityTier(sensitivity)
            except ValueError:
                raise ValidationError(
                    f"Unknown sensitivity tier '{sensitivity}'",
                    field="sensitivity", subject_id=self.data_id or None
                ) from None
            object.__setattr__(self, "sensitivity", sensitivity)
        for name in ("creator_ids", "community_ids", "obtained_consent"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name), name))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_id": self.data_id,
            "data_type": self.data_type,
            "sensitivity": self.sensitivity.value,
            "creator_ids": list(self.creator_ids),
            "community_ids": list(self.community_ids),
            "consent_required": self.consent_required,
            "obtained_consent": list(self.obtained_consent),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CommunityDataDescriptor":
        return cls(
            data_type=_require(data, "data_type", "data"),
            sensitivity=_require(data, "sensitivity", "data"),
            creator_ids=data.get("creator_ids", ()),
            community_ids=data.get("community_ids", ()),
            consent_required=bool(data.get("consent_required", False)),
            obtained_consent=data.get("obtained_consent", ()),
            data_id=data.get("data_id", ""),
        )


@dataclass(frozen=True)
class ContentDescriptor:
    """A piece of content submitted for publication."""
    text: str
    tags: Tuple[str, ...] = ()
    creator_id: str = ""
    community_context: Tuple[str, ...] = ()
    content_id: str = ""
    content_type: str = ""

    def __post_init__(self):
        if self.text is None:
            object.__setattr__(self, "text", "")
        elif not isinstance(self.text, str):
            raise ValidationError("Content text must be a string", field="text",
                                  subject_id=self.content_id or None)
        for name in ("tags", "community_context"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name), name))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content_id": self.content_id,
            "content_type": self.content_type,
            "text": self.text,
            "tags": list(self.tags),
            "creator_id": self.creator_id,
            "community_context": list(self.community_context),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContentDescriptor":
        return cls(
            text=data.get("text") or "",
            tags=data.get("tags", ()),
            creator_id=data.get("creator_id", ""),
            community_context=data.get("community_context", ()),
            content_id=data.get("content_id", ""),
            content_type=data.get("content_type", ""),
        )


# =============================================================================
# EVALUATOR VERDICTS
# =============================================================================


@dataclass(frozen=True)
class LiberationValidation:
    """
    PolicyScorer verdict.

    principle_scores are the final per-principle scores;
    signal_scores are the heuristic evidence scores before the declared
    sub-scores were taken into account.
    """
    valid: bool
    score: float
    principle_scores: Mapping[LiberationPrinciple, float] = field(hash=False)
    passed_principles: Tuple[LiberationPrinciple, ...]
    failed_principles: Tuple[LiberationPrinciple, ...]
    feedback: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    liberation_threshold: float
    signal_scores: Mapping[LiberationPrinciple, float] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "principle_scores", freeze_mapping(self.principle_scores))
        object.__setattr__(self, "signal_scores", freeze_mapping(self.signal_scores))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "score": self.score,
            "principle_scores": {p.value: s for p, s in self.principle_scores.items()},
            "signal_scores": {p.value: s for p, s in self.signal_scores.items()},
            "passed_principles": [p.value for p in self.passed_principles],
            "failed_principles": [p.value for p in self.failed_principles],
            "feedback": list(self.feedback),
            "recommendations": list(self.recommendations),
            "liberation_threshold": self.liberation_threshold,
        }


@dataclass(frozen=True)
class SovereigntyDecision:
    """SovereigntyAssessor verdict for one creator action."""
    approved: bool
    revenue_share_compliant: bool
    narrative_control_maintained: bool
    creator_consent_obtained: bool
    minimum_revenue_share: float
    actual_revenue_share: float
    narrative_control_score: float
    consent_score: float
    consent_type: str
    missing_consent: Tuple[str, ...]
    required_actions: Tuple[str, ...]
    findings: Tuple[str, ...]
    creator_id: str = ""

    @classmethod
    def not_applicable(cls, minimum_revenue_share: float) -> "SovereigntyDecision":
        """Permissive verdict used when a request carries no creator action."""
        return cls(
            approved=True,
            revenue_share_compliant=True,
            narrative_control_maintained=True,
            creator_consent_obtained=True,
            minimum_revenue_share=minimum_revenue_share,
            actual_revenue_share=1.0,
            narrative_control_score=1.0,
            consent_score=1.0,
            consent_type="not_applicable",
            missing_consent=(),
            required_actions=(),
            findings=("No creator action supplied; sovereignty check not applicable",),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "approved": self.approved,
            "creator_id": self.creator_id,
            "revenue_share_compliant": self.revenue_share_compliant,
            "narrative_control_maintained": self.narrative_control_maintained,
            "creator_consent_obtained": self.creator_consent_obtained,
            "minimum_revenue_share": self.minimum_revenue_share,
            "actual_revenue_share": self.actual_revenue_share,
            "narrative_control_score": self.narrative_control_score,
            "consent_score": self.consent_score,
            "consent_type": self.consent_type,
            "missing_consent": list(self.missing_consent),
            "required_actions": list(self.required_actions),
            "findings": list(self.findings),
        }


@dataclass(frozen=True)
class ConsentValidation:
    """ConsentValidator verdict for one community data request."""
    approved: bool
    consent_type: str
    consent_level: float
    required_consent: Tuple[str, ...]
    obtained_consent: Tuple[str, ...]
    missing_consent: Tuple[str, ...]
    findings: Tuple[str, ...]
    consent_expiry_date: Optional[datetime] = None

    @classmethod
    def not_applicable(cls) -> "ConsentValidation":
        """Permissive verdict used when a request touches no community data."""
        return cls(
            approved=True,
            consent_type="community_standard",
            consent_level=1.0,
            required_consent=(),
            obtained_consent=(),
            missing_consent=(),
            findings=("No community data involved; consent check not applicable",),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "approved": self.approved,
            "consent_type": self.consent_type,
            "consent_level": self.consent_level,
            "required_consent": list(self.required_consent),
            "obtained_consent": list(self.obtained_consent),
            "missing_consent": list(self.missing_consent),
            "consent_expiry_date": (
                self.consent_expiry_date.isoformat() if self.consent_expiry_date else None
            ),
            "findings": list(self.findings),
        }


@dataclass(frozen=True)
class OppressionCheck:
    """ContentSafetyDetector verdict for one piece of content."""
    safe: bool
    detected_categories: Tuple[HarmCategory, ...]
    severity: Severity
    confidence: float
    automatic_rejection: bool
    recommendations: Tuple[str, ...]
    findings: Tuple[str, ...]
    matched_signals: Mapping[HarmCategory, Tuple[str, ...]] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(
            self, "matched_signals",
            freeze_mapping({c: tuple(s) for c, s in (self.matched_signals or {}).items()})
        )

    @classmethod
    def not_applicable(cls) -> "OppressionCheck":
        """Permissive verdict used when a request carries no content."""
        return cls(
            safe=True,
            detected_categories=(),
            severity=Severity.LOW,
            confidence=0.0,
            automatic_rejection=False,
            recommendations=(),
            findings=("No content supplied; content safety check not applicable",),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "safe": self.safe,
            "detected_categories": [c.value for c in self.detected_categories],
            "severity": self.severity.value,
            "confidence": self.confidence,
            "automatic_rejection": self.automatic_rejection,
            "recommendations": list(self.recommendations),
            "findings": list(self.findings),
            "matched_signals": {c.value: list(s) for c, s in self.matched_signals.items()},
        }


# =============================================================================
# REQUEST / DECISION
# =============================================================================


@dataclass(frozen=True)
class GovernanceRequest:
    """
    One request to the decision engine.

    The operation is always scored. Each optional part switches on the
    matching evaluator.
    """
    operation: OperationDescriptor
    creator_action: Optional[CreatorActionDescriptor] = None
    data: Optional[CommunityDataDescriptor] = None
    content: Optional[ContentDescriptor] = None
    proposal: Optional["CommunityProposal"] = None
    request_id: str = ""
    request_type: Optional[GovernanceDecisionType] = None
    requester_id: str = ""

    def __post_init__(self):
        if not isinstance(self.operation, OperationDescriptor):
            raise ValidationError("Request requires an operation", field="operation",
                                  subject_id=self.request_id or None)
        if self.request_type is not None and not isinstance(self.request_type, GovernanceDecisionType):
            try:
                object.__setattr__(self, "request_type", GovernanceDecisionType(self.request_type))
            except ValueError:
                raise ValidationError(
                    f"Unknown request type '{self.request_type}'",
                    field="request_type", subject_id=self.request_id or None
                ) from None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "request_type": self.request_type.value if self.request_type else None,
            "requester_id": self.requester_id,
            "operation": self.operation.to_dict(),
            "creator_action": self.creator_action.to_dict() if self.creator_action else None,
            "data": self.data.to_dict() if self.data else None,
            "content": self.content.to_dict() if self.content else None,
            "proposal": self.proposal.to_dict() if self.proposal else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GovernanceRequest":
        """
        Build a request from a JSON-style mapping.

        Missing required fields raise ValidationError.
        """
        from proposals.models import CommunityProposal

        creator_action = data.get("creator_action")
        community_data = data.get("data")
        content = data.get("content")
        proposal = data.get("proposal")
        return cls(
            operation=OperationDescriptor.from_dict(_require(data, "operation", "request")),
            creator_action=(
                CreatorActionDescriptor.from_dict(creator_action) if creator_action else None
            ),
            data=CommunityDataDescriptor.from_dict(community_data) if community_data else None,
            content=ContentDescriptor.from_dict(content) if content else None,
            proposal=CommunityProposal.from_dict(proposal) if proposal else None,
            request_id=data.get("request_id", ""),
            request_type=data.get("request_type"),
            requester_id=data.get("requester_id", ""),
        )


@dataclass(frozen=True)
class DecisionReason:
    """One human-readable line of a decision's explanation."""
    reason_type: str  # "summary", "approval" or "rejection"
    source: str  # evaluator name
    explanation: str
    evidence: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "evidence", _as_tuple(self.evidence, "evidence"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reason_type": self.reason_type,
            "source": self.source,
            "explanation": self.explanation,
            "evidence": list(self.evidence),
        }


@dataclass(frozen=True)
class GovernanceDecision:
    """
    Final, immutable decision for one GovernanceRequest.

    GOVERNANCE:
    - reasons is NEVER empty, also on full approval
    - requires_storage is HARDCODED: every decision must be handed to a
      DecisionStore by the caller; the engine never persists it
    """
    decision_id: str
    approved: bool
    timestamp: datetime
    decision_type: GovernanceDecisionType
    liberation: LiberationValidation
    sovereignty: SovereigntyDecision
    consent: ConsentValidation
    safety: OppressionCheck
    reasons: Tuple[DecisionReason, ...]
    required_actions: Tuple[str, ...] = ()
    appealable: bool = False
    appeal_deadline: Optional[datetime] = None
    vote: Optional["VoteResult"] = None
    request_id: str = ""
    rules_version: str = ""

    requires_storage: bool = field(default=True, init=False)

    def __post_init__(self):
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        if self.appeal_deadline is not None:
            object.__setattr__(
                self, "appeal_deadline", ensure_utc(self.appeal_deadline, "appeal_deadline")
            )
        object.__setattr__(self, "reasons", _as_tuple(self.reasons, "reasons"))
        object.__setattr__(
            self, "required_actions", _as_tuple(self.required_actions, "required_actions")
        )
        if not self.reasons:
            raise ValidationError(
                "A governance decision must carry at least one reason",
                field="reasons", subject_id=self.decision_id
            )

    @property
    def reason_lines(self) -> Tuple[str, ...]:
        """Flat explanations, one per reason."""
        return tuple(reason.explanation for reason in self.reasons)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decision_id": self.decision_id,
            "request_id": self.request_id,
            "approved": self.approved,
            "timestamp": self.timestamp.isoformat(),
            "decision_type": self.decision_type.value,
            "rules_version": self.rules_version,
            "liberation": self.liberation.to_dict(),
            "sovereignty": self.sovereignty.to_dict(),
            "consent": self.consent.to_dict(),
            "safety": self.safety.to_dict(),
            "vote": self.vote.to_dict() if self.vote else None,
            "reasons": [reason.to_dict() for reason in self.reasons],
            "required_actions": list(self.required_actions),
            "appealable": self.appealable,
            "appeal_deadline": self.appeal_deadline.isoformat() if self.appeal_deadline else None,
            "requires_storage": self.requires_storage,
        }


@dataclass(frozen=True)
class GovernanceIssue:
    """
    A problem found when validating a decision or a rule change.

    blocks_approval marks issues that must be resolved before the decision
    or rule change may stand.
    """
    code: str
    issue_type: str
    severity: IssueSeverity
    message: str
    suggested_fix: Tuple[str, ...] = ()
    blocks_approval: bool = True

    def __post_init__(self):
        object.__setattr__(self, "suggested_fix", _as_tuple(self.suggested_fix, "suggested_fix"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "issue_type": self.issue_type,
            "severity": self.severity.value,
            "message": self.message,
            "suggested_fix": list(self.suggested_fix),
            "blocks_approval": self.blocks_approval,
        }
