# =============================================================================
# GOVERNANCE DECISION ENGINE
# Module: core/sovereignty_assessor.py
# Purpose: Check a creator action against the creator sovereignty minimums
# =============================================================================
#
# THREE INDEPENDENT CHECKS (all must pass):
# 1. Revenue share:      creator_revenue_share >= minimum_revenue_share (0.75)
# 2. Narrative control:  content_impact.narrative_control >= 0.80
# 3. Creator consent:    consent_score >= 0.90 AND nothing missing
#
# CONSENT SCORE:
#   total_required = 4 flags + len(required scope)
#   consent_score  = max(0, (total_required - total_missing) / total_required)
#
# Required scope grows with the action: revenue scopes when the creator is
# paid, cultural scopes for culturally significant content, liberation
# scopes for political messaging, narrative scopes when the creator owns
# the narrative.
#
# THIS MODULE DOES NOT:
# - Move money
# - Enforce editorial rights
# - Record consent
#
# =============================================================================

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from models.data_models import (
    CreatorActionDescriptor,
    SovereigntyDecision,
    ensure_utc,
    utc_now,
)
from shared.exceptions import ValidationError
from shared.rules_config import GovernanceRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _CheckOutcome:
    """Result of one sovereignty sub-check."""
    approved: bool
    score: float
    recommendations: Tuple[str, ...]
    finding: str


@dataclass(frozen=True)
class MultiCreatorAssessment:
    """Sovereignty verdicts for every creator touched by one operation."""
    overall_compliant: bool
    decisions: Tuple[SovereigntyDecision, ...]
    conflicting_requirements: Tuple[str, ...]

    def decision_for(self, creator_id: str) -> Tuple[SovereigntyDecision, ...]:
        return tuple(d for d in self.decisions if d.creator_id == creator_id)

    def to_dict(self) -> Dict:
        return {
            "overall_compliant": self.overall_compliant,
            "decisions": [d.to_dict() for d in self.decisions],
            "conflicting_requirements": list(self.conflicting_requirements),
        }


@dataclass(frozen=True)
class SovereigntyRoadmap:
    """Improvement plan derived from a SovereigntyDecision."""
    immediate_actions: Tuple[str, ...]
    short_term_actions: Tuple[str, ...]
    long_term_actions: Tuple[str, ...]

    def to_dict(self) -> Dict:
        return {
            "immediate_actions": list(self.immediate_actions),
            "short_term_actions": list(self.short_term_actions),
            "long_term_actions": list(self.long_term_actions),
        }


class SovereigntyAssessor:
    """
    Assesses creator sovereignty for individual creator actions.

    Pure function of (action, rules, clock). The clock only matters for
    consent expiry.
    """

    BASE_SCOPES = ("content_creation", "content_distribution", "content_monetization")
    REVENUE_SCOPES = ("revenue_sharing", "economic_terms")
    CULTURAL_SCOPES = ("cultural_representation", "community_impact")
    LIBERATION_SCOPES = ("liberation_alignment", "political_messaging")
    NARRATIVE_SCOPES = ("narrative_ownership", "editorial_control")

    CONSENT_FLAGS = (
        ("explicit", "explicit_consent"),
        ("informed", "informed_consent"),
        ("ongoing", "ongoing_consent"),
        ("withdrawable", "withdrawable_consent"),
    )
    CONSENT_RENEWAL = "consent_renewal"

    # Consent type classification
    ENHANCED_CONSENT_LEVEL = 0.8
    POLITICAL_CONSENT_LEVEL = 0.7

    FOLLOW_UP_ACTIONS = (
        "Schedule creator sovereignty compliance review",
        "Update creator agreements to reflect sovereignty requirements",
    )

    def __init__(
        self,
        rules: Optional[GovernanceRules] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            rules: Governance rules (defaults to the documented defaults)
            clock: Returns the current time (defaults to UTC now)
        """
        self.rules = rules or GovernanceRules()
        self.clock = clock or utc_now

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def assess(self, action: CreatorActionDescriptor) -> SovereigntyDecision:
        """
        Assess one creator action.

        Args:
            action: The creator action

        Returns:
            SovereigntyDecision with the three sub-verdicts and every
            remediation step needed to reach compliance
        """
        if not isinstance(action, CreatorActionDescriptor):
            raise ValidationError(
                f"Expected a CreatorActionDescriptor, got {type(action).__name__}",
                field="creator_action"
            )

        revenue = self._check_revenue_share(action)
        narrative = self._check_narrative_control(action)
        consent, missing = self._check_consent(action)

        approved = revenue.approved and narrative.approved and consent.approved
        required_actions = self._compile_required_actions((revenue, narrative, consent))

        if not approved:
            logger.info(
                f"Creator action {action.action_id or '<unnamed>'} for {action.creator_id} "
                f"fails sovereignty: revenue={revenue.approved} "
                f"narrative={narrative.approved} consent={consent.approved}"
            )

        return SovereigntyDecision(
            approved=approved,
            revenue_share_compliant=revenue.approved,
            narrative_control_maintained=narrative.approved,
            creator_consent_obtained=consent.approved,
            minimum_revenue_share=self.rules.sovereignty.minimum_revenue_share,
            actual_revenue_share=action.economic_impact.creator_revenue_share,
            narrative_control_score=narrative.score,
            consent_score=consent.score,
            consent_type=self.consent_type(action),
            missing_consent=missing,
            required_actions=required_actions,
            findings=(revenue.finding, narrative.finding, consent.finding),
            creator_id=action.creator_id,
        )

    def assess_many(self, actions: Sequence[CreatorActionDescriptor]) -> MultiCreatorAssessment:
        """
        Assess every creator action of one operation.

        A creator with both compliant and non-compliant actions is reported
        as a conflicting requirement.
        """
        decisions = tuple(self.assess(action) for action in actions)

        verdicts: Dict[str, set] = {}
        for decision in decisions:
            verdicts.setdefault(decision.creator_id, set()).add(decision.approved)

        conflicts = tuple(
            f"Conflicting sovereignty verdicts for creator {creator_id}"
            for creator_id, seen in verdicts.items()
            if len(seen) > 1
        )

        overall = all(d.approved for d in decisions) and not conflicts
        return MultiCreatorAssessment(
            overall_compliant=overall,
            decisions=decisions,
            conflicting_requirements=conflicts,
        )

    def required_scope(self, action: CreatorActionDescriptor) -> Tuple[str, ...]:
        """Consent scopes this action needs."""
        sovereignty = self.rules.sovereignty
        scope: List[str] = list(self.BASE_SCOPES)

        if action.economic_impact.creator_revenue_share > 0:
            scope.extend(self.REVENUE_SCOPES)
        if action.content_impact.cultural_significance >= sovereignty.cultural_scope_threshold:
            scope.extend(self.CULTURAL_SCOPES)
        if action.content_impact.liberation_messaging >= sovereignty.liberation_scope_threshold:
            scope.extend(self.LIBERATION_SCOPES)
        if action.narrative_control.creator_ownership:
            scope.extend(self.NARRATIVE_SCOPES)

        return tuple(scope)

    def is_consent_expired(self, action: CreatorActionDescriptor) -> bool:
        """Ongoing consent lapses after the validity period. One-time consent never does."""
        status = action.consent_status
        if not status.ongoing:
            return False
        validity = timedelta(days=self.rules.sovereignty.consent_validity_days)
        return ensure_utc(self.clock()) - status.consent_date > validity

    def consent_type(self, action: CreatorActionDescriptor) -> str:
        """Kind of consent the action calls for."""
        content = action.content_impact
        creator_share = action.economic_impact.creator_revenue_share
        if (content.cultural_significance >= self.ENHANCED_CONSENT_LEVEL
                or creator_share >= self.ENHANCED_CONSENT_LEVEL):
            return "enhanced_explicit"
        if content.liberation_messaging >= self.POLITICAL_CONSENT_LEVEL:
            return "political_explicit"
        if creator_share > 0:
            return "economic_explicit"
        return "standard_explicit"

    def priority_score(self, decision: SovereigntyDecision) -> float:
        """
        Prioritisation score in [0, 1].

        40% revenue share relative to the minimum, 30% narrative control,
        30% consent.
        """
        score = 0.0
        if decision.actual_revenue_share and decision.minimum_revenue_share:
            score += (decision.actual_revenue_share / decision.minimum_revenue_share) * 0.4
        score += decision.narrative_control_score * 0.3
        score += decision.consent_score * 0.3
        return round(min(score, 1.0), 10)

    def roadmap(self, decision: SovereigntyDecision) -> SovereigntyRoadmap:
        """Group the work needed (or possible) after a sovereignty decision."""
        minimum = f"{decision.minimum_revenue_share:.0%}"
        immediate: List[str] = []
        short_term: List[str] = []
        long_term: List[str] = []

        if not decision.revenue_share_compliant:
            immediate.append(f"Adjust revenue sharing to meet {minimum} minimum")
            immediate.append("Review platform operational costs")

        if not decision.narrative_control_maintained:
            short_term.append("Implement enhanced creator editorial controls")
            short_term.append("Update content management systems")

        if not decision.creator_consent_obtained:
            immediate.append("Obtain required creator consent")
            short_term.append("Implement ongoing consent tracking system")

        if decision.approved:
            long_term.append(f"Explore increasing creator revenue share beyond {minimum}")
            long_term.append("Implement creator governance participation")
            long_term.append("Develop creator sovereignty metrics dashboard")

        return SovereigntyRoadmap(
            immediate_actions=tuple(immediate),
            short_term_actions=tuple(short_term),
            long_term_actions=tuple(long_term),
        )

    # =========================================================================
    # SUB-CHECKS
    # =========================================================================

    def _check_revenue_share(self, action: CreatorActionDescriptor) -> _CheckOutcome:
        sovereignty = self.rules.sovereignty
        economic = action.economic_impact
        share = economic.creator_revenue_share
        minimum = sovereignty.minimum_revenue_share
        approved = share >= minimum
        recommendations: List[str] = []

        if not approved:
            deficit = minimum - share
            recommendations.append(
                f"Increase creator revenue share by {deficit:.0%} to meet {minimum:.0%} minimum"
            )
            recommendations.append("Reduce platform operational costs to enable higher creator share")
            recommendations.append("Consider community fundraising to subsidize creator payments")

        if share < sovereignty.advisory_revenue_share:
            recommendations.append(
                f"Consider increasing to {sovereignty.advisory_revenue_share:.0%} share "
                f"for enhanced creator sovereignty"
            )

        if economic.platform_costs > share * sovereignty.max_platform_cost_ratio:
            recommendations.append(
                f"Platform costs should not exceed {sovereignty.max_platform_cost_ratio:.0%} "
                f"of creator revenue"
            )

        if economic.liberation_investment > 0 and share < sovereignty.advisory_revenue_share:
            recommendations.append(
                "Liberation investment should come from platform/community share, not creator share"
            )

        if approved:
            finding = f"Creator revenue share {share:.0%} meets the {minimum:.0%} minimum"
        else:
            finding = f"Creator revenue share {share:.0%} is below the {minimum:.0%} minimum"

        return _CheckOutcome(approved, share, tuple(recommendations), finding)

    def _check_narrative_control(self, action: CreatorActionDescriptor) -> _CheckOutcome:
        sovereignty = self.rules.sovereignty
        level = action.content_impact.narrative_control
        minimum = sovereignty.minimum_narrative_control
        controls = action.narrative_control
        approved = level >= minimum
        recommendations: List[str] = []

        if not approved:
            deficit = minimum - level
            recommendations.append(
                f"Increase creator narrative control by {deficit:.0%} to meet {minimum:.0%} minimum"
            )

        if not controls.editing_rights:
            recommendations.append("Provide creators with final edit approval rights")
            recommendations.append("Limit platform editorial changes without creator consent")

        if not controls.contextual_framing:
            recommendations.append("Ensure creators control how their content is contextualized")
            recommendations.append("Prevent content misrepresentation through platform framing")

        if not controls.distribution_control:
            recommendations.append("Give creators control over content distribution channels")
            recommendations.append("Allow creators to restrict or approve content usage")

        if (action.content_impact.cultural_significance >= sovereignty.cultural_scope_threshold
                and level < sovereignty.enhanced_control_level):
            recommendations.append(
                f"High cultural significance content requires enhanced creator control "
                f"({sovereignty.enhanced_control_level:.0%}+)"
            )

        if approved:
            finding = f"Creator narrative control {level:.0%} meets the {minimum:.0%} minimum"
        else:
            finding = f"Creator narrative control {level:.0%} is below the {minimum:.0%} minimum"

        return _CheckOutcome(approved, level, tuple(recommendations), finding)

    def _check_consent(self, action: CreatorActionDescriptor) -> Tuple[_CheckOutcome, Tuple[str, ...]]:
        status = action.consent_status
        missing: List[str] = [
            name for attribute, name in self.CONSENT_FLAGS
            if not getattr(status, attribute)
        ]

        scope = self.required_scope(action)
        missing.extend(s for s in scope if s not in status.consent_scope)

        expired = self.is_consent_expired(action)
        if expired:
            missing.append(self.CONSENT_RENEWAL)

        total_required = len(self.CONSENT_FLAGS) + len(scope)
        score = round(max(0.0, (total_required - len(missing)) / total_required), 10)
        approved = score >= self.rules.sovereignty.minimum_consent_level and not missing

        recommendations: List[str] = []
        for item in missing:
            if item == self.CONSENT_RENEWAL:
                recommendations.append(
                    f"Renew ongoing creator consent (older than "
                    f"{self.rules.sovereignty.consent_validity_days} days)"
                )
            else:
                recommendations.append(f"Obtain creator consent: {item}")

        if approved:
            finding = f"Creator consent complete ({score:.0%})"
        else:
            finding = f"Creator consent incomplete ({score:.0%}), missing: {', '.join(missing)}"

        return _CheckOutcome(approved, score, tuple(recommendations), finding), tuple(missing)

    def _compile_required_actions(self, outcomes: Sequence[_CheckOutcome]) -> Tuple[str, ...]:
        """Remediation of failing checks, deduplicated in order, plus follow-ups."""
        actions: List[str] = []
        for outcome in outcomes:
            if outcome.approved:
                continue
            for recommendation in outcome.recommendations:
                if recommendation not in actions:
                    actions.append(recommendation)

        if any(not outcome.approved for outcome in outcomes):
            actions.extend(a for a in self.FOLLOW_UP_ACTIONS if a not in actions)

        return tuple(actions)
