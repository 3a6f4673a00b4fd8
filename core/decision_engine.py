# =============================================================================
# GOVERNANCE DECISION ENGINE
# Module: core/decision_engine.py
# Purpose: Combine all evaluator verdicts into one GovernanceDecision
# =============================================================================
#
# DECISION LOGIC:
# This is the final gatekeeper. A request is APPROVED only if ALL apply:
# 1. Liberation principles valid        (PolicyScorer, always run)
# 2. Creator sovereignty approved       (only if a creator action is given)
# 3. Community consent approved         (only if community data is given)
# 4. Content safe                       (only if content is given)
# 5. Proposal approved for voting       (only if a proposal is given)
#
# Evaluators that have no input contribute a permissive default verdict.
# A single failure results in rejection.
#
# APPEALS:
# A rejection is appealable when the liberation score is borderline
# ([0.60, 0.70)) and content safety did not reject automatically.
# The appeal window is 30 days from the decision.
#
# CONCURRENCY:
# Evaluators are awaited uniformly (sync or async implementations) and run
# together with asyncio.gather. Collaborator failures propagate untouched.
#
# THIS MODULE DOES NOT:
# - Persist decisions (DecisionStore is the caller's job)
# - Enforce decisions (publish, pay, block)
# - Keep any state between requests
#
# =============================================================================

import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from core.consent_validator import ConsentValidator
from core.content_classifier import ContentClassifier
from core.content_safety import ContentSafetyDetector
from core.policy_scorer import PolicyScorer
from core.sovereignty_assessor import SovereigntyAssessor
from models.data_models import (
    ConsentValidation,
    DecisionReason,
    GovernanceDecision,
    GovernanceIssue,
    GovernanceRequest,
    LiberationValidation,
    OppressionCheck,
    SovereigntyDecision,
    ensure_utc,
    utc_now,
)
from proposals.governor import ProposalGovernor, decision_type_for
from proposals.member_registry import MemberRegistry
from proposals.models import VoteResult
from shared.awaitables import resolve
from shared.enums import GovernanceDecisionType, IssueSeverity
from shared.exceptions import ValidationError
from shared.logging_config import AuditLogger
from shared.rules_config import GovernanceRules, RuleSource

logger = logging.getLogger(__name__)


def generate_decision_id(timestamp: Optional[datetime] = None) -> str:
    """
    Generate a unique decision ID.

    Format: GOV-{date}-{short_uuid}
    Example: GOV-20260115-a1b2c3d4
    """
    date_part = (timestamp or utc_now()).strftime("%Y%m%d")
    uuid_part = uuid.uuid4().hex[:8]
    return f"GOV-{date_part}-{uuid_part}"


class DecisionEngine:
    """
    Makes the final governance decision for a request.

    DESIGN PRINCIPLE:
    Every evaluator receives its rules and dependencies at construction.
    decide() is a single evaluate-and-return; nothing is remembered.
    """

    # =========================================================================
    # CRITERIA NAMES (for reporting)
    # =========================================================================

    CRITERION_LIBERATION = "liberation_principles"
    CRITERION_SOVEREIGNTY = "creator_sovereignty"
    CRITERION_CONSENT = "community_consent"
    CRITERION_SAFETY = "anti_oppression"
    CRITERION_VOTE = "community_vote"

    CRITERION_LABELS = {
        CRITERION_LIBERATION: "liberation principles",
        CRITERION_SOVEREIGNTY: "creator sovereignty",
        CRITERION_CONSENT: "community consent",
        CRITERION_SAFETY: "content safety",
        CRITERION_VOTE: "proposal validation",
    }

    def __init__(
        self,
        rules: Optional[GovernanceRules] = None,
        policy_scorer: Optional[Any] = None,
        sovereignty_assessor: Optional[Any] = None,
        consent_validator: Optional[Any] = None,
        safety_detector: Optional[Any] = None,
        proposal_governor: Optional[Any] = None,
        registry: Optional[MemberRegistry] = None,
        classifier: Optional[ContentClassifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the decision engine.

        Any evaluator may be replaced by an object with the same method
        (score / assess / validate / check / govern), sync or async.

        Args:
            rules: Governance rules (defaults to the documented defaults)
            policy_scorer: Liberation principle scorer
            sovereignty_assessor: Creator sovereignty assessor
            consent_validator: Community consent validator
            safety_detector: Content safety detector
            proposal_governor: Proposal governor
            registry: Member registry for the default proposal governor
            classifier: Content classifier for the default safety detector
            clock: Returns the current time (defaults to UTC now)
            id_factory: Returns a new decision ID
            audit_logger: Emits one audit record per decision
        """
        self.rules = rules or GovernanceRules()
        self.clock = clock or utc_now
        self.id_factory = id_factory or (lambda: generate_decision_id(self.clock()))
        self.audit_logger = audit_logger or AuditLogger()

        self.policy_scorer = policy_scorer or PolicyScorer(self.rules)
        self.sovereignty_assessor = sovereignty_assessor or SovereigntyAssessor(
            self.rules, clock=self.clock
        )
        self.consent_validator = consent_validator or ConsentValidator(
            self.rules, clock=self.clock
        )
        self.safety_detector = safety_detector or ContentSafetyDetector(
            self.rules, classifier=classifier
        )
        self.proposal_governor = proposal_governor or ProposalGovernor(
            self.rules, scorer=self.policy_scorer, registry=registry, clock=self.clock
        )

    @classmethod
    def from_source(cls, source: RuleSource, **kwargs) -> "DecisionEngine":
        """
        Build an engine from a rule source.

        Raises:
            ConfigurationError: the rules are inconsistent
        """
        return cls(rules=source.load(), **kwargs)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def decide(self, request: GovernanceRequest) -> GovernanceDecision:
        """
        Make the governance decision for one request.

        PROCESS:
        1. Run every applicable evaluator
        2. Evaluate all criteria (AND)
        3. Compile reasons and required actions
        4. Determine appeal eligibility
        5. Emit the audit record

        Args:
            request: The governance request

        Returns:
            GovernanceDecision (never persisted here)

        Raises:
            ValidationError: malformed request
            CollaboratorFailure: a collaborator failed
        """
        if not isinstance(request, GovernanceRequest):
            raise ValidationError(
                f"Expected a GovernanceRequest, got {type(request).__name__}",
                field="request"
            )

        now = ensure_utc(self.clock())

        # ---------------------------------------------------------------------
        # STEP 1: Run evaluators
        # ---------------------------------------------------------------------
        liberation, sovereignty, consent, safety, vote = await asyncio.gather(
            self._evaluate(self.policy_scorer.score, request.operation, None),
            self._evaluate(
                self.sovereignty_assessor.assess, request.creator_action,
                SovereigntyDecision.not_applicable(self.rules.sovereignty.minimum_revenue_share)
            ),
            self._evaluate(
                self.consent_validator.validate, request.data,
                ConsentValidation.not_applicable()
            ),
            self._evaluate(
                self.safety_detector.check, request.content,
                OppressionCheck.not_applicable()
            ),
            self._evaluate(self.proposal_governor.govern, request.proposal, None),
        )

        # ---------------------------------------------------------------------
        # STEP 2: Evaluate all criteria
        # ---------------------------------------------------------------------
        criteria_met: Dict[str, bool] = {
            self.CRITERION_LIBERATION: liberation.valid,
            self.CRITERION_SOVEREIGNTY: sovereignty.approved,
            self.CRITERION_CONSENT: consent.approved,
            self.CRITERION_SAFETY: safety.safe,
        }
        if vote is not None:
            criteria_met[self.CRITERION_VOTE] = vote.approved

        blocking_criteria = [c for c, passed in criteria_met.items() if not passed]
        approved = not blocking_criteria

        # ---------------------------------------------------------------------
        # STEP 3: Reasons and required actions
        # ---------------------------------------------------------------------
        reasons = self._build_reasons(
            criteria_met, blocking_criteria, liberation, sovereignty, consent, safety, vote
        )
        required_actions = self._build_required_actions(
            liberation, sovereignty, consent, safety, vote
        )

        # ---------------------------------------------------------------------
        # STEP 4: Appeal eligibility
        # ---------------------------------------------------------------------
        appealable = self._is_appealable(
            approved, liberation.score, safety.automatic_rejection
        )
        appeal_deadline = (
            now + timedelta(days=self.rules.appeals.window_days) if appealable else None
        )

        decision = GovernanceDecision(
            decision_id=self.id_factory(),
            approved=approved,
            timestamp=now,
            decision_type=request.request_type or self._infer_decision_type(request),
            liberation=liberation,
            sovereignty=sovereignty,
            consent=consent,
            safety=safety,
            reasons=reasons,
            required_actions=required_actions,
            appealable=appealable,
            appeal_deadline=appeal_deadline,
            vote=vote,
            request_id=request.request_id,
            rules_version=self.rules.version,
        )

        # ---------------------------------------------------------------------
        # STEP 5: Audit record
        # ---------------------------------------------------------------------
        logger.info(
            f"Decision {decision.decision_id} for request {request.request_id or '<unnamed>'}: "
            f"{'APPROVED' if approved else 'REJECTED'} "
            f"(blocking: {', '.join(blocking_criteria) or 'none'})"
        )
        self.audit_logger.log_decision(
            decision, request_data=request.to_dict(), rules_version=self.rules.version
        )

        return decision

    def validate_decision(self, decision: GovernanceDecision) -> List[GovernanceIssue]:
        """
        List every governance issue that stands in the way of a decision.

        Args:
            decision: A GovernanceDecision

        Returns:
            GovernanceIssues (empty when the decision is clean)
        """
        issues: List[GovernanceIssue] = []
        threshold = self.rules.liberation.validity_threshold

        if decision.liberation.score < threshold:
            issues.append(GovernanceIssue(
                code="LOW_LIBERATION_SCORE",
                issue_type="liberation_violation",
                severity=IssueSeverity.ERROR,
                message=(
                    f"Liberation score {decision.liberation.score:.2f} "
                    f"below required {threshold:.2f}"
                ),
                suggested_fix=("Improve liberation alignment", "Provide community justification"),
            ))

        if not decision.sovereignty.approved:
            issues.append(GovernanceIssue(
                code="SOVEREIGNTY_VIOLATION",
                issue_type="sovereignty_violation",
                severity=IssueSeverity.ERROR,
                message="Creator sovereignty requirements not met",
                suggested_fix=decision.sovereignty.required_actions,
            ))

        if not decision.consent.approved:
            issues.append(GovernanceIssue(
                code="CONSENT_INSUFFICIENT",
                issue_type="consent_violation",
                severity=IssueSeverity.ERROR,
                message=(
                    f"Community consent insufficient "
                    f"({decision.consent.consent_level:.0%})"
                ),
                suggested_fix=tuple(
                    f"Obtain {scope}" for scope in decision.consent.missing_consent
                ),
            ))

        if not decision.safety.safe:
            issues.append(GovernanceIssue(
                code="HARMFUL_CONTENT",
                issue_type="oppression_detected",
                severity=(
                    IssueSeverity.CRITICAL if decision.safety.automatic_rejection
                    else IssueSeverity.ERROR
                ),
                message=(
                    f"Harmful content detected "
                    f"({', '.join(c.value for c in decision.safety.detected_categories)})"
                ),
                suggested_fix=decision.safety.recommendations,
            ))

        if decision.vote is not None and not decision.vote.approved:
            issues.append(GovernanceIssue(
                code="PROPOSAL_INVALID",
                issue_type="democratic_process_violation",
                severity=IssueSeverity.ERROR,
                message=decision.vote.reason,
                suggested_fix=decision.vote.proposal_validation.required_improvements,
            ))

        if decision.approved and issues:
            issues.append(GovernanceIssue(
                code="INCONSISTENT_APPROVAL",
                issue_type="integrity_violation",
                severity=IssueSeverity.CRITICAL,
                message="Decision is approved although governance checks failed",
                suggested_fix=("Re-run the decision with the current rules",),
            ))

        return issues

    def assess_appealability(self, decision: GovernanceDecision) -> bool:
        """Whether a decision may be appealed (same rule decide() applies)."""
        return self._is_appealable(
            decision.approved,
            decision.liberation.score,
            decision.safety.automatic_rejection
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @staticmethod
    async def _evaluate(evaluator: Callable, argument: Any, default: Any) -> Any:
        """Run one evaluator on its input, or return the default when there is none."""
        if argument is None:
            return default
        return await resolve(evaluator(argument))

    def _is_appealable(self, approved: bool, score: float, automatic_rejection: bool) -> bool:
        return (
            not approved
            and self.rules.appeals.score_floor <= score < self.rules.liberation.validity_threshold
            and not automatic_rejection
        )

    @staticmethod
    def _infer_decision_type(request: GovernanceRequest) -> GovernanceDecisionType:
        if request.proposal is not None:
            return decision_type_for(request.proposal)
        if request.creator_action is not None:
            return GovernanceDecisionType.CREATOR_SOVEREIGNTY
        if request.data is not None:
            return GovernanceDecisionType.COMMUNITY_CONSENT
        if request.content is not None:
            return GovernanceDecisionType.CONTENT_APPROVAL
        return GovernanceDecisionType.LIBERATION_VALIDATION

    def _build_reasons(
        self,
        criteria_met: Dict[str, bool],
        blocking_criteria: List[str],
        liberation: LiberationValidation,
        sovereignty: SovereigntyDecision,
        consent: ConsentValidation,
        safety: OppressionCheck,
        vote: Optional[VoteResult]
    ) -> List[DecisionReason]:
        """
        Build the explanation: a summary line, then one entry per evaluator.

        Never returns an empty list.
        """
        passed = sum(1 for v in criteria_met.values() if v)
        total = len(criteria_met)
        if blocking_criteria:
            labels = ", ".join(self.CRITERION_LABELS[c] for c in blocking_criteria)
            summary = f"Criteria passed: {passed}/{total}. REJECTED - failed: {labels}"
        else:
            summary = f"Criteria passed: {passed}/{total}. APPROVED - all criteria met"

        reasons = [DecisionReason("summary", "decision", summary)]

        threshold = liberation.liberation_threshold
        if liberation.valid:
            explanation = f"Liberation score {liberation.score:.0%} meets the {threshold:.0%} threshold"
        else:
            explanation = f"Liberation score {liberation.score:.0%} is below the {threshold:.0%} threshold"
        reasons.append(self._reason(
            self.CRITERION_LIBERATION, liberation.valid, explanation,
            liberation.feedback + liberation.recommendations
        ))

        reasons.append(self._reason(
            self.CRITERION_SOVEREIGNTY, sovereignty.approved,
            "Creator sovereignty requirements met" if sovereignty.approved
            else "Creator sovereignty requirements not met",
            sovereignty.findings + sovereignty.required_actions
        ))

        reasons.append(self._reason(
            self.CRITERION_CONSENT, consent.approved,
            "Community consent sufficient" if consent.approved
            else f"Community consent insufficient ({consent.consent_level:.0%})",
            consent.findings
        ))

        if safety.safe:
            explanation = "Content passed the anti-oppression check"
        else:
            explanation = f"Content flagged as {safety.severity.value} severity"
            if safety.automatic_rejection:
                explanation += " (automatic rejection)"
        reasons.append(self._reason(
            self.CRITERION_SAFETY, safety.safe, explanation,
            safety.findings + safety.recommendations
        ))

        if vote is not None:
            reasons.append(self._reason(
                self.CRITERION_VOTE, vote.approved, vote.reason,
                vote.proposal_validation.required_improvements
            ))

        return reasons

    @staticmethod
    def _reason(source: str, passed: bool, explanation: str, evidence) -> DecisionReason:
        return DecisionReason(
            reason_type="approval" if passed else "rejection",
            source=source,
            explanation=explanation,
            evidence=tuple(evidence),
        )

    @staticmethod
    def _build_required_actions(
        liberation: LiberationValidation,
        sovereignty: SovereigntyDecision,
        consent: ConsentValidation,
        safety: OppressionCheck,
        vote: Optional[VoteResult]
    ) -> List[str]:
        """Remediation of every failed criterion, deduplicated in order."""
        actions: List[str] = []
        if not liberation.valid:
            actions.extend(liberation.recommendations)
        if not sovereignty.approved:
            actions.extend(sovereignty.required_actions)
        if not consent.approved:
            actions.extend(f"Obtain {scope}" for scope in consent.missing_consent)
        if not safety.safe:
            actions.extend(safety.recommendations)
        if vote is not None and not vote.approved:
            actions.extend(vote.proposal_validation.required_improvements)
        return list(dict.fromkeys(actions))


def make_governance_decision(
    request: GovernanceRequest,
    rules: Optional[GovernanceRules] = None,
    **kwargs
) -> GovernanceDecision:
    """
    Convenience function to decide a request from synchronous code.

    GOVERNANCE:
    This is a STATELESS function.
    Each call is independent.

    Args:
        request: The GovernanceRequest
        rules: Optional governance rules
        **kwargs: Passed to DecisionEngine

    Returns:
        GovernanceDecision
    """
    engine = DecisionEngine(rules=rules, **kwargs)
    return asyncio.run(engine.decide(request))
