# =============================================================================
# GOVERNANCE DECISION ENGINE
# Module: core/policy_scorer.py
# Purpose: Score an operation against the five weighted liberation principles
# =============================================================================
#
# SCORING MODEL:
# Each principle is scored independently in [0, 1]:
#
#   principle score = max(signal score, declared sub-score)
#
# - signal score:   deterministic evidence from the description, the
#                   required permissions and the EconomicImpact facts
# - declared score: the caller-supplied LiberationImpact sub-score
#
# Declared impact acts as a floor; evidence in the operation may raise it.
#
# OVERALL:
#   overall = sum(weight_i * score_i)   (weights from GovernanceRules)
#   valid   = overall >= liberation.validity_threshold     (0.70)
#   passed  = score_i >= liberation.principle_pass_threshold (0.60)
#
# The two thresholds are independent constants.
#
# NO NLP. NO ML. Only deterministic keyword and structure signals.
#
# =============================================================================

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from models.data_models import LiberationValidation, OperationDescriptor
from shared.enums import LiberationPrinciple
from shared.exceptions import ValidationError
from shared.rules_config import GovernanceRules

logger = logging.getLogger(__name__)


def _clamp(score: float) -> float:
    return round(min(max(score, 0.0), 1.0), 10)


def _mentions(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


class PolicyScorer:
    """
    Scores platform operations against the liberation principles.

    DESIGN NOTES:
    - Pure function of (operation, rules); no I/O, no hidden state
    - Keyword lists are explicit and auditable
    - Sub-assessments are clamped before they are weighted
    """

    # =========================================================================
    # FEEDBACK TIERS
    # =========================================================================
    # "Good" starts at the configured principle pass threshold.

    EXCELLENT_TIER = 0.8
    MODERATE_TIER = 0.4

    # =========================================================================
    # REMEDIATION
    # =========================================================================

    RECOMMENDATIONS: Dict[LiberationPrinciple, Tuple[str, ...]] = {
        LiberationPrinciple.EMPOWERMENT: (
            "Increase creator revenue share to {minimum_revenue_share:.0%} minimum",
            "Add explicit Black queer cultural elements",
            "Ensure Black queer voices lead decision-making",
        ),
        LiberationPrinciple.COMMUNITY_LIBERATION: (
            "Add democratic governance components",
            "Increase community ownership elements",
            "Strengthen collective decision-making",
        ),
        LiberationPrinciple.OPPRESSION_RESISTANCE: (
            "Add explicit anti-oppression measures",
            "Challenge extractive economic models",
            "Include systemic change messaging",
        ),
        LiberationPrinciple.POWER_BUILDING: (
            "Increase resource distribution to community",
            "Add skill-sharing components",
            "Facilitate network building",
        ),
        LiberationPrinciple.MUTUAL_AID: (
            "Add direct mutual aid contribution",
            "Include community care elements",
            "Facilitate resource sharing",
        ),
    }

    # =========================================================================
    # SIGNAL KEYWORDS
    # =========================================================================
    # Matched case-insensitively as substrings of the description.

    IDENTITY_KEYWORDS = ("black", "queer", "lgbtq", "transgender", "gay", "lesbian", "bisexual")
    CULTURAL_KEYWORDS = ("culture", "art", "music", "storytelling", "narrative", "voice")
    COLLECTIVE_KEYWORDS = ("collective", "cooperative", "shared", "community-owned")
    DEMOCRATIC_KEYWORDS = ("vote", "democratic", "participate", "consensus", "assembly")
    PARTICIPATORY_KEYWORDS = ("input", "feedback", "involvement", "engagement")
    ANTI_RACIST_KEYWORDS = ("anti-racist", "racial justice", "black liberation", "decolonize")
    RACIAL_EQUITY_KEYWORDS = ("black-owned", "black creators", "racial equity")
    ANTI_QUEERPHOBIC_KEYWORDS = ("lgbtq+ safe", "queer liberation", "trans rights", "anti-homophobic")
    QUEER_EMPOWERMENT_KEYWORDS = ("queer creators", "lgbtq+ community", "gender affirming")
    FAIRNESS_KEYWORDS = ("fair", "non-exploitative", "ethical", "transparent")
    SYSTEMIC_KEYWORDS = ("systemic", "institutional", "structural", "transformative")
    CHANGE_KEYWORDS = ("reform", "revolution", "alternative", "disrupt")
    KNOWLEDGE_KEYWORDS = ("education", "training", "skill", "knowledge", "learning", "workshop")
    TEACHING_KEYWORDS = ("share", "teach", "mentor", "guide", "support")
    NETWORK_KEYWORDS = ("network", "connect", "community", "relationship", "collaboration")
    BUILDING_KEYWORDS = ("build", "create", "foster", "develop", "strengthen")
    ORGANIZING_KEYWORDS = ("organize", "mobilize", "collective action", "campaign", "advocacy")
    POWER_KEYWORDS = ("power", "influence", "change", "justice", "rights")
    CARE_KEYWORDS = ("care", "support", "wellness", "healing", "safety")
    SOLIDARITY_KEYWORDS = ("community", "collective", "mutual", "solidarity")
    SHARING_KEYWORDS = ("share", "exchange", "distribute", "pool", "common")
    RESOURCE_KEYWORDS = ("resource", "tool", "asset", "fund", "material")

    GOVERNANCE_PERMISSION = "community_governance"

    def __init__(self, rules: Optional[GovernanceRules] = None):
        """
        Args:
            rules: Governance rules (defaults to the documented defaults)
        """
        self.rules = rules or GovernanceRules()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def score(self, operation: OperationDescriptor) -> LiberationValidation:
        """
        Score an operation against every liberation principle.

        Args:
            operation: The operation to score

        Returns:
            LiberationValidation with per-principle scores, feedback and
            remediation recommendations

        Raises:
            ValidationError: operation has no LiberationImpact
        """
        if not isinstance(operation, OperationDescriptor):
            raise ValidationError(
                f"Expected an OperationDescriptor, got {type(operation).__name__}",
                field="operation"
            )
        if operation.liberation_impact is None:
            raise ValidationError(
                "Operation has no liberation impact",
                field="liberation_impact",
                subject_id=operation.operation_id or None
            )

        liberation_rules = self.rules.liberation
        declared = operation.liberation_impact

        # ---------------------------------------------------------------------
        # STEP 1: Per-principle scores
        # ---------------------------------------------------------------------
        signal_scores = self.signal_scores(operation)
        principle_scores = {
            principle: _clamp(max(signal_scores[principle], declared.score_for(principle)))
            for principle in LiberationPrinciple
        }

        # ---------------------------------------------------------------------
        # STEP 2: Weighted overall score
        # ---------------------------------------------------------------------
        overall = self.weighted_score(principle_scores)

        # ---------------------------------------------------------------------
        # STEP 3: Pass / fail per principle
        # ---------------------------------------------------------------------
        pass_threshold = liberation_rules.principle_pass_threshold
        passed = tuple(p for p in LiberationPrinciple if principle_scores[p] >= pass_threshold)
        failed = tuple(p for p in LiberationPrinciple if principle_scores[p] < pass_threshold)

        valid = overall >= liberation_rules.validity_threshold

        logger.debug(
            f"Scored operation {operation.operation_id or '<unnamed>'}: "
            f"overall={overall:.3f} valid={valid} failed={[p.value for p in failed]}"
        )

        return LiberationValidation(
            valid=valid,
            score=overall,
            principle_scores=principle_scores,
            passed_principles=passed,
            failed_principles=failed,
            feedback=tuple(self._build_feedback(principle_scores)),
            recommendations=tuple(self._build_recommendations(failed)),
            liberation_threshold=liberation_rules.validity_threshold,
            signal_scores=signal_scores,
        )

    def weighted_score(self, principle_scores: Dict[LiberationPrinciple, float]) -> float:
        """
        Weighted overall score.

        Weights sum to 1.0 (enforced by GovernanceRules), so any scores in
        [0, 1] give an overall score in [0, 1].
        """
        weights = self.rules.liberation.weights
        total = sum(weights[p] * principle_scores[p] for p in LiberationPrinciple)
        return _clamp(total)

    def signal_scores(self, operation: OperationDescriptor) -> Dict[LiberationPrinciple, float]:
        """Evidence-only score for each principle (declared sub-scores ignored)."""
        text = operation.description.lower()
        return {
            LiberationPrinciple.EMPOWERMENT: self._empowerment(operation, text),
            LiberationPrinciple.COMMUNITY_LIBERATION: self._community_liberation(operation, text),
            LiberationPrinciple.OPPRESSION_RESISTANCE: self._oppression_resistance(operation, text),
            LiberationPrinciple.POWER_BUILDING: self._power_building(operation, text),
            LiberationPrinciple.MUTUAL_AID: self._mutual_aid(operation, text),
        }

    # =========================================================================
    # PRINCIPLE COMPOSITION
    # =========================================================================

    def _empowerment(self, operation: OperationDescriptor, text: str) -> float:
        score = 0.0
        economic = operation.economic_impact
        if economic is not None:
            if economic.creator_revenue_share >= self.rules.sovereignty.minimum_revenue_share:
                score += 0.3
            if economic.community_revenue_share >= 0.15:
                score += 0.2
            if economic.liberation_investment > 0:
                score += 0.2

        score += self._cultural_empowerment(text) * 0.3
        return _clamp(score)

    def _community_liberation(self, operation: OperationDescriptor, text: str) -> float:
        score = (
            self._self_determination(operation, text) * 0.4
            + self._collective_ownership(operation, text) * 0.3
            + self._democratic_participation(text) * 0.3
        )
        return _clamp(score)

    def _oppression_resistance(self, operation: OperationDescriptor, text: str) -> float:
        score = (
            self._anti_racist(text) * 0.3
            + self._anti_queerphobic(text) * 0.3
            + self._anti_exploitative(operation, text) * 0.2
            + self._systemic_change(text) * 0.2
        )
        return _clamp(score)

    def _power_building(self, operation: OperationDescriptor, text: str) -> float:
        score = (
            self._resource_distribution(operation) * 0.3
            + self._knowledge_sharing(text) * 0.25
            + self._network_building(text) * 0.25
            + self._organizing_potential(text) * 0.2
        )
        return _clamp(score)

    def _mutual_aid(self, operation: OperationDescriptor, text: str) -> float:
        score = 0.0
        economic = operation.economic_impact
        if economic is not None and economic.mutual_aid_contribution > 0:
            score += 0.4
        score += self._community_care(text) * 0.3
        score += self._resource_sharing(text) * 0.3
        return _clamp(score)

    # =========================================================================
    # SUB-ASSESSMENTS
    # =========================================================================

    def _cultural_empowerment(self, text: str) -> float:
        identity = _mentions(text, self.IDENTITY_KEYWORDS)
        cultural = _mentions(text, self.CULTURAL_KEYWORDS)
        if identity and cultural:
            return 0.8
        if identity or cultural:
            return 0.4
        return 0.0

    def _self_determination(self, operation: OperationDescriptor, text: str) -> float:
        score = 0.0
        if self.GOVERNANCE_PERMISSION in operation.required_permissions:
            score += 0.4
        if "democratic" in text:
            score += 0.4
        if "consent" in text:
            score += 0.2
        return _clamp(score)

    def _collective_ownership(self, operation: OperationDescriptor, text: str) -> float:
        score = 0.0
        economic = operation.economic_impact
        if economic is not None:
            community_share = economic.community_revenue_share
            if community_share >= 0.25:
                score += 0.6
            elif community_share >= 0.15:
                score += 0.4
            elif community_share > 0:
                score += 0.2
        if _mentions(text, self.COLLECTIVE_KEYWORDS):
            score += 0.4
        return _clamp(score)

    def _democratic_participation(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.DEMOCRATIC_KEYWORDS):
            score += 0.6
        if _mentions(text, self.PARTICIPATORY_KEYWORDS):
            score += 0.4
        return _clamp(score)

    def _anti_racist(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.ANTI_RACIST_KEYWORDS):
            score += 0.6
        if _mentions(text, self.RACIAL_EQUITY_KEYWORDS):
            score += 0.4
        return _clamp(score)

    def _anti_queerphobic(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.ANTI_QUEERPHOBIC_KEYWORDS):
            score += 0.6
        if _mentions(text, self.QUEER_EMPOWERMENT_KEYWORDS):
            score += 0.4
        return _clamp(score)

    def _anti_exploitative(self, operation: OperationDescriptor, text: str) -> float:
        score = 0.0
        economic = operation.economic_impact
        if economic is not None:
            if economic.creator_revenue_share >= self.rules.sovereignty.minimum_revenue_share:
                score += 0.5
            # Platform share stays within a quarter of what creators and community receive
            earned = economic.creator_revenue_share + economic.community_revenue_share
            if economic.platform_costs <= earned * 0.25:
                score += 0.3
        if _mentions(text, self.FAIRNESS_KEYWORDS):
            score += 0.2
        return _clamp(score)

    def _systemic_change(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.SYSTEMIC_KEYWORDS):
            score += 0.5
        if _mentions(text, self.CHANGE_KEYWORDS):
            score += 0.5
        return _clamp(score)

    def _resource_distribution(self, operation: OperationDescriptor) -> float:
        economic = operation.economic_impact
        if economic is None:
            return 0.0
        to_community = round(
            economic.community_revenue_share
            + economic.mutual_aid_contribution
            + economic.liberation_investment,
            10
        )
        if to_community >= 0.3:
            return 1.0
        if to_community >= 0.2:
            return 0.7
        if to_community >= 0.1:
            return 0.4
        return 0.0

    def _knowledge_sharing(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.KNOWLEDGE_KEYWORDS):
            score += 0.5
        if _mentions(text, self.TEACHING_KEYWORDS):
            score += 0.5
        return _clamp(score)

    def _network_building(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.NETWORK_KEYWORDS):
            score += 0.5
        if _mentions(text, self.BUILDING_KEYWORDS):
            score += 0.5
        return _clamp(score)

    def _organizing_potential(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.ORGANIZING_KEYWORDS):
            score += 0.6
        if _mentions(text, self.POWER_KEYWORDS):
            score += 0.4
        return _clamp(score)

    def _community_care(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.CARE_KEYWORDS):
            score += 0.5
        if _mentions(text, self.SOLIDARITY_KEYWORDS):
            score += 0.5
        return _clamp(score)

    def _resource_sharing(self, text: str) -> float:
        score = 0.0
        if _mentions(text, self.SHARING_KEYWORDS):
            score += 0.5
        if _mentions(text, self.RESOURCE_KEYWORDS):
            score += 0.5
        return _clamp(score)

    # =========================================================================
    # FEEDBACK
    # =========================================================================

    def _build_feedback(self, principle_scores: Dict[LiberationPrinciple, float]) -> List[str]:
        """One line per principle, in canonical order."""
        good_tier = self.rules.liberation.principle_pass_threshold
        feedback = []
        for principle in LiberationPrinciple:
            score = principle_scores[principle]
            percent = f"{score:.0%}"
            if score >= self.EXCELLENT_TIER:
                feedback.append(f"Excellent {principle.label} alignment ({percent})")
            elif score >= good_tier:
                feedback.append(f"Good {principle.label} alignment ({percent})")
            elif score >= self.MODERATE_TIER:
                feedback.append(
                    f"Moderate {principle.label} alignment ({percent}) - room for improvement"
                )
            else:
                feedback.append(
                    f"Low {principle.label} alignment ({percent}) - significant improvement needed"
                )
        return feedback

    def _build_recommendations(self, failed: Sequence[LiberationPrinciple]) -> List[str]:
        recommendations = []
        for principle in failed:
            for template in self.RECOMMENDATIONS[principle]:
                recommendation = template.format(
                    minimum_revenue_share=self.rules.sovereignty.minimum_revenue_share
                )
                if recommendation not in recommendations:
                    recommendations.append(recommendation)
        return recommendations
