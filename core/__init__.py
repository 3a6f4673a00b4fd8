# =============================================================================
# GOVERNANCE DECISION ENGINE - CORE MODULE
# =============================================================================
#
# Evaluators of the governance decision engine.
# Each evaluator is stateless after construction and never persists.
#
# MODULES:
# - policy_scorer: Liberation principle scoring
# - sovereignty_assessor: Creator revenue / narrative / consent checks
# - consent_validator: Community data consent
# - content_classifier: Harm signal classification (pluggable)
# - content_safety: Anti-oppression content check
# - decision_engine: Aggregates all verdicts into a GovernanceDecision
#
# decision_engine depends on proposals.governor, which depends on
# policy_scorer. Import DecisionEngine from core.decision_engine.
#
# =============================================================================

from .policy_scorer import PolicyScorer
from .sovereignty_assessor import (
    SovereigntyAssessor,
    MultiCreatorAssessment,
    SovereigntyRoadmap,
)
from .consent_validator import ConsentValidator
from .content_classifier import (
    CategorySignals,
    ContentClassifier,
    KeywordContentClassifier,
)
from .content_safety import ContentSafetyDetector

__all__ = [
    "PolicyScorer",
    "SovereigntyAssessor",
    "MultiCreatorAssessment",
    "SovereigntyRoadmap",
    "ConsentValidator",
    "CategorySignals",
    "ContentClassifier",
    "KeywordContentClassifier",
    "ContentSafetyDetector",
]
