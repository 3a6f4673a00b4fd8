# =============================================================================
# GOVERNANCE DECISION ENGINE
# Module: core/content_safety.py
# Purpose: Detect harmful patterns in content and grade their severity
# =============================================================================
#
# SEVERITY (by number of detected categories):
#   0 -> low, 1 -> medium, 2 -> high, 3+ -> critical
#
# CONFIDENCE:
#   min(base_confidence + community_context_bonus if context present, 1.0)
#
# VERDICT:
#   safe                = nothing detected OR (low AND confidence < 0.70)
#   automatic_rejection = critical OR (high AND confidence > 0.80)
#
# Detection itself is delegated to a ContentClassifier.
#
# =============================================================================

import logging
from typing import List, Optional, Sequence

from core.content_classifier import ContentClassifier, KeywordContentClassifier
from models.data_models import ContentDescriptor, OppressionCheck
from shared.enums import HarmCategory, Severity
from shared.exceptions import ValidationError
from shared.rules_config import GovernanceRules

logger = logging.getLogger(__name__)


class ContentSafetyDetector:
    """Checks content for oppressive or exploitative language."""

    def __init__(
        self,
        rules: Optional[GovernanceRules] = None,
        classifier: Optional[ContentClassifier] = None
    ):
        """
        Args:
            rules: Governance rules (defaults to the documented defaults)
            classifier: Harm classifier (defaults to KeywordContentClassifier)
        """
        self.rules = rules or GovernanceRules()
        self.classifier = classifier or KeywordContentClassifier()

    def check(self, content: ContentDescriptor) -> OppressionCheck:
        """
        Check one piece of content.

        Args:
            content: The content

        Returns:
            OppressionCheck
        """
        if not isinstance(content, ContentDescriptor):
            raise ValidationError(
                f"Expected a ContentDescriptor, got {type(content).__name__}",
                field="content"
            )

        safety = self.rules.safety
        signals = self.classifier.classify(content.text)
        detected = signals.detected

        severity = self.severity_for(len(detected))
        confidence = self._confidence(content)

        safe = not detected or (
            severity == Severity.LOW and confidence < safety.low_severity_safe_confidence
        )
        automatic_rejection = severity == Severity.CRITICAL or (
            severity == Severity.HIGH and confidence > safety.automatic_rejection_confidence
        )

        if detected:
            findings = tuple(
                f"Detected {category.value} signals: {', '.join(signals.matches[category])}"
                for category in detected
            )
            logger.info(
                f"Content {content.content_id or '<unnamed>'} flagged: "
                f"{[c.value for c in detected]} severity={severity.value}"
            )
        else:
            findings = ("No harmful patterns detected",)

        return OppressionCheck(
            safe=safe,
            detected_categories=detected,
            severity=severity,
            confidence=confidence,
            automatic_rejection=automatic_rejection,
            recommendations=tuple(self._recommendations(detected, severity)),
            findings=findings,
            matched_signals={c: signals.matches[c] for c in detected},
        )

    @staticmethod
    def severity_for(count: int) -> Severity:
        """Map the number of detected categories to a severity."""
        if count <= 0:
            return Severity.LOW
        if count == 1:
            return Severity.MEDIUM
        if count == 2:
            return Severity.HIGH
        return Severity.CRITICAL

    def _confidence(self, content: ContentDescriptor) -> float:
        safety = self.rules.safety
        confidence = safety.base_confidence
        if content.community_context:
            confidence += safety.community_context_bonus
        return round(min(confidence, 1.0), 10)

    @staticmethod
    def _recommendations(detected: Sequence[HarmCategory], severity: Severity) -> List[str]:
        recommendations = []
        if detected:
            recommendations.append("Review content for oppressive language")
            recommendations.append("Consider community impact of messaging")
        if severity in (Severity.HIGH, Severity.CRITICAL):
            recommendations.append("Require community review before approval")
            recommendations.append("Provide content warning if approved")
        return recommendations
