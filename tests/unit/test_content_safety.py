"""
UNIT TESTS - CONTENT SAFETY
===========================
Tests for core/content_safety.py and core/content_classifier.py
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from core.content_classifier import (
    CategorySignals,
    ContentClassifier,
    KeywordContentClassifier,
)
from core.content_safety import ContentSafetyDetector
from shared.enums import HarmCategory, Severity
from shared.exceptions import ValidationError
from tests.factories import content


@pytest.fixture
def detector(rules):
    return ContentSafetyDetector(rules)


class FixedClassifier(ContentClassifier):
    """Returns the same signals for any text."""

    def __init__(self, matches):
        self.matches = matches
        self.calls = []

    def classify(self, text):
        self.calls.append(text)
        return CategorySignals(matches=self.matches)


# =============================================================================
# CLASSIFIER
# =============================================================================

class TestKeywordClassifier:

    def test_case_insensitive(self):
        signals = KeywordContentClassifier().classify("A PREDATORY scheme")
        assert signals.detected == (HarmCategory.EXPLOITATIVE,)
        assert signals.matches[HarmCategory.EXPLOITATIVE] == ("predatory",)

    def test_empty_text(self):
        assert KeywordContentClassifier().classify("").detected == ()

    def test_detected_in_canonical_order(self):
        signals = KeywordContentClassifier().classify("extractive and racist")
        assert signals.detected == (HarmCategory.RACIST, HarmCategory.EXPLOITATIVE)

    def test_disability_discrimination_is_one_category(self):
        signals = KeywordContentClassifier().classify("Policy amounts to disability discrimination")
        assert signals.detected == (HarmCategory.ABLEIST,)

    def test_racial_discrimination(self):
        signals = KeywordContentClassifier().classify("Racial discrimination in hiring")
        assert signals.detected == (HarmCategory.RACIST,)

    def test_custom_signal_sets(self):
        classifier = KeywordContentClassifier({HarmCategory.CLASSIST: ("Gatekeeping",)})
        assert classifier.classify("no gatekeeping here").detected == (HarmCategory.CLASSIST,)
        assert classifier.classify("racist").detected == ()


# =============================================================================
# SEVERITY
# =============================================================================

class TestSeverity:

    @pytest.mark.parametrize("count,expected", [
        (0, Severity.LOW),
        (1, Severity.MEDIUM),
        (2, Severity.HIGH),
        (3, Severity.CRITICAL),
        (7, Severity.CRITICAL),
    ])
    def test_severity_for_count(self, count, expected):
        assert ContentSafetyDetector.severity_for(count) == expected


# =============================================================================
# CHECK
# =============================================================================

class TestCheck:

    def test_clean_content_is_safe(self, detector):
        result = detector.check(content("A celebration of community art"))

        assert result.safe is True
        assert result.severity == Severity.LOW
        assert result.detected_categories == ()
        assert result.automatic_rejection is False
        assert result.confidence == 0.8
        assert result.recommendations == ()
        assert result.findings == ("No harmful patterns detected",)

    def test_single_category_is_unsafe(self, detector):
        result = detector.check(content("A predatory lending offer"))

        assert result.safe is False
        assert result.severity == Severity.MEDIUM
        assert result.automatic_rejection is False
        assert result.recommendations == (
            "Review content for oppressive language",
            "Consider community impact of messaging",
        )
        assert result.findings == ("Detected exploitative signals: predatory",)

    def test_high_severity_needs_confidence_above_threshold(self, detector):
        result = detector.check(content("racist and sexist jokes"))

        assert result.severity == Severity.HIGH
        # 0.8 is not above the 0.8 rejection confidence
        assert result.automatic_rejection is False
        assert "Require community review before approval" in result.recommendations

    def test_community_context_raises_confidence(self, detector):
        result = detector.check(content(
            "racist and sexist jokes", community_context=("community-1",)
        ))

        assert result.confidence == 0.9
        assert result.automatic_rejection is True

    def test_critical_always_rejected(self, detector):
        result = detector.check(content("racist, sexist and ableist jokes"))

        assert result.severity == Severity.CRITICAL
        assert result.automatic_rejection is True
        assert result.safe is False

    def test_matched_signals_reported(self, detector):
        result = detector.check(content("elitist gatekeeping"))
        assert result.matched_signals == {HarmCategory.CLASSIST: ("elitist",)}

    def test_single_ableism_mention_not_rejected(self, detector):
        result = detector.check(content(
            "This venue is disability discrimination", community_context=("community-1",)
        ))

        assert result.detected_categories == (HarmCategory.ABLEIST,)
        assert result.severity == Severity.MEDIUM
        assert result.automatic_rejection is False

    def test_matched_signals_read_only(self, detector):
        result = detector.check(content("elitist gatekeeping"))

        with pytest.raises(TypeError):
            result.matched_signals[HarmCategory.RACIST] = ("racist",)
        assert hash(result) == hash(detector.check(content("elitist gatekeeping")))

    def test_injected_classifier(self, rules):
        classifier = FixedClassifier({HarmCategory.SEXIST: ("x",)})
        result = ContentSafetyDetector(rules, classifier=classifier).check(content("anything"))

        assert classifier.calls == ["anything"]
        assert result.detected_categories == (HarmCategory.SEXIST,)

    def test_wrong_type(self, detector):
        with pytest.raises(ValidationError):
            detector.check("plain text")
