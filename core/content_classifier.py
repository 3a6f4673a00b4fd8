# =============================================================================
# GOVERNANCE DECISION ENGINE
# Module: core/content_classifier.py
# Purpose: Pluggable harmful-pattern classifiers for content safety
# =============================================================================
#
# The ContentSafetyDetector only needs to know which harm categories a text
# signals. HOW that is found out lives behind ContentClassifier:
#
#   class MyClassifier(ContentClassifier):
#       def classify(self, text: str) -> CategorySignals: ...
#
# KeywordContentClassifier is the default: deterministic, case-insensitive
# substring matching against explicit signal lists.
#
# =============================================================================

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

from models.data_models import freeze_mapping
from shared.enums import HarmCategory


@dataclass(frozen=True)
class CategorySignals:
    """
    Signals found in one text.

    matches maps each category to the signals that matched it. Categories
    without matches may be absent.
    """
    matches: Mapping[HarmCategory, Tuple[str, ...]] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "matches", freeze_mapping(self.matches))

    @property
    def detected(self) -> Tuple[HarmCategory, ...]:
        """Categories with at least one signal, in canonical order."""
        return tuple(c for c in HarmCategory if self.matches.get(c))

    def to_dict(self) -> Dict[str, list]:
        return {c.value: list(self.matches[c]) for c in self.detected}


class ContentClassifier(ABC):
    """Maps content text to harm-category signals."""

    @abstractmethod
    def classify(self, text: str) -> CategorySignals:
        """
        Classify a text.

        Args:
            text: Content text (may be empty)

        Returns:
            CategorySignals
        """
        ...


DEFAULT_SIGNAL_SETS: Dict[HarmCategory, Tuple[str, ...]] = {
    HarmCategory.RACIST: ("racist", "racial slur", "racial discrimination"),
    HarmCategory.HOMOPHOBIC: ("homophobic", "anti-gay", "heteronormative"),
    HarmCategory.TRANSPHOBIC: ("transphobic", "anti-trans", "cisnormative"),
    HarmCategory.CLASSIST: ("classist", "poverty shaming", "elitist"),
    HarmCategory.SEXIST: ("sexist", "misogynistic", "patriarchal"),
    HarmCategory.ABLEIST: ("ableist", "disability discrimination"),
    HarmCategory.EXPLOITATIVE: ("exploitative", "predatory", "extractive"),
}


class KeywordContentClassifier(ContentClassifier):
    """
    Deterministic keyword matcher.

    NO NLP. NO ML. A category is signalled when any of its signal strings
    occurs in the lower-cased text.
    """

    def __init__(self, signal_sets: Optional[Mapping[HarmCategory, Sequence[str]]] = None):
        """
        Args:
            signal_sets: Signal strings per category (defaults to DEFAULT_SIGNAL_SETS)
        """
        source = signal_sets if signal_sets is not None else DEFAULT_SIGNAL_SETS
        self.signal_sets: Dict[HarmCategory, Tuple[str, ...]] = {
            category: tuple(signal.lower() for signal in signals)
            for category, signals in source.items()
        }

    def classify(self, text: str) -> CategorySignals:
        lowered = (text or "").lower()
        matches = {}
        for category, signals in self.signal_sets.items():
            found = tuple(signal for signal in signals if signal in lowered)
            if found:
                matches[category] = found
        return CategorySignals(matches=matches)
