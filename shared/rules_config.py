# =============================================================================
# GOVERNANCE DECISION ENGINE - GOVERNANCE RULES CONFIGURATION
# =============================================================================
#
# GOVERNANCE:
# Every threshold, weight and minimum used by the evaluators lives HERE.
# Evaluators receive a GovernanceRules instance at construction and are pure
# functions of (input, rules). There are no module-level copies of these
# constants anywhere else.
#
# SOURCES:
# - GovernanceRules() gives the documented defaults
# - config/governance_rules.yaml overrides them (YamlRuleSource)
# - GOVERNANCE_RULES_PATH (environment or .env) points at another file
#
# FAIL CLOSED:
# Inconsistent rules raise ConfigurationError while the rules object is
# being built. An engine with bad rules can never be constructed.
#
# USAGE:
#   from shared.rules_config import load_governance_rules
#
#   rules = load_governance_rules()
#   engine = DecisionEngine(rules=rules)
#
# =============================================================================

import logging
import math
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv

from shared.enums import LiberationPrinciple
from shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Base directory
BASE_DIR = Path(__file__).parent.parent
CONFIG_PATH = BASE_DIR / "config" / "governance_rules.yaml"
RULES_PATH_ENV = "GOVERNANCE_RULES_PATH"

WEIGHT_SUM_TOLERANCE = 1e-9

DEFAULT_PRINCIPLE_WEIGHTS: Dict[LiberationPrinciple, float] = {
    LiberationPrinciple.EMPOWERMENT: 0.25,
    LiberationPrinciple.COMMUNITY_LIBERATION: 0.25,
    LiberationPrinciple.OPPRESSION_RESISTANCE: 0.20,
    LiberationPrinciple.POWER_BUILDING: 0.20,
    LiberationPrinciple.MUTUAL_AID: 0.10,
}

DEFAULT_ELIGIBILITY_REQUIREMENTS: Tuple[str, ...] = (
    "active_community_member",
    "liberation_aligned",
    "consent_to_democratic_process",
)


def _require_fraction(value: float, setting: str) -> None:
    """Fractions must be real numbers in [0, 1]."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ConfigurationError(
            f"Expected a number, got {type(value).__name__}", setting=setting
        )
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ConfigurationError(
            f"Value {value} outside [0, 1]", setting=setting
        )


def _require_positive_int(value: int, setting: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ConfigurationError(
            f"Expected a positive integer, got {value!r}", setting=setting
        )


# =============================================================================
# RULE SECTIONS
# =============================================================================


@dataclass(frozen=True)
class LiberationRules:
    """Principle weights and the two independent pass thresholds."""
    weights: Mapping[LiberationPrinciple, float] = field(
        default_factory=lambda: dict(DEFAULT_PRINCIPLE_WEIGHTS), hash=False
    )
    validity_threshold: float = 0.70
    principle_pass_threshold: float = 0.60

    def __post_init__(self):
        missing = [p.value for p in LiberationPrinciple if p not in self.weights]
        if missing:
            raise ConfigurationError(
                f"Missing principle weights: {', '.join(missing)}",
                setting="liberation.weights"
            )
        for principle, weight in self.weights.items():
            _require_fraction(weight, f"liberation.weights.{principle.value}")

        total = sum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ConfigurationError(
                f"Principle weights must sum to 1.0, got {total:.6f}",
                setting="liberation.weights"
            )

        _require_fraction(self.validity_threshold, "liberation.validity_threshold")
        _require_fraction(
            self.principle_pass_threshold, "liberation.principle_pass_threshold"
        )
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))


@dataclass(frozen=True)
class SovereigntyRules:
    """Minimums a creator action must meet."""
    minimum_revenue_share: float = 0.75
    minimum_narrative_control: float = 0.80
    minimum_consent_level: float = 0.90
    consent_validity_days: int = 365
    # Consent scope triggers
    cultural_scope_threshold: float = 0.70
    liberation_scope_threshold: float = 0.50
    # Advisory levels (recommendations only)
    enhanced_control_level: float = 0.90
    advisory_revenue_share: float = 0.80
    max_platform_cost_ratio: float = 0.30

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "consent_validity_days":
                _require_positive_int(value, f"sovereignty.{f.name}")
            else:
                _require_fraction(value, f"sovereignty.{f.name}")


@dataclass(frozen=True)
class ConsentRules:
    """Community data consent sufficiency."""
    approval_threshold: float = 0.80
    private_consent_validity_days: int = 365

    def __post_init__(self):
        _require_fraction(self.approval_threshold, "consent.approval_threshold")
        _require_positive_int(
            self.private_consent_validity_days, "consent.private_consent_validity_days"
        )


@dataclass(frozen=True)
class SafetyRules:
    """Harmful-content confidence model."""
    base_confidence: float = 0.80
    community_context_bonus: float = 0.10
    automatic_rejection_confidence: float = 0.80
    low_severity_safe_confidence: float = 0.70

    def __post_init__(self):
        for f in fields(self):
            _require_fraction(getattr(self, f.name), f"safety.{f.name}")


@dataclass(frozen=True)
class VotingPolicy:
    """Default voting rules, per-type adjustments and proposal form limits."""
    default_quorum: float = 0.30
    default_threshold: float = 0.60
    voting_period_days: int = 14
    governance_rule_quorum: float = 0.40
    governance_rule_threshold: float = 0.67
    creator_dispute_threshold: float = 0.75
    high_liberation_score: float = 0.90
    high_liberation_discount: float = 0.05
    threshold_floor: float = 0.50
    principle_minimum: float = 0.60
    consensus_liberation_score: float = 0.80
    min_title_length: int = 10
    min_description_length: int = 100
    eligibility_requirements: Tuple[str, ...] = DEFAULT_ELIGIBILITY_REQUIREMENTS

    def __post_init__(self):
        object.__setattr__(
            self, "eligibility_requirements", tuple(self.eligibility_requirements)
        )
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "eligibility_requirements":
                continue
            if f.name in ("voting_period_days", "min_title_length", "min_description_length"):
                _require_positive_int(value, f"voting.{f.name}")
            else:
                _require_fraction(value, f"voting.{f.name}")

        if self.threshold_floor > self.default_threshold:
            raise ConfigurationError(
                f"Threshold floor {self.threshold_floor} exceeds default "
                f"threshold {self.default_threshold}",
                setting="voting.threshold_floor"
            )
        if self.governance_rule_quorum < self.default_quorum:
            raise ConfigurationError(
                "Governance rule quorum must not be below the default quorum",
                setting="voting.governance_rule_quorum"
            )
        if self.governance_rule_threshold < self.default_threshold:
            raise ConfigurationError(
                "Governance rule threshold must not be below the default threshold",
                setting="voting.governance_rule_threshold"
            )


@dataclass(frozen=True)
class AppealRules:
    """Appeal window and the liberation score band that makes a rejection appealable."""
    window_days: int = 30
    score_floor: float = 0.60

    def __post_init__(self):
        _require_positive_int(self.window_days, "appeals.window_days")
        _require_fraction(self.score_floor, "appeals.score_floor")


# =============================================================================
# GOVERNANCE RULES
# =============================================================================


_SECTIONS = {
    "liberation": LiberationRules,
    "sovereignty": SovereigntyRules,
    "consent": ConsentRules,
    "safety": SafetyRules,
    "voting": VotingPolicy,
    "appeals": AppealRules,
}


@dataclass(frozen=True)
class GovernanceRules:
    """
    Single source of truth for every evaluator constant.

    GOVERNANCE:
    - FROZEN: rules never change under a running engine
    - A rule change produces a NEW GovernanceRules with a new version
      (see governance/rule_change.py)
    """
    version: str = "1.0.0"
    liberation: LiberationRules = field(default_factory=LiberationRules)
    sovereignty: SovereigntyRules = field(default_factory=SovereigntyRules)
    consent: ConsentRules = field(default_factory=ConsentRules)
    safety: SafetyRules = field(default_factory=SafetyRules)
    voting: VotingPolicy = field(default_factory=VotingPolicy)
    appeals: AppealRules = field(default_factory=AppealRules)

    def __post_init__(self):
        if not isinstance(self.version, str) or not self.version:
            raise ConfigurationError("Rule version must be a non-empty string",
                                     setting="version")
        if self.appeals.score_floor > self.liberation.validity_threshold:
            raise ConfigurationError(
                f"Appeal score floor {self.appeals.score_floor} exceeds liberation "
                f"validity threshold {self.liberation.validity_threshold}",
                setting="appeals.score_floor",
                subject_id=self.version
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GovernanceRules":
        """
        Build rules from a plain mapping (parsed YAML).

        Omitted settings keep their defaults. Unknown sections or settings
        raise ConfigurationError so typos can't silently fall back.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Rules must be a mapping, got {type(data).__name__}"
            )

        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "version":
                kwargs["version"] = str(value)
                continue
            section_cls = _SECTIONS.get(key)
            if section_cls is None:
                raise ConfigurationError(f"Unknown rules section '{key}'", setting=key)
            kwargs[key] = _build_section(key, section_cls, value or {})

        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Export as a YAML/JSON-friendly mapping (round-trips through from_dict)."""
        result: Dict[str, Any] = {"version": self.version}
        for name in _SECTIONS:
            section = getattr(self, name)
            values: Dict[str, Any] = {}
            for f in fields(section):
                value = getattr(section, f.name)
                if f.name == "weights":
                    value = {p.value: w for p, w in value.items()}
                elif isinstance(value, tuple):
                    value = list(value)
                values[f.name] = value
            result[name] = values
        return result


def _build_section(name: str, section_cls, raw: Mapping[str, Any]):
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Section must be a mapping", setting=name)

    known = {f.name for f in fields(section_cls)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            raise ConfigurationError(f"Unknown setting '{key}'", setting=f"{name}.{key}")
        if key == "weights":
            value = _parse_weights(value)
        elif key == "eligibility_requirements":
            value = tuple(str(v) for v in value)
        values[key] = value

    return section_cls(**values)


def _parse_weights(raw: Mapping[str, Any]) -> Dict[LiberationPrinciple, float]:
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Weights must be a mapping", setting="liberation.weights")
    weights: Dict[LiberationPrinciple, float] = {}
    for key, value in raw.items():
        try:
            principle = LiberationPrinciple(key)
        except ValueError:
            raise ConfigurationError(
                f"Unknown liberation principle '{key}'", setting="liberation.weights"
            ) from None
        weights[principle] = value
    return weights


# =============================================================================
# RULE SOURCES
# =============================================================================


class RuleSource(ABC):
    """Supplies the current GovernanceRules (config file, rules service, ...)."""

    @abstractmethod
    def load(self) -> GovernanceRules:
        """Return the current rules. Raises ConfigurationError if inconsistent."""
        ...


class YamlRuleSource(RuleSource):
    """
    Reads rules from a YAML file.

    GOVERNANCE:
    - READ-ONLY access to configuration
    - Missing file -> documented defaults (logged as a warning)
    - Unreadable or inconsistent file -> ConfigurationError
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: Path to the rules YAML. Defaults to config/governance_rules.yaml
        """
        self.config_path = Path(config_path) if config_path else CONFIG_PATH

    def load(self) -> GovernanceRules:
        if not self.config_path.exists():
            logger.warning(f"Rules file not found: {self.config_path}, using defaults")
            return GovernanceRules()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to read rules file {self.config_path}: {e}"
            ) from e

        rules = GovernanceRules.from_dict(data)
        logger.info(f"Loaded governance rules v{rules.version} from {self.config_path}")
        return rules


def resolve_rules_path(config_path: Optional[Path] = None) -> Path:
    """
    Pick the rules file: explicit argument, then GOVERNANCE_RULES_PATH
    (environment or project .env), then config/governance_rules.yaml.
    """
    if config_path is not None:
        return Path(config_path)

    load_dotenv(BASE_DIR / ".env", override=False)
    env_path = os.environ.get(RULES_PATH_ENV)
    if env_path:
        return Path(env_path)
    return CONFIG_PATH


def load_governance_rules(config_path: Optional[Path] = None) -> GovernanceRules:
    """
    Convenience function to load rules from the resolved YAML file.

    Args:
        config_path: Optional explicit path

    Returns:
        Validated GovernanceRules
    """
    return YamlRuleSource(resolve_rules_path(config_path)).load()
