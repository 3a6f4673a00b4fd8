# =============================================================================
# GOVERNANCE DECISION ENGINE - SHARED MODULE
# =============================================================================
#
# GOVERNANCE:
# This module contains ONLY shared utilities. No business logic lives here.
#
# CONTENTS:
# - Enums (shared type definitions)
# - Exceptions (error hierarchy)
# - Governance rules (YAML-backed configuration)
# - Logging utilities (application and audit)
#
# =============================================================================

from .enums import (
    GovernanceDecisionType,
    HarmCategory,
    IssueSeverity,
    LiberationPrinciple,
    ProposalType,
    SensitivityTier,
    Severity,
    VotingRuleType,
)
from .exceptions import (
    CollaboratorFailure,
    ConfigurationError,
    GovernanceError,
    ValidationError,
)
from .rules_config import GovernanceRules, RuleSource, YamlRuleSource, load_governance_rules
from .logging_config import AuditLogger, setup_logging

__all__ = [
    "GovernanceDecisionType",
    "HarmCategory",
    "IssueSeverity",
    "LiberationPrinciple",
    "ProposalType",
    "SensitivityTier",
    "Severity",
    "VotingRuleType",
    "CollaboratorFailure",
    "ConfigurationError",
    "GovernanceError",
    "ValidationError",
    "GovernanceRules",
    "RuleSource",
    "YamlRuleSource",
    "load_governance_rules",
    "AuditLogger",
    "setup_logging",
]
