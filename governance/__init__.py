# =============================================================================
# GOVERNANCE DECISION ENGINE - GOVERNANCE PACKAGE
# =============================================================================
#
# AUTHORITY:
# This package guards the rules themselves and the record of decisions.
#
# PRINCIPLES:
# 1. Rule changes may raise protections, never lower them silently
# 2. Every decision is handed to a DecisionStore by the caller
# 3. Stored decisions are append-only
#
# =============================================================================

from .rule_change import (
    RuleChangeResult,
    changed_sections,
    find_weakened_protections,
    next_patch_version,
    validate_rule_change,
)
from .decision_store import (
    DecisionStore,
    InMemoryDecisionStore,
    JsonlDecisionStore,
    store_decision,
)

__all__ = [
    "RuleChangeResult",
    "changed_sections",
    "find_weakened_protections",
    "next_patch_version",
    "validate_rule_change",
    "DecisionStore",
    "InMemoryDecisionStore",
    "JsonlDecisionStore",
    "store_decision",
]
