# =============================================================================
# GOVERNANCE DECISION ENGINE
# Module: models/__init__.py
# Purpose: Package initialization for data models
# =============================================================================
#
# AUDIT NOTE:
# This module exposes the input descriptors, evaluator verdicts and the
# decision record used throughout the engine.
# All models are immutable and serializable via to_dict().
#
# =============================================================================

from .data_models import (
    EconomicImpact,
    LiberationImpact,
    ContentImpact,
    NarrativeControl,
    ConsentStatus,
    OperationDescriptor,
    CreatorActionDescriptor,
    CommunityDataDescriptor,
    ContentDescriptor,
    LiberationValidation,
    SovereigntyDecision,
    ConsentValidation,
    OppressionCheck,
    GovernanceRequest,
    DecisionReason,
    GovernanceDecision,
    GovernanceIssue,
)

__all__ = [
    "EconomicImpact",
    "LiberationImpact",
    "ContentImpact",
    "NarrativeControl",
    "ConsentStatus",
    "OperationDescriptor",
    "CreatorActionDescriptor",
    "CommunityDataDescriptor",
    "ContentDescriptor",
    "LiberationValidation",
    "SovereigntyDecision",
    "ConsentValidation",
    "OppressionCheck",
    "GovernanceRequest",
    "DecisionReason",
    "GovernanceDecision",
    "GovernanceIssue",
]
