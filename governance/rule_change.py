# =============================================================================
# GOVERNANCE DECISION ENGINE - RULE CHANGE VALIDATION
# =============================================================================
#
# AUTHORITY:
# This module decides whether a proposed GovernanceRules set may replace
# the current one. It acts as a RATCHET: protections may be raised, never
# lowered without going back to the community.
#
# BLOCKING CHECKS:
# 1. Liberation validity threshold lowered          -> LIBERATION_WEAKENED
# 2. Liberation principle pass threshold lowered    -> LIBERATION_WEAKENED
# 3. Minimum creator revenue share lowered          -> SOVEREIGNTY_REDUCED
# 4. Minimum creator narrative control lowered      -> SOVEREIGNTY_REDUCED
#
# A successful change:
# - gets the next patch version of the CURRENT rules (1.0.0 -> 1.0.1)
# - requires community notification
# - takes effect 7 days after validation
#
# THIS MODULE DOES NOT:
# - Store the new rules (the caller hands them to its rule storage)
# - Reload running engines
#
# =============================================================================

import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from models.data_models import GovernanceIssue, ensure_utc, utc_now
from shared.enums import IssueSeverity
from shared.exceptions import ConfigurationError
from shared.logging_config import AuditLogger
from shared.rules_config import GovernanceRules

logger = logging.getLogger(__name__)


NOTICE_PERIOD_DAYS: int = 7
"""Days between an accepted rule change and the moment it takes effect."""

RULE_SECTIONS: Tuple[str, ...] = (
    "liberation", "sovereignty", "consent", "safety", "voting", "appeals"
)

# (section, setting, issue code, issue type)
PROTECTED_MINIMUMS: Tuple[Tuple[str, str, str, str], ...] = (
    ("liberation", "validity_threshold", "LIBERATION_WEAKENED", "liberation_violation"),
    ("liberation", "principle_pass_threshold", "LIBERATION_WEAKENED", "liberation_violation"),
    ("sovereignty", "minimum_revenue_share", "SOVEREIGNTY_REDUCED", "sovereignty_violation"),
    ("sovereignty", "minimum_narrative_control", "SOVEREIGNTY_REDUCED", "sovereignty_violation"),
)

SUGGESTED_FIXES: Dict[str, Tuple[str, ...]] = {
    "LIBERATION_WEAKENED": (
        "Maintain or increase liberation principle scores",
        "Provide community justification for changes",
    ),
    "SOVEREIGNTY_REDUCED": (
        "Maintain minimum 75% creator revenue share",
        "Justify any reductions through community vote",
    ),
}


@dataclass(frozen=True)
class RuleChangeResult:
    """
    Outcome of validating a proposed rule set.

    rules is the proposed rule set stamped with new_rule_version, or None
    when the change was refused.
    """
    success: bool
    new_rule_version: str
    changes_applied: Tuple[str, ...]
    validation_errors: Tuple[GovernanceIssue, ...]
    community_notification_required: bool
    effective_date: datetime
    rules: Optional[GovernanceRules] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "new_rule_version": self.new_rule_version,
            "changes_applied": list(self.changes_applied),
            "validation_errors": [issue.to_dict() for issue in self.validation_errors],
            "community_notification_required": self.community_notification_required,
            "effective_date": self.effective_date.isoformat(),
        }


def next_patch_version(version: str) -> str:
    """
    Bump the patch component of a MAJOR.MINOR.PATCH version.

    Raises:
        ConfigurationError: version is not three dot-separated integers
    """
    parts = version.split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise ConfigurationError(
            f"Rule version '{version}' is not MAJOR.MINOR.PATCH",
            setting="version"
        )
    major, minor, patch = (int(part) for part in parts)
    return f"{major}.{minor}.{patch + 1}"


def find_weakened_protections(
    current: GovernanceRules,
    proposed: GovernanceRules
) -> List[GovernanceIssue]:
    """List every protected minimum the proposed rules lower."""
    issues: List[GovernanceIssue] = []
    for section, setting, code, issue_type in PROTECTED_MINIMUMS:
        before = getattr(getattr(current, section), setting)
        after = getattr(getattr(proposed, section), setting)
        if after < before:
            issues.append(GovernanceIssue(
                code=code,
                issue_type=issue_type,
                severity=IssueSeverity.CRITICAL,
                message=f"{section}.{setting} lowered from {before} to {after}",
                suggested_fix=SUGGESTED_FIXES[code],
            ))
    return issues


def changed_sections(current: GovernanceRules, proposed: GovernanceRules) -> List[str]:
    """Names of the rule sections whose settings differ, in canonical order."""
    changes = []
    for name in RULE_SECTIONS:
        before = getattr(current, name)
        after = getattr(proposed, name)
        if any(getattr(before, f.name) != getattr(after, f.name) for f in fields(before)):
            changes.append(name)
    return changes


def validate_rule_change(
    current: GovernanceRules,
    proposed: GovernanceRules,
    clock: Optional[Callable[[], datetime]] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> RuleChangeResult:
    """
    Decide whether proposed rules may replace the current ones.

    Args:
        current: Rules in force
        proposed: Rules proposed by the community
        clock: Returns the current time (defaults to UTC now)
        audit_logger: Receives a RULE_CHANGE event

    Returns:
        RuleChangeResult

    Raises:
        ConfigurationError: current version is not MAJOR.MINOR.PATCH
    """
    now = ensure_utc((clock or utc_now)())
    issues = find_weakened_protections(current, proposed)

    if issues:
        result = RuleChangeResult(
            success=False,
            new_rule_version=current.version,
            changes_applied=(),
            validation_errors=tuple(issues),
            community_notification_required=False,
            effective_date=now,
        )
        logger.warning(
            f"Rule change from {current.version} refused: "
            f"{', '.join(issue.code for issue in issues)}"
        )
    else:
        new_version = next_patch_version(current.version)
        result = RuleChangeResult(
            success=True,
            new_rule_version=new_version,
            changes_applied=tuple(changed_sections(current, proposed)),
            validation_errors=(),
            community_notification_required=True,
            effective_date=now + timedelta(days=NOTICE_PERIOD_DAYS),
            rules=replace(proposed, version=new_version),
        )
        logger.info(
            f"Rule change {current.version} -> {new_version} accepted "
            f"(sections: {', '.join(result.changes_applied) or 'none'})"
        )

    (audit_logger or AuditLogger()).log_event("RULE_CHANGE", {
        "current_version": current.version,
        **result.to_dict(),
    })
    return result
