# =============================================================================
# GOVERNANCE DECISION ENGINE - EXCEPTIONS
# =============================================================================
#
# GOVERNANCE INTENT:
# These exceptions encode failure modes at the type level.
# Each exception type has a specific meaning and required response.
#
# EXCEPTION HIERARCHY:
#
# GovernanceError (base)
# ├── ValidationError      - Input descriptor is malformed or incomplete
# ├── ConfigurationError   - Rules are missing or inconsistent (FATAL)
# └── CollaboratorFailure  - Member registry / decision store failed
#
# NOT AN EXCEPTION:
# A well-formed request that fails thresholds is a policy violation.
# It is reported as approved=False with reasons, never raised.
#
# CollaboratorFailure is raised by collaborator implementations.
# The engine never catches it: retry policy belongs to the caller.
#
# =============================================================================

from typing import Optional


class GovernanceError(Exception):
    """
    Base class for all engine errors.

    Allows catching every engine error in a single except block.
    """

    def __init__(self, message: str, subject_id: Optional[str] = None):
        """
        Initialize governance error.

        Args:
            message: Error description
            subject_id: Optional ID of the request/proposal/rule set involved
        """
        self.message = message
        self.subject_id = subject_id
        super().__init__(message)

    def __str__(self) -> str:
        if self.subject_id:
            return f"[{self.subject_id}] {self.message}"
        return self.message


class ValidationError(GovernanceError):
    """
    Input descriptor is malformed or incomplete.

    Raised immediately and never retried. The caller surfaces it as a
    rejected evaluation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        subject_id: Optional[str] = None
    ):
        """
        Args:
            message: Error description
            field: Name of the offending field
            subject_id: Optional descriptor ID
        """
        super().__init__(message, subject_id)
        self.field = field

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            return f"{base} (field: {self.field})"
        return base


class ConfigurationError(GovernanceError):
    """
    Governance rules are missing or inconsistent.

    FATAL: raised while building GovernanceRules, so an engine with bad
    weights or minimums can never be constructed.
    """

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        subject_id: Optional[str] = None
    ):
        """
        Args:
            message: Error description
            setting: Dotted name of the offending setting (e.g. liberation.weights)
            subject_id: Optional rule version
        """
        super().__init__(message, subject_id)
        self.setting = setting

    def __str__(self) -> str:
        base = super().__str__()
        if self.setting:
            return f"{base} (setting: {self.setting})"
        return base


class CollaboratorFailure(GovernanceError):
    """
    An external collaborator (member registry, decision store) failed.

    Collaborator implementations raise this; the engine lets it propagate
    to the caller untouched.
    """

    def __init__(
        self,
        collaborator: str,
        message: str,
        subject_id: Optional[str] = None
    ):
        """
        Args:
            collaborator: Name of the failing collaborator
            message: Error description
            subject_id: Optional request/proposal ID
        """
        super().__init__(f"{collaborator}: {message}", subject_id)
        self.collaborator = collaborator
