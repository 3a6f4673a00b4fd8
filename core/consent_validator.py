# =============================================================================
# GOVERNANCE DECISION ENGINE
# Module: core/consent_validator.py
# Purpose: Compare required vs obtained consent for community data requests
# =============================================================================
#
# REQUIRED CONSENT:
# - private data    -> explicit creator consent + explicit community consent
# - community data  -> community consent
# - several creators -> multi-creator consent (in addition)
# - nothing of the above but consent_required set -> community consent
#
# SUFFICIENCY:
#   consent_level = |required AND obtained| / |required|   (1.0 if none)
#   approved      = consent_level >= 0.80 AND nothing missing
#
# Obtained consent is supplied by the caller on the descriptor. This module
# never looks consent up and never records it.
#
# =============================================================================

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from models.data_models import (
    CommunityDataDescriptor,
    ConsentValidation,
    ensure_utc,
    utc_now,
)
from shared.enums import SensitivityTier
from shared.exceptions import ValidationError
from shared.rules_config import GovernanceRules

logger = logging.getLogger(__name__)


class ConsentValidator:
    """Validates consent sufficiency for community data operations."""

    EXPLICIT_CREATOR_CONSENT = "explicit_creator_consent"
    EXPLICIT_COMMUNITY_CONSENT = "explicit_community_consent"
    COMMUNITY_CONSENT = "community_consent"
    MULTI_CREATOR_CONSENT = "multi_creator_consent"

    def __init__(
        self,
        rules: Optional[GovernanceRules] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.rules = rules or GovernanceRules()
        self.clock = clock or utc_now

    def validate(self, data: CommunityDataDescriptor) -> ConsentValidation:
        """
        Check whether the consent obtained for a data request is sufficient.

        Args:
            data: The community data request

        Returns:
            ConsentValidation
        """
        if not isinstance(data, CommunityDataDescriptor):
            raise ValidationError(
                f"Expected a CommunityDataDescriptor, got {type(data).__name__}",
                field="data"
            )

        required = self.required_consent(data)
        obtained = tuple(dict.fromkeys(data.obtained_consent))
        missing = tuple(c for c in required if c not in obtained)

        if required:
            satisfied = len(required) - len(missing)
            consent_level = round(satisfied / len(required), 10)
        else:
            consent_level = 1.0

        approved = consent_level >= self.rules.consent.approval_threshold and not missing

        if not required:
            findings = (f"No consent required for {data.sensitivity.value} data",)
        elif missing:
            findings = (
                f"Consent level {consent_level:.0%}, missing: {', '.join(missing)}",
            )
        else:
            findings = (f"All {len(required)} required consent scopes obtained",)

        if not approved:
            logger.info(
                f"Consent insufficient for data {data.data_id or '<unnamed>'}: "
                f"missing={list(missing)}"
            )

        return ConsentValidation(
            approved=approved,
            consent_type="explicit" if data.sensitivity == SensitivityTier.PRIVATE else "community_standard",
            consent_level=consent_level,
            required_consent=required,
            obtained_consent=obtained,
            missing_consent=missing,
            findings=findings,
            consent_expiry_date=self._consent_expiry(data),
        )

    def required_consent(self, data: CommunityDataDescriptor) -> tuple:
        """Consent scopes the data request needs, in a stable order."""
        required: List[str] = []

        if data.sensitivity == SensitivityTier.PRIVATE:
            required.extend((self.EXPLICIT_CREATOR_CONSENT, self.EXPLICIT_COMMUNITY_CONSENT))
        elif data.sensitivity == SensitivityTier.COMMUNITY:
            required.append(self.COMMUNITY_CONSENT)

        if len(data.creator_ids) > 1:
            required.append(self.MULTI_CREATOR_CONSENT)

        if not required and data.consent_required:
            required.append(self.COMMUNITY_CONSENT)

        return tuple(required)

    def _consent_expiry(self, data: CommunityDataDescriptor) -> Optional[datetime]:
        # Only private data consent lapses
        if data.sensitivity != SensitivityTier.PRIVATE:
            return None
        validity = timedelta(days=self.rules.consent.private_consent_validity_days)
        return ensure_utc(self.clock()) + validity
