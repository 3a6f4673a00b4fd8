# =============================================================================
# GOVERNANCE DECISION ENGINE - DECISION STORE COLLABORATOR
# =============================================================================
#
# GOVERNANCE INTENT:
# Every GovernanceDecision carries requires_storage=True. The engine never
# persists; the caller hands each decision to a DecisionStore.
#
# CONTRACT:
# - save(decision) accepts one GovernanceDecision
# - Implementations may be sync or async
# - Failures are raised as CollaboratorFailure and reach the caller
#
# STORAGE IS APPEND-ONLY:
# - No deletion of records
# - No modification of existing records
#
# =============================================================================

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from models.data_models import GovernanceDecision
from shared.awaitables import resolve
from shared.exceptions import CollaboratorFailure, ValidationError
from shared.logging_config import AuditLogger

logger = logging.getLogger(__name__)

DEFAULT_STORE_DIR = Path(__file__).parent.parent / "data" / "decisions"


class DecisionStore(ABC):
    """Receives every governance decision for safekeeping."""

    @abstractmethod
    def save(self, decision: GovernanceDecision) -> None:
        """
        Persist one decision.

        Raises:
            CollaboratorFailure: the decision could not be stored
        """
        ...


class InMemoryDecisionStore(DecisionStore):
    """Keeps decisions in a list. For tests and short-lived processes."""

    def __init__(self):
        self._decisions: List[GovernanceDecision] = []

    def save(self, decision: GovernanceDecision) -> None:
        self._decisions.append(decision)

    @property
    def decisions(self) -> List[GovernanceDecision]:
        return list(self._decisions)

    def get(self, decision_id: str) -> Optional[GovernanceDecision]:
        for decision in self._decisions:
            if decision.decision_id == decision_id:
                return decision
        return None


class JsonlDecisionStore(DecisionStore):
    """
    Append-only JSON Lines file, one decision per line.

    GOVERNANCE:
    - All writes are APPEND-ONLY
    - Duplicate decision IDs are refused
    """

    FILE_NAME = "decisions.jsonl"

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize storage.

        Args:
            base_dir: Directory for decisions.jsonl.
                      Defaults to data/decisions/ in the project root.
        """
        self.base_dir = Path(base_dir) if base_dir is not None else DEFAULT_STORE_DIR
        self.log_path = self.base_dir / self.FILE_NAME

    def save(self, decision: GovernanceDecision) -> None:
        if self.contains(decision.decision_id):
            raise ValidationError(
                "Decision already stored; records are append-only",
                field="decision_id", subject_id=decision.decision_id
            )

        line = json.dumps(decision.to_dict(), ensure_ascii=False, sort_keys=True)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise CollaboratorFailure(
                "decision_store", f"Cannot append to {self.log_path}: {e}",
                subject_id=decision.decision_id
            ) from e

        logger.debug(f"Stored decision {decision.decision_id} in {self.log_path}")

    def load_records(self) -> List[Dict[str, Any]]:
        """All stored decisions as dictionaries, oldest first."""
        if not self.log_path.exists():
            return []
        try:
            with open(self.log_path, "r", encoding="utf-8") as f:
                return [json.loads(line) for line in f if line.strip()]
        except (OSError, json.JSONDecodeError) as e:
            raise CollaboratorFailure(
                "decision_store", f"Cannot read {self.log_path}: {e}"
            ) from e

    def contains(self, decision_id: str) -> bool:
        return any(r.get("decision_id") == decision_id for r in self.load_records())


async def store_decision(
    store: DecisionStore,
    decision: GovernanceDecision,
    audit_logger: Optional[AuditLogger] = None
) -> None:
    """
    Hand a decision to a store (sync or async) and audit the handoff.

    Raises:
        CollaboratorFailure: raised by the store, propagated untouched
    """
    await resolve(store.save(decision))
    (audit_logger or AuditLogger()).log_event("DECISION_STORED", {
        "decision_id": decision.decision_id,
        "store": type(store).__name__,
    })
