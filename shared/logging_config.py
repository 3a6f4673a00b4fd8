# =============================================================================
# GOVERNANCE DECISION ENGINE - LOGGING CONFIGURATION
# =============================================================================
#
# GOVERNANCE:
# The engine only EMITS log records. It never attaches handlers, never
# writes files and never keeps a history of evaluations.
#
# - Operational logs: module loggers (logging.getLogger(__name__))
# - Audit records:    one JSON line per decision on the "audit.governance"
#                     logger, with a SHA-256 hash of the request
#
# Where records end up (console, file, log shipper) is decided by the
# embedding application, usually via setup_logging().
#
# =============================================================================

import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


AUDIT_LOGGER_NAME = "audit.governance"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_project_root() -> Path:
    """Get the project root directory."""
    # This file is at shared/logging_config.py
    return Path(__file__).parent.parent


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    level: int = logging.INFO,
    console_output: bool = True,
    file_output: bool = True,
    log_dir: Optional[Path] = None,
) -> Optional[Path]:
    """
    Configure root logging for an application embedding the engine.

    Args:
        level: Logging level
        console_output: Whether to log to console
        file_output: Whether to log to file
        log_dir: Directory for log files (defaults to logs/governance/)

    Returns:
        Path of the log file, or None when file output is disabled
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    log_file = None
    if file_output:
        target_dir = Path(log_dir) if log_dir else _get_project_root() / "logs" / "governance"
        target_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = target_dir / f"governance_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.info("Logging initialized for governance engine")
    if log_file:
        root_logger.info(f"Log file: {log_file}")
    return log_file


# =============================================================================
# AUDIT LOGGING
# =============================================================================

class AuditLogger:
    """
    Emits audit-grade decision records.

    Audit records are:
    - One JSON object per line
    - Include the decision outcome and every reason
    - Include a cryptographic hash of the request for traceability
    - Emitted only; persistence is the DecisionStore's job
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    @staticmethod
    def _compute_hash(data: Dict[str, Any]) -> str:
        """
        Compute SHA-256 hash of input data for traceability.

        Args:
            data: Dictionary to hash

        Returns:
            Hex-encoded SHA-256 hash
        """
        # Serialize deterministically (sorted keys, no whitespace)
        serialized = json.dumps(data, sort_keys=True, separators=(',', ':'), default=str)
        return hashlib.sha256(serialized.encode('utf-8')).hexdigest()

    def log_decision(
        self,
        decision,
        request_data: Optional[Dict[str, Any]] = None,
        rules_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Emit an audit record for a GovernanceDecision.

        Args:
            decision: The GovernanceDecision
            request_data: Optional request mapping to hash for traceability
            rules_version: Version of the GovernanceRules that produced it

        Returns:
            The emitted record
        """
        input_hash = None
        if request_data is not None:
            input_hash = self._compute_hash(request_data)

        record = {
            "timestamp": decision.timestamp.isoformat(),
            "event": "DECISION",
            "decision_id": decision.decision_id,
            "decision_type": decision.decision_type.value,
            "approved": decision.approved,
            "appealable": decision.appealable,
            "reasons": [reason.to_dict() for reason in decision.reasons],
            "rules_version": rules_version,
            "input_hash": input_hash,
        }
        self.logger.info(json.dumps(record, ensure_ascii=False))
        return record

    def log_event(self, event_type: str, details: Dict[str, Any]) -> Dict[str, Any]:
        """
        Emit a generic audit event (rule change, store handoff, ...).

        Args:
            event_type: Type of event being logged
            details: Event details as a dictionary
        """
        record = {
            "event": event_type,
            "details": details,
            "details_hash": self._compute_hash(details),
        }
        self.logger.info(json.dumps(record, ensure_ascii=False, default=str))
        return record
