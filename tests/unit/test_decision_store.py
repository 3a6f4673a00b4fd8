"""
UNIT TESTS - DECISION STORE
===========================
Tests for governance/decision_store.py (append-only decision storage)
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from core.policy_scorer import PolicyScorer
from governance.decision_store import (
    DecisionStore,
    InMemoryDecisionStore,
    JsonlDecisionStore,
    store_decision,
)
from models.data_models import (
    ConsentValidation,
    DecisionReason,
    GovernanceDecision,
    OppressionCheck,
    SovereigntyDecision,
)
from shared.enums import GovernanceDecisionType
from shared.exceptions import CollaboratorFailure, ValidationError
from tests.factories import operation


class UnavailableStore(DecisionStore):

    async def save(self, decision):
        raise CollaboratorFailure("decision_store", "disk full", subject_id=decision.decision_id)


@pytest.fixture
def decision(rules, fixed_now):
    return GovernanceDecision(
        decision_id="GOV-20260115-0001",
        approved=True,
        timestamp=fixed_now,
        decision_type=GovernanceDecisionType.LIBERATION_VALIDATION,
        liberation=PolicyScorer(rules).score(operation()),
        sovereignty=SovereigntyDecision.not_applicable(0.75),
        consent=ConsentValidation.not_applicable(),
        safety=OppressionCheck.not_applicable(),
        reasons=(DecisionReason("summary", "decision", "Criteria passed: 4/4"),),
        request_id="req-001",
    )


class TestInMemoryStore:

    def test_save_and_get(self, decision):
        store = InMemoryDecisionStore()
        store.save(decision)

        assert store.decisions == [decision]
        assert store.get("GOV-20260115-0001") is decision
        assert store.get("missing") is None


class TestJsonlStore:

    def test_append(self, tmp_path, decision):
        store = JsonlDecisionStore(tmp_path)
        store.save(decision)

        records = store.load_records()
        assert len(records) == 1
        assert records[0]["decision_id"] == decision.decision_id
        assert records[0]["requires_storage"] is True

    def test_duplicate_refused(self, tmp_path, decision):
        store = JsonlDecisionStore(tmp_path)
        store.save(decision)

        with pytest.raises(ValidationError):
            store.save(decision)
        assert len(store.load_records()) == 1

    def test_empty_store(self, tmp_path):
        assert JsonlDecisionStore(tmp_path / "none").load_records() == []


class TestStoreDecision:

    @pytest.mark.asyncio
    async def test_sync_store(self, decision):
        store = InMemoryDecisionStore()
        await store_decision(store, decision)
        assert store.decisions == [decision]

    @pytest.mark.asyncio
    async def test_failure_propagates(self, decision):
        with pytest.raises(CollaboratorFailure) as exc_info:
            await store_decision(UnavailableStore(), decision)
        assert exc_info.value.subject_id == decision.decision_id
