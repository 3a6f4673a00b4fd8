#!/usr/bin/env python3
# =============================================================================
# GOVERNANCE DECISION ENGINE - TEST RUNNER
# =============================================================================
#
# USAGE:
#   python run_tests.py              # Run all tests
#   python run_tests.py -v           # Verbose mode
#   python run_tests.py --quick      # Quick smoke test only
#
# =============================================================================

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))


def _smoke_operation():
    from models.data_models import LiberationImpact, OperationDescriptor
    return OperationDescriptor(
        description="Community mutual aid fund for creators",
        liberation_impact=LiberationImpact(
            empowerment=0.9,
            community_liberation=0.85,
            oppression_resistance=0.8,
            power_building=0.8,
            mutual_aid=0.9,
        ),
    )


def run_smoke_test() -> int:
    """Import every module and run one decision end-to-end."""
    print("\n" + "="*50)
    print("  QUICK SMOKE TEST")
    print("="*50 + "\n")

    errors = []

    # Test 1: Imports
    print("Testing imports...", end=" ")
    try:
        from core.decision_engine import DecisionEngine  # noqa: F401
        from proposals.governor import ProposalGovernor  # noqa: F401
        from governance.rule_change import validate_rule_change  # noqa: F401
        print("OK")
    except ImportError as e:
        print(f"FAIL: {e}")
        errors.append(("imports", str(e)))

    # Test 2: Rules load from YAML
    print("Testing governance rules...", end=" ")
    try:
        from shared.rules_config import load_governance_rules
        rules = load_governance_rules()
        assert rules.liberation.validity_threshold == 0.70
        print("OK")
    except Exception as e:
        print(f"FAIL: {e}")
        errors.append(("rules", str(e)))

    # Test 3: Decision
    print("Testing decision engine...", end=" ")
    try:
        from core.decision_engine import make_governance_decision
        from models.data_models import GovernanceRequest
        fixed_now = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        decision = make_governance_decision(
            GovernanceRequest(operation=_smoke_operation(), request_id="smoke-001"),
            clock=lambda: fixed_now,
        )
        assert decision.approved
        assert decision.reasons
        print("OK")
    except Exception as e:
        print(f"FAIL: {e}")
        errors.append(("decision_engine", str(e)))

    # Test 4: Proposal governance
    print("Testing proposal governor...", end=" ")
    try:
        from proposals.governor import govern_proposal
        from proposals.models import CommunityProposal
        result = govern_proposal(CommunityProposal(
            title="Short",
            description="Too short",
            proposal_type="platform_change",
            proposer_id="member-1",
            liberation_impact=_smoke_operation().liberation_impact,
            deadline=datetime.now(timezone.utc) + timedelta(days=14),
        ))
        assert not result.approved
        print("OK")
    except Exception as e:
        print(f"FAIL: {e}")
        errors.append(("proposal_governor", str(e)))

    print("\n" + "="*50)
    if errors:
        print(f"  SMOKE TEST: {len(errors)} ERRORS")
        for name, err in errors:
            print(f"    - {name}: {err}")
        print("="*50 + "\n")
        return 1
    print("  SMOKE TEST: ALL PASSED")
    print("="*50 + "\n")
    return 0


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Governance Decision Engine Test Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tests.py              Run all tests
  python run_tests.py -v           Verbose output
  python run_tests.py --quick      Quick smoke test
"""
    )

    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Verbose output")
    parser.add_argument("--quick", action="store_true",
                        help="Quick smoke test only")

    args = parser.parse_args()

    if args.quick:
        sys.exit(run_smoke_test())

    import pytest
    pytest_args = [str(PROJECT_ROOT / "tests")]
    if args.verbose:
        pytest_args.append("-v")
    sys.exit(pytest.main(pytest_args))


if __name__ == "__main__":
    main()
