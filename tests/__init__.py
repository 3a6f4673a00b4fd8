# =============================================================================
# GOVERNANCE DECISION ENGINE - TEST SUITE
# =============================================================================
#
# Structure:
#   tests/
#     unit/           - One module per evaluator / shared component
#     integration/    - DecisionEngine end-to-end
#     factories.py    - Descriptor factories
#     conftest.py     - Rules and fixed clock fixtures
#
# Usage:
#   pytest tests/
#   python run_tests.py --quick
#
# =============================================================================
