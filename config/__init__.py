# =============================================================================
# GOVERNANCE DECISION ENGINE - CONFIGURATION FILES
# =============================================================================
#
# governance_rules.yaml: default GovernanceRules (see shared/rules_config.py)
#
# =============================================================================
