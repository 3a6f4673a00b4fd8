"""Global test fixtures: rules and a fixed clock."""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from shared.rules_config import GovernanceRules
from tests.factories import FIXED_NOW


@pytest.fixture
def rules():
    """Default governance rules."""
    return GovernanceRules()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW
