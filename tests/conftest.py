"""Root conftest - shared deterministic collaborators.

Invariants:
    - Identifiers come from a SequentialIdGenerator: from_int(1), from_int(2), ...
    - Time comes from a FixedClock starting 2024-01-01T12:00:00Z
    - bcrypt runs at its minimum cost so hashing stays fast
"""

from datetime import datetime, timezone

import pytest

from domainguard.core.clock import FixedClock
from domainguard.core.domain_types import SequentialIdGenerator
from domainguard.schemas.user import RegistrationPolicy

EPOCH = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def ids() -> SequentialIdGenerator:
    return SequentialIdGenerator()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(EPOCH)


@pytest.fixture
def registration_policy() -> RegistrationPolicy:
    return RegistrationPolicy(bcrypt_rounds=4)
