"""Shared fixtures for skillquorum tests."""

from datetime import datetime

import pytest

from tests.helpers import FIXED_NOW


@pytest.fixture
def now() -> datetime:
    """A fixed, timezone-aware evaluation time."""
    return FIXED_NOW
