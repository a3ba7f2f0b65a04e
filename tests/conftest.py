"""
Shared pytest configuration and fixtures for instant-runoff-tally.

This module provides common test fixtures and utilities used across
all test modules.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tally.election import Election  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FixedChoice:
    """Stand-in random source that always draws the same tie position."""

    def __init__(self, index=0):
        self.index = index
        self.calls = []

    def integers(self, high):
        self.calls.append(high)
        return self.index % high


@pytest.fixture
def fixtures_dir():
    """Directory holding the ballot CSV fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def election():
    """Four-candidate election with a seeded tie-break generator."""
    return Election(seed=1234)


@pytest.fixture
def fixed_choice():
    """Factory for elections whose tie-breaks always pick a given position."""

    def make(index=0, candidate_names=None):
        rng = FixedChoice(index)
        if candidate_names is None:
            return Election(rng=rng)
        return Election(candidate_names, rng=rng)

    return make


@pytest.fixture
def sample_ballots():
    """Provide sample ballot data for testing."""
    return [
        # Alice first, Bob second, Charlie third
        [0, 1, 2],
        [0, 1, 2],
        [0, 2],
        # Bob first, Alice second
        [1, 0],
        [1, 0],
        # Charlie first, Diana second
        [2, 3],
        [2, 3],
        # Diana only
        [3],
    ]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (files and scripts)",
    )
    config.addinivalue_line(
        "markers",
        "golden: marks tests as golden dataset validation (hand-computed counts)",
    )
    config.addinivalue_line(
        "markers", "invariant: marks tests as mathematical invariant validation"
    )
    config.addinivalue_line(
        "markers", "smoke: marks tests as smoke tests (basic functionality check)"
    )
