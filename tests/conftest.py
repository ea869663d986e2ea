"""
Pytest configuration for the molgeom test suite.

This file provides shared fixtures and markers for all tests:
- `slow` marker: Tests that take more than a few seconds
- Small molecules (H2, water, methane)
- Synthetic force fields (tests/forcefields.py) registered under test names
  for the duration of a test and removed afterwards
"""

import pytest

from molgeom.forcefield import register_force_field, unregister_force_field
from molgeom.molecule import Molecule
from tests.forcefields import FailingForceField, HarmonicBondForceField


def pytest_configure(config):
    """Register custom markers to avoid warnings."""
    config.addinivalue_line("markers", "slow: marks tests as slow-running")


# ---------------------------------------------------------------------------
# Registration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def registered():
    """
    Register force-field instances under temporary names.

    Usage: ``registered("name", instance)``; the same instance is returned
    by every ``create_force_field("name")`` call so tests can inspect it.
    """
    names = []

    def _register(name, instance):
        register_force_field(name, lambda: instance)
        names.append(name)
        return instance

    yield _register
    for name in names:
        unregister_force_field(name)


@pytest.fixture
def harmonic(registered):
    """Registered ``HarmonicBondForceField(k=10, r0=1)`` as "test-harmonic"."""
    return registered("test-harmonic", HarmonicBondForceField(k=10.0, r0=1.0))


@pytest.fixture
def failing(registered):
    return registered("test-failing", FailingForceField())


# ---------------------------------------------------------------------------
# Molecules
# ---------------------------------------------------------------------------


@pytest.fixture
def diatomic():
    """Two hydrogens 1.5 Å apart, bonded."""
    return Molecule(["H", "H"], [[0.0, 0.0, 0.0], [1.5, 0.0, 0.0]], bonds=[(0, 1)])


@pytest.fixture
def water():
    """Distorted water."""
    return Molecule(
        ["O", "H", "H"],
        [[0.0, 0.0, 0.0], [1.1, 0.0, 0.0], [-0.3, 1.0, 0.0]],
        bonds=[(0, 1), (0, 2)],
        name="water",
    )


@pytest.fixture
def methane():
    """Methane with stretched C-H bonds."""
    return Molecule(
        ["C", "H", "H", "H", "H"],
        [
            [0.0, 0.0, 0.0],
            [0.7, 0.7, 0.7],
            [-0.7, -0.7, 0.7],
            [-0.7, 0.7, -0.7],
            [0.7, -0.7, -0.7],
        ],
        bonds=[(0, 1), (0, 2), (0, 3), (0, 4)],
        name="methane",
    )


@pytest.fixture
def single_atom():
    return Molecule(["X"], [[1.0, 2.0, 3.0]])
