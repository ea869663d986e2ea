"""
Tests for molgeom.helpers module.

This module tests the unit conversion and vector utility functions:
- angstrom/nostrom/as_angstrom: Attach/strip Ångström units
- nokcal: Strip energy units
- random_direction: Unit vectors for the NaN-recovery wiggle
- rms: Root-mean-square over all components
"""

import numpy as np
import pytest
from openmm import unit

from molgeom.helpers import (
    angstrom,
    as_angstrom,
    nokcal,
    nostrom,
    random_direction,
    rms,
)


class TestUnitConversions:
    """Tests for unit attachment/stripping functions."""

    def test_angstrom_attaches_units(self):
        """angstrom() attaches Å units to numeric array."""
        vec = angstrom([1.0, 2.0, 3.0])
        assert vec.unit == unit.angstrom
        values = vec.value_in_unit(unit.angstrom)
        np.testing.assert_array_equal(values, [1.0, 2.0, 3.0])

    def test_nostrom_converts_nanometers(self):
        """nostrom() converts other length units to Ångströms."""
        raw = nostrom(1.0 * unit.nanometers)
        assert float(raw) == pytest.approx(10.0)

    def test_as_angstrom_passes_plain_numbers(self):
        """as_angstrom() treats unitless input as Å."""
        np.testing.assert_array_equal(as_angstrom([[1, 2, 3]]), [[1.0, 2.0, 3.0]])

    def test_as_angstrom_converts_quantities(self):
        """as_angstrom() converts unit-bearing input."""
        q = np.array([0.1, 0.2, 0.3]) * unit.nanometer
        np.testing.assert_allclose(as_angstrom(q), [1.0, 2.0, 3.0])

    def test_nokcal_from_kilojoules(self):
        """nokcal() converts kJ/mol with the thermochemical factor."""
        assert float(nokcal(4.184 * unit.kilojoules_per_mole)) == pytest.approx(1.0)


class TestVectorHelpers:
    """Tests for random_direction and rms."""

    def test_random_direction_is_unit_length(self):
        """random_direction() always returns a normalized vector."""
        rng = np.random.default_rng(0)
        for _ in range(20):
            assert np.linalg.norm(random_direction(rng)) == pytest.approx(1.0)

    def test_random_direction_seeded(self):
        """Equal seeds give equal directions."""
        a = random_direction(np.random.default_rng(42))
        b = random_direction(np.random.default_rng(42))
        np.testing.assert_array_equal(a, b)

    def test_rms_over_components(self):
        """rms() divides by the number of components, not atoms."""
        g = np.array([[3.0, 0.0, 0.0], [0.0, 4.0, 0.0]])
        assert rms(g) == pytest.approx(np.sqrt(25.0 / 6.0))

    def test_rms_empty(self):
        assert rms(np.zeros((0, 3))) == 0.0

