"""
Unit tests for molgeom.molecule module.

These tests verify the thin molecule model the optimizer consumes:
- atom positions (plain Å and OpenMM quantities)
- bond bookkeeping and neighbor lookup
- formula generation
"""

import numpy as np
import pytest
from openmm import unit

from molgeom.coordinates import CartesianCoordinates
from molgeom.molecule import Bond, Molecule


class TestMoleculeInit:
    """Tests for Molecule construction."""

    def test_empty_molecule(self):
        mol = Molecule()
        assert mol.size() == 0
        assert mol.positions().shape == (0, 3)

    def test_positions_default_to_origin(self):
        mol = Molecule(["C", "O"])
        np.testing.assert_array_equal(mol.positions(), np.zeros((2, 3)))

    def test_element_capitalization(self):
        """Element symbols are normalized ("cl" -> "Cl")."""
        mol = Molecule(["cl", "BR"])
        assert [a.element for a in mol.atoms] == ["Cl", "Br"]

    def test_mismatched_positions_raise(self):
        with pytest.raises(ValueError):
            Molecule(["H", "H"], [[0, 0, 0]])

    def test_quantity_positions_converted(self):
        """Positions given in nm are stored in Å."""
        mol = Molecule(["H"], np.array([[0.1, 0.0, 0.0]]) * unit.nanometer)
        np.testing.assert_allclose(mol.atom(0).position, [1.0, 0.0, 0.0])


class TestBonds:
    """Tests for bonds and neighbors."""

    def test_bonds_are_ordered(self, water):
        assert water.bonds == [Bond(0, 1, 1.0), Bond(0, 2, 1.0)]

    def test_neighbors(self, water):
        assert [a.index for a in water.neighbors(0)] == [1, 2]
        assert [a.index for a in water.atom(1).neighbors()] == [0]

    def test_bond_out_of_range(self):
        mol = Molecule(["H"])
        with pytest.raises(IndexError):
            mol.add_bond(0, 1)

    def test_self_and_duplicate_bonds_rejected(self, diatomic):
        with pytest.raises(ValueError):
            diatomic.add_bond(0, 0)
        with pytest.raises(ValueError):
            diatomic.add_bond(1, 0)


class TestGeometry:
    """Tests for positions and coordinate snapshots."""

    def test_atom_position_is_a_copy(self, diatomic):
        p = diatomic.atom(1).position
        p[0] = 99.0
        assert diatomic.atom(1).position[0] == 1.5

    def test_set_position(self, diatomic):
        diatomic.atom(0).set_position([0.5, 0.0, 0.0])
        assert diatomic.distance(0, 1) == pytest.approx(1.0)

    def test_set_position_rejects_bad_shape(self, diatomic):
        with pytest.raises(ValueError):
            diatomic.atom(0).set_position([1.0, 2.0])

    def test_coordinates_is_independent(self, diatomic):
        """coordinates() is a deep copy; editing it leaves atoms alone."""
        coords = diatomic.coordinates()
        assert isinstance(coords, CartesianCoordinates)
        coords.set_position(0, [5.0, 5.0, 5.0])
        np.testing.assert_array_equal(diatomic.atom(0).position, [0.0, 0.0, 0.0])


class TestFormula:
    """Tests for Hill-order formulas."""

    def test_water_formula(self, water):
        assert water.formula() == "H2O"

    def test_methane_formula(self, methane):
        assert methane.formula() == "CH4"

    def test_carbon_first(self):
        mol = Molecule(["O", "H", "C", "Cl", "H"])
        assert mol.formula() == "CH2ClO"

    def test_repr(self, water):
        assert repr(water) == "Molecule('water', H2O)"
