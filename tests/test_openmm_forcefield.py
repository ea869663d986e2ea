"""
Tests for molgeom.openmm_forcefield module.

The "uff-openmm" force field builds the UFF terms as OpenMM forces and
evaluates them on the Reference platform. It must agree with the numpy
implementation.
"""

import numpy as np
import openmm as mm
import pytest

from molgeom.forcefield import create_force_field
from molgeom.molecule import Molecule
from molgeom.openmm_forcefield import OpenMMUFFForceField
from molgeom.optimizer import MoleculeGeometryOptimizer
from molgeom.uff import UFFForceField


@pytest.fixture
def mixed_molecule():
    """Bonded and non-bonded terms together."""
    return Molecule(
        ["C", "C", "H", "H", "O"],
        [
            [0.0, 0.0, 0.0],
            [1.6, 0.1, 0.0],
            [-0.5, 1.0, 0.2],
            [2.1, -0.9, 0.3],
            [4.0, 2.5, 1.0],
        ],
        bonds=[(0, 1), (0, 2), (1, 3)],
    )


def _pair(molecule):
    numpy_ff = UFFForceField()
    numpy_ff.set_molecule(molecule)
    numpy_ff.setup()
    openmm_ff = create_force_field("uff-openmm")
    openmm_ff.set_molecule(molecule)
    openmm_ff.setup()
    return numpy_ff, openmm_ff


class TestOpenMMSetup:
    """Tests for building the OpenMM system."""

    def test_registered_type(self):
        assert isinstance(create_force_field("uff-openmm"), OpenMMUFFForceField)

    def test_system_layout(self, mixed_molecule):
        _, ff = _pair(mixed_molecule)
        assert ff.system.getNumParticles() == 5
        forces = [ff.system.getForce(i) for i in range(ff.system.getNumForces())]
        assert isinstance(forces[0], mm.HarmonicBondForce)
        assert forces[0].getNumBonds() == 3
        assert isinstance(forces[1], mm.CustomBondForce)
        assert ff.context is not None

    def test_empty_molecule_has_no_context(self):
        ff = create_force_field("uff-openmm")
        ff.set_molecule(Molecule())
        ff.setup()
        assert ff.context is None
        assert ff.energy(Molecule().coordinates()) == 0.0


class TestOpenMMAgreement:
    """OpenMM and numpy evaluations of the same terms agree."""

    def test_energy_matches_numpy(self, mixed_molecule):
        numpy_ff, openmm_ff = _pair(mixed_molecule)
        coords = mixed_molecule.coordinates()
        assert openmm_ff.energy(coords) == pytest.approx(numpy_ff.energy(coords), rel=1e-6)

    def test_gradient_matches_numpy(self, mixed_molecule):
        numpy_ff, openmm_ff = _pair(mixed_molecule)
        coords = mixed_molecule.coordinates()
        np.testing.assert_allclose(
            openmm_ff.gradient(coords), numpy_ff.gradient(coords), rtol=1e-5, atol=1e-6
        )

    def test_optimize_with_openmm(self, water):
        """End to end with the OpenMM-backed force field."""
        optimizer = MoleculeGeometryOptimizer(water, "uff-openmm")
        assert optimizer.optimize()
        assert optimizer.rmsg() < 0.1
