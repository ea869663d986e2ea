# molgeom/openmm_forcefield.py
from __future__ import annotations

import logging

import numpy as np
import openmm as mm
from openmm import unit

from molgeom.coordinates import CartesianCoordinates
from molgeom.forcefield import ForceField, register_force_field
from molgeom.helpers import angstrom, nokcal
from molgeom.uff import UFFForceField

logger = logging.getLogger(__name__)

KCAL_PER_ANGSTROM = unit.kilocalories_per_mole / unit.angstrom
KCAL_PER_ANGSTROM2 = unit.kilocalories_per_mole / unit.angstrom**2

VDW_EXPRESSION = "D*((x/r)^12 - 2*(x/r)^6)"


@register_force_field("uff-openmm")
class OpenMMUFFForceField(ForceField):
    """
    UFF bond and van der Waals terms evaluated by an OpenMM ``Context``.

    The parameters come from :class:`~molgeom.uff.UFFForceField`; this class
    only rebuilds them as OpenMM forces so energies and gradients match the
    numpy implementation to within OpenMM's numerical precision.

    Attributes
    ----------
    system : openmm.System | None
        System with a ``HarmonicBondForce`` (bonds) and a
        ``CustomBondForce`` (van der Waals pairs). Built by :meth:`setup`.
    context : openmm.Context | None
        Reference-platform context used for every evaluation.

    Notes
    -----
    Unit conversion happens at the boundary: coordinates go in as Å through
    :func:`~molgeom.helpers.angstrom`, energies come back in kcal/mol.
    A molecule without atoms gets no context; energy is ``0.0``.
    """

    def __init__(self, platform: str = "Reference"):
        super().__init__()
        self.platform_name = platform
        self.system: mm.System | None = None
        self.integrator: mm.Integrator | None = None
        self.context: mm.Context | None = None

    def setup(self) -> None:
        molecule = self._require_molecule()

        # reuses typing and parameters; raises ForceFieldSetupError itself
        uff = UFFForceField()
        uff.set_molecule(molecule)
        uff.setup()

        system = mm.System()
        for _ in range(molecule.size()):
            system.addParticle(1.0)

        bonds = mm.HarmonicBondForce()
        for i, j, k, r0 in uff.bond_parameters():
            bonds.addBond(i, j, r0 * unit.angstrom, k * KCAL_PER_ANGSTROM2)
        system.addForce(bonds)

        vdw = mm.CustomBondForce(VDW_EXPRESSION)
        vdw.addPerBondParameter("D")
        vdw.addPerBondParameter("x")
        for i, j, D, x in uff.vdw_parameters():
            D_kj = (D * unit.kilocalories_per_mole).value_in_unit(
                unit.kilojoules_per_mole
            )
            x_nm = (x * unit.angstrom).value_in_unit(unit.nanometer)
            vdw.addBond(i, j, [D_kj, x_nm])
        system.addForce(vdw)

        self.system = system
        self.context = None
        self.integrator = None
        if molecule.size() > 0:
            self.integrator = mm.VerletIntegrator(0.001 * unit.picoseconds)
            platform = mm.Platform.getPlatformByName(self.platform_name)
            self.context = mm.Context(system, self.integrator, platform)

        logger.debug(
            "OpenMM UFF setup on %s: %d bonds, %d vdW pairs",
            self.platform_name,
            uff.bond_count,
            uff.vdw_pair_count,
        )

    def _state(self, coordinates: CartesianCoordinates, **kwargs) -> mm.State:
        self.context.setPositions(angstrom(coordinates.to_array()))
        return self.context.getState(**kwargs)

    def energy(self, coordinates: CartesianCoordinates) -> float:
        if self.context is None:
            return 0.0
        state = self._state(coordinates, getEnergy=True)
        return float(nokcal(state.getPotentialEnergy()))

    def gradient(self, coordinates: CartesianCoordinates) -> np.ndarray:
        if self.context is None:
            return np.zeros((len(coordinates), 3))
        state = self._state(coordinates, getForces=True)
        forces = state.getForces(asNumpy=True).value_in_unit(KCAL_PER_ANGSTROM)
        return -np.asarray(forces, dtype=float)
