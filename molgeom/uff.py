"""
molgeom.uff
===========

Universal Force Field (UFF), bond-stretch and van der Waals terms.

Reference: Rappé et al., J. Am. Chem. Soc. 114, 10024 (1992).

Energy terms
------------
- Bond stretch, for every bond::

      E = 1/2 k (r - r0)^2
      r0 = r_i + r_j + r_BO - r_EN
      r_BO = -0.1332 (r_i + r_j) ln(n)
      r_EN = r_i r_j (sqrt(chi_i) - sqrt(chi_j))^2 / (chi_i r_i + chi_j r_j)
      k = 664.12 Z_i Z_j / r0^3

- Van der Waals (Lennard-Jones 12-6), for every pair not separated by one
  or two bonds::

      E = D_ij [(x_ij / r)^12 - 2 (x_ij / r)^6]
      x_ij = sqrt(x_i x_j),  D_ij = sqrt(D_i D_j)

Angle, torsion, inversion and electrostatic terms are not included.
Units are Å and kcal/mol.

Overlapping atoms give a NaN energy (``inf - inf`` in the repulsive term).
That is intentional: the optimizer recovers from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from molgeom.coordinates import CartesianCoordinates
from molgeom.errors import ForceFieldSetupError
from molgeom.forcefield import ForceField, register_force_field
from molgeom.molecule import Atom, Molecule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UFFAtomParameters:
    """
    Per-type UFF parameters.

    Attributes
    ----------
    r1 : float
        Valence bond radius (Å).
    x1 : float
        Van der Waals distance (Å).
    D1 : float
        Van der Waals well depth (kcal/mol).
    Z1 : float
        Effective charge.
    chi : float
        GMP electronegativity.
    """

    r1: float
    x1: float
    D1: float
    Z1: float
    chi: float


# fmt: off
UFF_PARAMETERS: dict[str, UFFAtomParameters] = {
    "H_":    UFFAtomParameters(0.354, 2.886, 0.044, 0.712, 4.528),
    "B_3":   UFFAtomParameters(0.838, 4.083, 0.180, 1.755, 5.110),
    "B_2":   UFFAtomParameters(0.828, 4.083, 0.180, 1.755, 5.110),
    "C_3":   UFFAtomParameters(0.757, 3.851, 0.105, 1.912, 5.343),
    "C_R":   UFFAtomParameters(0.729, 3.851, 0.105, 1.912, 5.343),
    "C_2":   UFFAtomParameters(0.732, 3.851, 0.105, 1.912, 5.343),
    "C_1":   UFFAtomParameters(0.706, 3.851, 0.105, 1.912, 5.343),
    "N_3":   UFFAtomParameters(0.700, 3.660, 0.069, 2.544, 6.899),
    "N_R":   UFFAtomParameters(0.699, 3.660, 0.069, 2.544, 6.899),
    "N_2":   UFFAtomParameters(0.685, 3.660, 0.069, 2.544, 6.899),
    "N_1":   UFFAtomParameters(0.656, 3.660, 0.069, 2.544, 6.899),
    "O_3":   UFFAtomParameters(0.658, 3.500, 0.060, 2.300, 8.741),
    "O_R":   UFFAtomParameters(0.680, 3.500, 0.060, 2.300, 8.741),
    "O_2":   UFFAtomParameters(0.634, 3.500, 0.060, 2.300, 8.741),
    "O_1":   UFFAtomParameters(0.639, 3.500, 0.060, 2.300, 8.741),
    "F_":    UFFAtomParameters(0.668, 3.364, 0.050, 1.735, 10.874),
    "Si3":   UFFAtomParameters(1.117, 4.295, 0.402, 2.323, 4.168),
    "P_3+3": UFFAtomParameters(1.101, 4.147, 0.305, 2.863, 5.463),
    "S_3+2": UFFAtomParameters(1.064, 4.035, 0.274, 2.703, 6.928),
    "S_2":   UFFAtomParameters(1.077, 4.035, 0.274, 2.703, 6.928),
    "Cl":    UFFAtomParameters(1.044, 3.947, 0.227, 2.348, 8.564),
    "Br":    UFFAtomParameters(1.192, 4.189, 0.251, 2.519, 7.790),
    "I_":    UFFAtomParameters(1.382, 4.500, 0.339, 2.650, 6.822),
}
# fmt: on

# elements with a single UFF type regardless of bonding
_SINGLE_TYPE = {
    "H": "H_",
    "F": "F_",
    "Si": "Si3",
    "P": "P_3+3",
    "Cl": "Cl",
    "Br": "Br",
    "I": "I_",
}


def _max_bond_order(atom: Atom) -> float:
    orders = [
        b.order for b in atom.molecule.bonds if atom.index in (b.i, b.j)
    ]
    return max(orders) if orders else 0.0


def assign_atom_type(atom: Atom) -> str | None:
    """
    Pick a UFF atom type from element, bond orders and neighbor count.

    Returns ``None`` when the element has no parameters.
    """
    element = atom.element
    if element in _SINGLE_TYPE:
        return _SINGLE_TYPE[element]

    order = _max_bond_order(atom)
    if element in ("C", "N", "O"):
        if order >= 3.0:
            return f"{element}_1"
        if order >= 2.0:
            return f"{element}_2"
        if order == 1.5:
            return f"{element}_R"
        return f"{element}_3"
    if element == "S":
        return "S_2" if order >= 2.0 else "S_3+2"
    if element == "B":
        return "B_2" if len(atom.neighbors()) == 3 else "B_3"
    return None


def bond_rest_length(a: UFFAtomParameters, b: UFFAtomParameters, order: float) -> float:
    """UFF natural bond length ``r0`` in Å."""
    r_bo = -0.1332 * (a.r1 + b.r1) * np.log(order) if order > 0 else 0.0
    r_en = (
        a.r1 * b.r1 * (np.sqrt(a.chi) - np.sqrt(b.chi)) ** 2
        / (a.chi * a.r1 + b.chi * b.r1)
    )
    return float(a.r1 + b.r1 + r_bo - r_en)


def bond_force_constant(a: UFFAtomParameters, b: UFFAtomParameters, r0: float) -> float:
    """UFF bond force constant in kcal/mol/Å²."""
    return float(664.12 * a.Z1 * b.Z1 / r0**3)


def _excluded_pairs(molecule: Molecule) -> set[tuple[int, int]]:
    """Atom pairs separated by one or two bonds."""
    excluded: set[tuple[int, int]] = set()
    neighbors = [[n.index for n in molecule.neighbors(i)] for i in range(molecule.size())]
    for i, adj in enumerate(neighbors):
        for j in adj:
            excluded.add((min(i, j), max(i, j)))
            for k in neighbors[j]:
                if k != i:
                    excluded.add((min(i, k), max(i, k)))
    return excluded


@register_force_field("uff")
class UFFForceField(ForceField):
    """
    Numpy implementation of the UFF bond and van der Waals terms.

    After :meth:`setup` the force field holds flat parameter arrays; energy
    and gradient evaluation are vectorized over bonds and pairs.

    Attributes
    ----------
    atom_types : list[str]
        UFF type per atom, filled by :meth:`setup`.
    """

    def __init__(self):
        super().__init__()
        self.atom_types: list[str] = []
        self._bond_index = np.zeros((0, 2), dtype=int)
        self._bond_k = np.zeros(0)
        self._bond_r0 = np.zeros(0)
        self._vdw_index = np.zeros((0, 2), dtype=int)
        self._vdw_D = np.zeros(0)
        self._vdw_x = np.zeros(0)

    @property
    def bond_count(self) -> int:
        return int(len(self._bond_k))

    @property
    def vdw_pair_count(self) -> int:
        return int(len(self._vdw_D))

    def bond_parameters(self) -> list[tuple[int, int, float, float]]:
        """``(i, j, k, r0)`` for every bond term."""
        return [
            (int(i), int(j), float(k), float(r0))
            for (i, j), k, r0 in zip(self._bond_index, self._bond_k, self._bond_r0)
        ]

    def vdw_parameters(self) -> list[tuple[int, int, float, float]]:
        """``(i, j, D_ij, x_ij)`` for every van der Waals pair."""
        return [
            (int(i), int(j), float(D), float(x))
            for (i, j), D, x in zip(self._vdw_index, self._vdw_D, self._vdw_x)
        ]

    def setup(self) -> None:
        molecule = self._require_molecule()

        types = []
        for atom in molecule.atoms:
            atom_type = assign_atom_type(atom)
            if atom_type is None:
                raise ForceFieldSetupError(
                    f"No UFF parameters for atom {atom.index} ({atom.element})."
                )
            types.append(atom_type)
        self.atom_types = types
        params = [UFF_PARAMETERS[t] for t in types]

        bond_index, bond_k, bond_r0 = [], [], []
        for bond in molecule.bonds:
            a, b = params[bond.i], params[bond.j]
            r0 = bond_rest_length(a, b, bond.order)
            bond_index.append((bond.i, bond.j))
            bond_r0.append(r0)
            bond_k.append(bond_force_constant(a, b, r0))

        excluded = _excluded_pairs(molecule)
        vdw_index, vdw_D, vdw_x = [], [], []
        n = molecule.size()
        for i in range(n):
            for j in range(i + 1, n):
                if (i, j) in excluded:
                    continue
                vdw_index.append((i, j))
                vdw_D.append(np.sqrt(params[i].D1 * params[j].D1))
                vdw_x.append(np.sqrt(params[i].x1 * params[j].x1))

        self._bond_index = np.asarray(bond_index, dtype=int).reshape((-1, 2))
        self._bond_k = np.asarray(bond_k, dtype=float)
        self._bond_r0 = np.asarray(bond_r0, dtype=float)
        self._vdw_index = np.asarray(vdw_index, dtype=int).reshape((-1, 2))
        self._vdw_D = np.asarray(vdw_D, dtype=float)
        self._vdw_x = np.asarray(vdw_x, dtype=float)

        logger.debug(
            "UFF setup: %d atoms, %d bonds, %d vdW pairs",
            n,
            self.bond_count,
            self.vdw_pair_count,
        )

    @staticmethod
    def _pair_geometry(xyz: np.ndarray, index: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        d = xyz[index[:, 0]] - xyz[index[:, 1]]
        r = np.linalg.norm(d, axis=1)
        return d, r

    def energy(self, coordinates: CartesianCoordinates) -> float:
        xyz = coordinates.to_array()
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            _, rb = self._pair_geometry(xyz, self._bond_index)
            e_bond = 0.5 * self._bond_k * (rb - self._bond_r0) ** 2

            _, rv = self._pair_geometry(xyz, self._vdw_index)
            s6 = (self._vdw_x / rv) ** 6
            e_vdw = self._vdw_D * (s6 * s6 - 2.0 * s6)

        return float(np.sum(e_bond) + np.sum(e_vdw))

    def gradient(self, coordinates: CartesianCoordinates) -> np.ndarray:
        xyz = coordinates.to_array()
        grad = np.zeros_like(xyz)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            d, rb = self._pair_geometry(xyz, self._bond_index)
            dE = self._bond_k * (rb - self._bond_r0)
            g = (dE / rb)[:, None] * d
            np.add.at(grad, self._bond_index[:, 0], g)
            np.add.at(grad, self._bond_index[:, 1], -g)

            d, rv = self._pair_geometry(xyz, self._vdw_index)
            s6 = (self._vdw_x / rv) ** 6
            dE = 12.0 * self._vdw_D * (s6 - s6 * s6) / rv
            g = (dE / rv)[:, None] * d
            np.add.at(grad, self._vdw_index[:, 0], g)
            np.add.at(grad, self._vdw_index[:, 1], -g)
        return grad
