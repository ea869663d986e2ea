# molgeom/molecule.py
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

from molgeom.helpers import as_angstrom

if TYPE_CHECKING:
    from molgeom.coordinates import CartesianCoordinates


class Atom:
    """
    A single atom inside a :class:`Molecule`.

    Attributes
    ----------
    element : str
        Element symbol with canonical capitalization (``"C"``, ``"Cl"``).
    index : int
        0-based position inside the owning molecule.
    molecule : Molecule
        Back-reference to the owner; used to look up neighbors.
    """

    def __init__(self, molecule: Molecule, element: str, index: int, position):
        self.molecule = molecule
        self.element = element.strip().capitalize()
        self.index = index
        self._position = np.zeros(3)
        self.set_position(position)

    @property
    def position(self) -> np.ndarray:
        """Copy of the atom position in Å."""
        return self._position.copy()

    def set_position(self, position) -> None:
        """Set the position; OpenMM quantities are converted to Å."""
        p = as_angstrom(position).reshape(-1)
        if p.shape != (3,):
            raise ValueError("position must have 3 components")
        self._position = p.copy()

    def neighbors(self) -> list[Atom]:
        return self.molecule.neighbors(self.index)

    def __repr__(self) -> str:
        x, y, z = self._position
        return f"Atom({self.element!r}, {self.index}, [{x:.4f}, {y:.4f}, {z:.4f}])"


@dataclass(frozen=True)
class Bond:
    """Bond between atoms ``i`` and ``j`` (``i < j``) with a bond order."""

    i: int
    j: int
    order: float = 1.0


class Molecule:
    """
    Minimal molecule model consumed by the optimizer.

    Only what geometry optimization needs is modelled: element symbols,
    3D positions in Å, and a bond list. Format parsing lives elsewhere.

    Parameters
    ----------
    elements : sequence of str, optional
        Element symbols, one per atom.
    positions : array-like, shape (n, 3), optional
        Initial positions (Å or an OpenMM length quantity). Zeros if omitted.
    bonds : iterable of (i, j) or (i, j, order), optional
        Covalent bonds.
    name : str, default=""

    Examples
    --------
    >>> water = Molecule(
    ...     ["O", "H", "H"],
    ...     [[0.0, 0.0, 0.0], [0.96, 0.0, 0.0], [-0.24, 0.93, 0.0]],
    ...     bonds=[(0, 1), (0, 2)],
    ... )
    >>> water.formula()
    'H2O'
    """

    def __init__(
        self,
        elements: Sequence[str] = (),
        positions: ArrayLike | None = None,
        bonds: Iterable[Sequence] = (),
        name: str = "",
    ):
        self.name = name
        self._atoms: list[Atom] = []
        self._bonds: list[Bond] = []

        if positions is None:
            pos = np.zeros((len(elements), 3))
        else:
            pos = as_angstrom(positions).reshape(-1, 3)
            if len(pos) != len(elements):
                raise ValueError("positions and elements length mismatch")

        for element, p in zip(elements, pos):
            self.add_atom(element, p)
        for bond in bonds:
            self.add_bond(*bond)

    # Atoms --------------------------------------------------------------

    def add_atom(self, element: str, position=(0.0, 0.0, 0.0)) -> Atom:
        atom = Atom(self, element, len(self._atoms), position)
        self._atoms.append(atom)
        return atom

    def atom(self, index: int) -> Atom:
        return self._atoms[index]

    @property
    def atoms(self) -> list[Atom]:
        return list(self._atoms)

    def size(self) -> int:
        """Number of atoms."""
        return len(self._atoms)

    def __len__(self) -> int:
        return len(self._atoms)

    # Bonds --------------------------------------------------------------

    def add_bond(self, i: int, j: int, order: float = 1.0) -> Bond:
        """
        Add a bond between atoms ``i`` and ``j``.

        Raises
        ------
        IndexError
            If either index is out of range.
        ValueError
            For a self-bond or a duplicate bond.
        """
        n = len(self._atoms)
        if not (0 <= i < n and 0 <= j < n):
            raise IndexError(f"bond ({i}, {j}) out of range for {n} atoms")
        if i == j:
            raise ValueError("an atom cannot be bonded to itself")
        a, b = sorted((int(i), int(j)))
        if any(bond.i == a and bond.j == b for bond in self._bonds):
            raise ValueError(f"duplicate bond ({a}, {b})")
        bond = Bond(a, b, float(order))
        self._bonds.append(bond)
        return bond

    @property
    def bonds(self) -> list[Bond]:
        return list(self._bonds)

    def neighbors(self, index: int) -> list[Atom]:
        """Atoms bonded to atom ``index``, in bond order."""
        result = []
        for bond in self._bonds:
            if bond.i == index:
                result.append(self._atoms[bond.j])
            elif bond.j == index:
                result.append(self._atoms[bond.i])
        return result

    # Geometry -----------------------------------------------------------

    def positions(self) -> np.ndarray:
        """``(n, 3)`` array of positions in Å (a copy)."""
        if not self._atoms:
            return np.zeros((0, 3))
        return np.array([atom.position for atom in self._atoms])

    def coordinates(self) -> CartesianCoordinates:
        """Deep copy of the atom positions as :class:`CartesianCoordinates`."""
        from molgeom.coordinates import CartesianCoordinates

        return CartesianCoordinates.from_molecule(self)

    def distance(self, i: int, j: int) -> float:
        return float(np.linalg.norm(self._atoms[i]._position - self._atoms[j]._position))

    # Composition --------------------------------------------------------

    def formula(self) -> str:
        """
        Hill-order molecular formula (C first, H second, rest alphabetical;
        purely alphabetical when there is no carbon).
        """
        counts = Counter(atom.element for atom in self._atoms)
        if "C" in counts:
            order = ["C"] + (["H"] if "H" in counts else [])
            order += sorted(e for e in counts if e not in ("C", "H"))
        else:
            order = sorted(counts)
        return "".join(e if counts[e] == 1 else f"{e}{counts[e]}" for e in order)

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        return f"Molecule({label}{self.formula() or 'empty'})"
