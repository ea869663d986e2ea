"""
molgeom.coordinates
===================

Working coordinate storage for geometry optimization.

:class:`CartesianCoordinates` is an owned ``(n, 3)`` array of positions in Å,
indexed like the molecule's atoms. The optimizer moves atoms here, never on
the molecule itself, so tentative line-search moves can be undone with a
plain copy.

Examples
--------
>>> import numpy as np
>>> coords = CartesianCoordinates.from_positions([[0, 0, 0], [1, 0, 0]])
>>> coords.add_scaled(np.ones((2, 3)), -0.5)
>>> coords.position(1)
array([ 0.5, -0.5, -0.5])
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

from molgeom.helpers import as_angstrom

if TYPE_CHECKING:
    from molgeom.molecule import Molecule


class CartesianCoordinates:
    """
    Fixed-length set of 3D points.

    Parameters
    ----------
    size : int, default=0
        Number of points; all start at the origin.

    Notes
    -----
    The length never changes after construction. :meth:`assign` copies values
    in place and requires equal length.
    """

    def __init__(self, size: int = 0):
        self._data = np.zeros((int(size), 3), dtype=np.float64)

    # Construction -------------------------------------------------------

    @classmethod
    def from_positions(cls, positions: ArrayLike) -> CartesianCoordinates:
        """
        Copy an ``(n, 3)`` array (or OpenMM length quantity) into a new set.

        Raises
        ------
        ValueError
            If the input is not shaped ``(n, 3)``.
        """
        data = np.array(as_angstrom(positions), dtype=np.float64)
        if data.size == 0:
            data = data.reshape((0, 3))
        if data.ndim != 2 or data.shape[1] != 3:
            raise ValueError("positions must have shape (n, 3)")
        coords = cls(0)
        coords._data = data
        return coords

    @classmethod
    def from_molecule(cls, molecule: Molecule) -> CartesianCoordinates:
        """Snapshot the current atom positions of ``molecule``."""
        return cls.from_positions(molecule.positions())

    def copy(self) -> CartesianCoordinates:
        other = CartesianCoordinates(0)
        other._data = self._data.copy()
        return other

    def assign(self, other: CartesianCoordinates) -> None:
        """Overwrite every position with the values from ``other``."""
        if len(other) != len(self):
            raise ValueError("cannot assign coordinates of a different size")
        self._data[...] = other._data

    # Access -------------------------------------------------------------

    def size(self) -> int:
        return int(self._data.shape[0])

    def __len__(self) -> int:
        return self.size()

    def position(self, index: int) -> np.ndarray:
        return self._data[index].copy()

    def set_position(self, index: int, position: ArrayLike) -> None:
        self._data[index] = np.asarray(position, dtype=np.float64)

    def __getitem__(self, index):
        return self._data[index]

    def __setitem__(self, index, value) -> None:
        self._data[index] = value

    def to_array(self) -> np.ndarray:
        """Copy of the underlying ``(n, 3)`` array."""
        return self._data.copy()

    # Arithmetic ---------------------------------------------------------

    def add_scaled(self, vectors: ArrayLike, scale: float) -> None:
        """In place ``self[i] += vectors[i] * scale`` for every point."""
        v = np.asarray(vectors, dtype=np.float64)
        if v.shape != self._data.shape:
            raise ValueError("vector array shape mismatch")
        self._data += v * float(scale)

    def distance(self, i: int, j: int) -> float:
        return float(np.linalg.norm(self._data[i] - self._data[j]))

    def __eq__(self, other) -> bool:
        if not isinstance(other, CartesianCoordinates):
            return NotImplemented
        return self._data.shape == other._data.shape and bool(
            np.array_equal(self._data, other._data)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"CartesianCoordinates({self.size()} points)"
