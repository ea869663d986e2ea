# helpers.py
from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike
from openmm import unit
from openmm.unit import Quantity


def angstrom(array: ArrayLike) -> Quantity:
    """
    Attach Å units to a numeric array or vector.

    Parameters
    ----------
    array : array-like
        Numeric values interpreted as lengths in Å (unitless on input).

    Returns
    -------
    openmm.unit.Quantity
        The same values with units of Å (unit.angstrom).
    """
    return np.asarray(array, dtype=float) * unit.angstrom


def nostrom(quantity: Quantity) -> np.ndarray:
    """
    Strip units from a length vector/array, returning pure Å as floats.

    Parameters
    ----------
    quantity : openmm.unit.Quantity
        Length(s) with units (must be convertible to Å).

    Returns
    -------
    numpy.ndarray
        The numeric values in Å, without units.

    Raises
    ------
    AttributeError
        If a unitless array is passed. Keep this strict to avoid silent mistakes.
    """
    return np.asarray(quantity.value_in_unit(unit.angstrom), dtype=float)


def as_angstrom(value: ArrayLike | Quantity) -> np.ndarray:
    """
    Return ``value`` as a float array in Å.

    Unit-bearing input is converted; plain numbers are taken to be Å already.
    """
    if unit.is_quantity(value):
        return nostrom(value)
    return np.asarray(value, dtype=float)


def nokcal(quantity: Quantity) -> float | np.ndarray:
    """
    Strip units from an energy, returning kcal/mol as plain numbers.

    Parameters
    ----------
    quantity : openmm.unit.Quantity
        Energy with units.

    Returns
    -------
    float or numpy.ndarray
        Numeric value(s) in kcal/mol.
    """
    return quantity.value_in_unit(unit.kilocalories_per_mole)


def random_direction(rng: np.random.Generator) -> np.ndarray:
    """
    Return a random unit vector.

    Components are drawn uniformly from [-1, 1] and the result normalized,
    the same way sampling spaces pick a random rotation axis.
    """
    axis = rng.uniform(-1, 1, 3)
    norm = np.linalg.norm(axis)
    while norm == 0.0:
        axis = rng.uniform(-1, 1, 3)
        norm = np.linalg.norm(axis)
    return axis / norm


def rms(vectors: ArrayLike) -> float:
    """
    Root-mean-square over all components of an ``(n, 3)`` array.

    Returns ``0.0`` for an empty array.
    """
    v = np.asarray(vectors, dtype=float)
    if v.size == 0:
        return 0.0
    return float(np.sqrt(np.sum(v * v) / v.size))
