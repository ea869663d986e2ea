"""
molgeom.forcefield
==================

Force-field contract and name registry.

A force field is an energy/gradient oracle. The optimizer never looks at its
terms; it only needs :meth:`ForceField.setup`, :meth:`ForceField.energy`,
:meth:`ForceField.gradient`, :meth:`ForceField.rmsg` and
:meth:`ForceField.atom_count`. All evaluation happens against a caller
supplied :class:`~molgeom.coordinates.CartesianCoordinates`, so tentative
moves never touch the molecule.

Force fields are created by name through a registry:

>>> from molgeom.forcefield import create_force_field, force_fields
>>> "uff" in force_fields()
True
>>> ff = create_force_field("uff")
>>> ff.name
'uff'

New implementations register themselves with :func:`register_force_field`:

>>> @register_force_field("harmonic-demo")  # doctest: +SKIP
... class Demo(ForceField):
...     ...
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Callable

import numpy as np

from molgeom.coordinates import CartesianCoordinates
from molgeom.errors import ForceFieldSetupError, UnsupportedForceFieldError
from molgeom.helpers import rms
from molgeom.molecule import Molecule

logger = logging.getLogger(__name__)

ForceFieldFactory = Callable[[], "ForceField"]

_REGISTRY: dict[str, ForceFieldFactory] = {}


class ForceField(ABC):
    """
    Abstract energy/gradient oracle bound to one molecule.

    Subclasses implement :meth:`setup`, :meth:`energy` and :meth:`gradient`.
    :meth:`energy` may return NaN for degenerate geometries (overlapping
    atoms); callers treat that as a normal outcome.

    Attributes
    ----------
    name : str
        Registry name, filled in by :func:`create_force_field`.
    """

    name: str = ""

    def __init__(self):
        self._molecule: Molecule | None = None

    @property
    def molecule(self) -> Molecule | None:
        return self._molecule

    def set_molecule(self, molecule: Molecule | None) -> None:
        self._molecule = molecule

    def atom_count(self) -> int:
        return self._molecule.size() if self._molecule is not None else 0

    def _require_molecule(self) -> Molecule:
        if self._molecule is None:
            raise ForceFieldSetupError("No molecule set on force field.")
        return self._molecule

    @abstractmethod
    def setup(self) -> None:
        """
        Bind parameters to the molecule.

        Raises
        ------
        ForceFieldSetupError
            If the molecule cannot be handled.
        """

    @abstractmethod
    def energy(self, coordinates: CartesianCoordinates) -> float:
        """Total potential energy at ``coordinates``; may be NaN."""

    @abstractmethod
    def gradient(self, coordinates: CartesianCoordinates) -> np.ndarray:
        """``(n, 3)`` energy gradient at ``coordinates``."""

    def rmsg(self, coordinates: CartesianCoordinates) -> float:
        """
        Root-mean-square gradient, ``sqrt(sum |g_i|^2 / 3n)``.

        Used as the convergence metric.
        """
        value = rms(self.gradient(coordinates))
        if math.isnan(value):
            logger.debug("%s: NaN in gradient", self.name or type(self).__name__)
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, atoms={self.atom_count()})"


# Registry -------------------------------------------------------------------


def _key(name: str) -> str:
    return name.strip().lower()


def register_force_field(name: str, factory: ForceFieldFactory | None = None):
    """
    Register ``factory`` under ``name``.

    Usable as a plain call or as a class decorator. Registering an existing
    name replaces the previous factory.

    Parameters
    ----------
    name : str
        Case-insensitive identifier, e.g. ``"uff"``.
    factory : callable, optional
        Zero-argument callable returning a :class:`ForceField`.
    """

    def _register(f: ForceFieldFactory) -> ForceFieldFactory:
        key = _key(name)
        if key in _REGISTRY:
            logger.debug("Replacing force field factory for '%s'", key)
        _REGISTRY[key] = f
        return f

    if factory is not None:
        return _register(factory)
    return _register


def unregister_force_field(name: str) -> None:
    """Remove ``name`` from the registry; unknown names are ignored."""
    _REGISTRY.pop(_key(name), None)


def force_fields() -> list[str]:
    """Sorted list of registered force-field names."""
    return sorted(_REGISTRY)


def create_force_field(name: str) -> ForceField:
    """
    Instantiate the force field registered as ``name``.

    Raises
    ------
    UnsupportedForceFieldError
        If nothing is registered under ``name``.
    """
    key = _key(name)
    try:
        factory = _REGISTRY[key]
    except KeyError:
        raise UnsupportedForceFieldError(name) from None
    ff = factory()
    ff.name = key
    return ff
