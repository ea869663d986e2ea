"""
molgeom.optimizer
=================

Force-field driven geometry optimization of a single molecule.

:class:`MoleculeGeometryOptimizer` binds a force field (looked up by name,
``"uff"`` by default) to a molecule, refines a private copy of the atom
positions with a steepest-descent line search, and writes the result back
onto the molecule once converged.

The easiest entry point is the static helper:

>>> from molgeom import Molecule, MoleculeGeometryOptimizer
>>> h2 = Molecule(["H", "H"], [[0, 0, 0], [0.9, 0, 0]], bonds=[(0, 1)])
>>> MoleculeGeometryOptimizer.optimize_coordinates(h2)
True

Line search
-----------
Each :meth:`MoleculeGeometryOptimizer.step` is an independent, bounded line
search along the gradient computed at its start:

1. Evaluate the energy and gradient once.
2. For up to ``line_search_steps`` iterations, move every atom by
   ``-gradient * step`` and compare energies:

   - NaN energy: restore, wiggle each atom by ``wiggle`` Å in a random
     direction, recompute the gradient; the step size is left alone.
   - lower, by less than ``step_convergence``: stop.
   - lower: keep the move, double the step (clamped to ``max_step``).
   - higher: undo the move, shrink the step tenfold.

3. Report convergence as ``rmsg < convergence``.

The step size restarts from ``initial_step`` on every call.
"""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from molgeom.coordinates import CartesianCoordinates
from molgeom.errors import ForceFieldSetupError, NoMoleculeError, OptimizerError
from molgeom.forcefield import ForceField, create_force_field
from molgeom.helpers import random_direction
from molgeom.molecule import Molecule

logger = logging.getLogger(__name__)

DEFAULT_FORCE_FIELD = "uff"


@dataclass(frozen=True)
class OptimizerSettings:
    """
    Line-search and convergence parameters.

    Parameters
    ----------
    initial_step : float, default=0.05
        Step size (Å per unit gradient) at the start of every ``step()``.
    step_convergence : float, default=1e-5
        Energy change below which an improving move ends the line search.
    line_search_steps : int, default=10
        Inner iterations per ``step()``.
    convergence : float, default=0.1
        RMS gradient threshold.
    max_step : float, default=1.0
        Upper clamp for the step size.
    step_growth : float, default=2.0
        Factor applied after an accepted move.
    step_shrink : float, default=0.1
        Factor applied after a rejected move.
    wiggle : float, default=1.0
        Random displacement (Å) applied to every atom after a NaN energy.
    max_steps : int or None, default=None
        Cap on ``step()`` calls in :meth:`MoleculeGeometryOptimizer.optimize`.
        ``None`` means step until converged, however long that takes.
    seed : int or None, default=None
        Seed for the random generator used by the wiggle.

    Examples
    --------
    >>> OptimizerSettings().initial_step
    0.05
    >>> OptimizerSettings(max_steps=500).max_steps
    500
    """

    initial_step: float = 0.05
    step_convergence: float = 1e-5
    line_search_steps: int = 10
    convergence: float = 0.1
    max_step: float = 1.0
    step_growth: float = 2.0
    step_shrink: float = 0.1
    wiggle: float = 1.0
    max_steps: int | None = None
    seed: int | None = None


class MoleculeGeometryOptimizer:
    """
    Geometry optimizer for one molecule.

    Parameters
    ----------
    molecule : Molecule, optional
        Molecule to optimize. Not owned; only written to at the end of
        :meth:`optimize`.
    force_field : str, default="uff"
        Registry name of the force field created by :meth:`setup`.
    settings : OptimizerSettings, optional

    Attributes
    ----------
    settings : OptimizerSettings
    steps_taken : int
        ``step()`` calls since the last successful :meth:`setup`.

    Notes
    -----
    State machine: unconfigured until :meth:`setup` succeeds, then ready;
    :meth:`optimize` ends converged (``True``) or failed (``False``). A failed
    setup leaves the optimizer usable for another attempt.
    """

    def __init__(
        self,
        molecule: Molecule | None = None,
        force_field: str = DEFAULT_FORCE_FIELD,
        settings: OptimizerSettings | None = None,
    ):
        self._molecule = molecule
        self._force_field: ForceField | None = None
        self._force_field_name = force_field
        self._error_string = ""
        self._coordinates: CartesianCoordinates | None = None
        self.settings = settings or OptimizerSettings()
        self.steps_taken = 0
        self._rng = np.random.default_rng(self.settings.seed)

    # Properties ---------------------------------------------------------

    def set_molecule(self, molecule: Molecule | None) -> None:
        if molecule is not self._molecule:
            self._molecule = molecule

    @property
    def molecule(self) -> Molecule | None:
        return self._molecule

    def set_force_field(self, name: str) -> bool:
        """
        Choose the force field by name.

        Always returns ``True``; an unknown name is reported by :meth:`setup`.
        """
        self._force_field_name = name
        return True

    @property
    def force_field(self) -> str:
        """Name of the force field used for optimization."""
        return self._force_field_name

    @property
    def force_field_instance(self) -> ForceField | None:
        """The force field created by the last :meth:`setup`, if any."""
        return self._force_field

    @property
    def coordinates(self) -> CartesianCoordinates | None:
        """Working coordinates; ``None`` before a successful setup."""
        return self._coordinates

    # Energy -------------------------------------------------------------

    def energy(self) -> float:
        """Force-field energy at the working coordinates, ``0.0`` if unset."""
        if self._force_field is None or self._coordinates is None:
            return 0.0
        return self._force_field.energy(self._coordinates)

    def rmsg(self) -> float:
        """RMS gradient at the working coordinates, ``0.0`` if unset."""
        if self._force_field is None or self._coordinates is None:
            return 0.0
        return self._force_field.rmsg(self._coordinates)

    # Optimization -------------------------------------------------------

    def _release_force_field(self) -> None:
        self._force_field = None
        self._coordinates = None

    def setup(self) -> bool:
        """
        Create and set up the force field. Returns ``False`` on error.

        On failure :meth:`error_string` explains why; the previous force
        field has already been released.
        """
        try:
            if self._molecule is None:
                raise NoMoleculeError("No molecule specified")

            self._release_force_field()
            force_field = create_force_field(self._force_field_name)
            force_field.set_molecule(self._molecule)
            try:
                force_field.setup()
            except ForceFieldSetupError as e:
                raise ForceFieldSetupError(f"Failed to setup force field. {e}".strip()) from e
        except OptimizerError as e:
            self._error_string = str(e)
            logger.warning("Setup failed: %s", self._error_string)
            return False

        self._force_field = force_field
        self._coordinates = self._molecule.coordinates()
        self.steps_taken = 0
        logger.info(
            "Set up force field '%s' for %d atoms",
            self._force_field_name,
            force_field.atom_count(),
        )
        return True

    def _wiggle(self, saved: CartesianCoordinates) -> None:
        """Reset to ``saved`` displaced by ``settings.wiggle`` Å per atom."""
        coords = self._coordinates
        for i in range(len(coords)):
            position = saved.position(i) + self.settings.wiggle * random_direction(self._rng)
            coords.set_position(i, position)

    def step(self) -> bool:
        """
        Perform one line-search step. Returns ``True`` if converged.

        The optimization is considered converged when the root mean square
        gradient is below ``settings.convergence``. Returns ``False`` without
        doing anything when no molecule or force field is bound.
        """
        if self._molecule is None or self._force_field is None:
            return False

        st = self.settings
        ff = self._force_field
        coords = self._coordinates

        step = st.initial_step
        initial_energy = ff.energy(coords)
        gradient = ff.gradient(coords)

        for _ in range(int(st.line_search_steps)):
            saved = coords.copy()
            coords.add_scaled(gradient, -step)
            final_energy = ff.energy(coords)

            if math.isnan(final_energy):
                # blew up: restart near the saved geometry
                logger.debug("NaN energy at step size %.3g; wiggling atoms", step)
                self._wiggle(saved)
                gradient = ff.gradient(coords)
                continue

            if final_energy < initial_energy and abs(final_energy - initial_energy) < st.step_convergence:
                break
            elif final_energy < initial_energy:
                step = min(step * st.step_growth, st.max_step)
                initial_energy = final_energy
            elif final_energy > initial_energy:
                coords.assign(saved)
                step *= st.step_shrink

        self.steps_taken += 1
        rmsg = ff.rmsg(coords)
        logger.debug(
            "step %d: E=%.8f rmsg=%.3e", self.steps_taken, initial_energy, rmsg
        )
        return rmsg < st.convergence

    def optimize(self) -> bool:
        """
        Optimize the geometry of the molecule. Returns ``True`` if converged.

        Calls :meth:`setup`, then :meth:`step` until converged, then
        :meth:`write_coordinates`. Without ``settings.max_steps`` this only
        returns once converged or once setup fails. With it, giving up leaves
        the molecule untouched and returns ``False``.
        """
        if not self.setup():
            return False

        max_steps = self.settings.max_steps
        done = False
        while not done:
            if max_steps is not None and self.steps_taken >= max_steps:
                self._error_string = f"Optimization did not converge within {max_steps} steps."
                logger.warning("%s", self._error_string)
                return False
            done = self.step()

        self.write_coordinates()
        logger.info(
            "Converged after %d steps (E=%.6f)", self.steps_taken, self.energy()
        )
        return done

    def write_coordinates(self) -> None:
        """Write the optimized coordinates to the molecule."""
        if self._molecule is None or self._force_field is None:
            return

        for i in range(self._molecule.size()):
            self._molecule.atom(i).set_position(self._coordinates.position(i))

    # Error handling -----------------------------------------------------

    def error_string(self) -> str:
        """Description of the last error that occurred."""
        return self._error_string

    # Static methods -----------------------------------------------------

    @staticmethod
    def optimize_coordinates(
        molecule: Molecule, force_field: str = DEFAULT_FORCE_FIELD
    ) -> bool:
        """Optimize the geometry of ``molecule``."""
        return MoleculeGeometryOptimizer(molecule, force_field).optimize()

    @staticmethod
    def optimize_coordinates_async(
        molecule: Molecule, force_field: str = DEFAULT_FORCE_FIELD
    ) -> Future:
        """
        Run :meth:`optimize_coordinates` on a worker thread.

        Returns a future resolving to the success flag. The molecule is
        written before the future completes; do not read its positions
        until then. A running optimization cannot be cancelled.
        """
        return _executor().submit(
            MoleculeGeometryOptimizer.optimize_coordinates, molecule, force_field
        )


_EXECUTOR: ThreadPoolExecutor | None = None
_EXECUTOR_LOCK = threading.Lock()


def _executor() -> ThreadPoolExecutor:
    global _EXECUTOR
    with _EXECUTOR_LOCK:
        if _EXECUTOR is None:
            _EXECUTOR = ThreadPoolExecutor(thread_name_prefix="molgeom")
        return _EXECUTOR
