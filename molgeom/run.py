"""
molgeom.run
===========

Python API for running a complete geometry optimization.

Use :class:`OptimizationConfig` to configure the run and
:func:`run_optimization` to execute it. Unlike
:meth:`MoleculeGeometryOptimizer.optimize_coordinates`, the result carries
energies, the step count and the error message.

Examples
--------
>>> from molgeom import Molecule
>>> from molgeom.run import OptimizationConfig, run_optimization
>>> water = Molecule(
...     ["O", "H", "H"],
...     [[0.0, 0.0, 0.0], [1.1, 0.0, 0.0], [-0.3, 1.0, 0.0]],
...     bonds=[(0, 1), (0, 2)],
... )
>>> result = run_optimization(water, OptimizationConfig(name="water"))
>>> result.converged
True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from molgeom.molecule import Molecule
from molgeom.optimizer import (
    DEFAULT_FORCE_FIELD,
    MoleculeGeometryOptimizer,
    OptimizerSettings,
)


@dataclass
class OptimizationConfig:
    """
    Configuration for a geometry optimization run.

    Parameters
    ----------
    force_field : str, default="uff"
        Registry name of the force field.
    settings : OptimizerSettings, optional
        Line-search parameters; defaults reproduce the classic optimizer.
    name : str, default="molgeom"
        Job name, used for the logger name.
    verbose : bool, default=False
        Whether to log progress to the console.
    log_file : str or None, default=None
        If given, progress is also written to this file.

    Examples
    --------
    >>> config = OptimizationConfig(force_field="uff-openmm", verbose=True)
    >>> config.settings.convergence
    0.1
    """

    force_field: str = DEFAULT_FORCE_FIELD
    settings: OptimizerSettings = field(default_factory=OptimizerSettings)
    name: str = "molgeom"
    verbose: bool = False
    log_file: str | None = None


@dataclass
class OptimizationResult:
    """
    Result of a geometry optimization run.

    Attributes
    ----------
    converged : bool
        Whether the RMS gradient dropped below the threshold.
    energy : float
        Energy at the final working coordinates.
    initial_energy : float
        Energy of the input geometry (``0.0`` if setup failed).
    rms_gradient : float
        RMS gradient at the final working coordinates.
    steps : int
        Number of line-search steps performed.
    force_field : str
    error : str
        Empty on success.
    config : OptimizationConfig
    """

    converged: bool
    energy: float
    initial_energy: float
    rms_gradient: float
    steps: int
    force_field: str
    error: str = ""
    config: OptimizationConfig | None = None


def _setup_logger(name: str, verbose: bool, log_file: str | None = None) -> logging.Logger:
    """Set up logger for the run."""
    logger = logging.getLogger(f"molgeom.{name}")
    logger.setLevel(logging.INFO)
    if logger.hasHandlers():
        logger.handlers.clear()

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    if verbose:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(console)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger


def run_optimization(
    molecule: Molecule, config: OptimizationConfig | None = None
) -> OptimizationResult:
    """
    Optimize ``molecule`` in place and report how it went.

    Parameters
    ----------
    molecule : Molecule
        Molecule to optimize; its atom positions are updated on success.
    config : OptimizationConfig, optional

    Returns
    -------
    OptimizationResult
    """
    config = config or OptimizationConfig()
    logger = _setup_logger(config.name, config.verbose, config.log_file)

    logger.info("Job: %s", config.name)
    logger.info("Molecule: %r (%d atoms)", molecule, len(molecule))
    logger.info("Force field: %s", config.force_field)

    optimizer = MoleculeGeometryOptimizer(molecule, config.force_field, config.settings)
    if not optimizer.setup():
        logger.error("Setup failed: %s", optimizer.error_string())
        return OptimizationResult(
            converged=False,
            energy=0.0,
            initial_energy=0.0,
            rms_gradient=0.0,
            steps=0,
            force_field=config.force_field,
            error=optimizer.error_string(),
            config=config,
        )

    initial_energy = optimizer.energy()
    logger.info("Initial energy: %.6f", initial_energy)

    converged = optimizer.optimize()
    energy = optimizer.energy()
    rms_gradient = optimizer.rmsg()

    if converged:
        logger.info(
            "Converged in %d steps. Final energy: %.6f (rmsg %.3e)",
            optimizer.steps_taken,
            energy,
            rms_gradient,
        )
    else:
        logger.warning("Not converged: %s", optimizer.error_string())

    return OptimizationResult(
        converged=converged,
        energy=energy,
        initial_energy=initial_energy,
        rms_gradient=rms_gradient,
        steps=optimizer.steps_taken,
        force_field=config.force_field,
        error="" if converged else optimizer.error_string(),
        config=config,
    )
