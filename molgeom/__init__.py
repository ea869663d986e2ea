"""
molgeom - Molecular geometry optimization
=========================================

Force-field driven local minimization of molecular 3D coordinates.

Public API
----------
Molecule : Minimal atoms/bonds/positions model.
CartesianCoordinates : Working coordinate set.
ForceField : Energy/gradient oracle base class.
register_force_field, create_force_field, force_fields : Force-field registry.
MoleculeGeometryOptimizer : Line-search optimizer for one molecule.
OptimizerSettings : Line-search and convergence parameters.
run_optimization, OptimizationConfig, OptimizationResult : High-level API.

Built-in force fields are ``"uff"`` (numpy) and ``"uff-openmm"`` (OpenMM).

Examples
--------
>>> from molgeom import Molecule, MoleculeGeometryOptimizer
>>> water = Molecule(
...     ["O", "H", "H"],
...     [[0.0, 0.0, 0.0], [1.1, 0.0, 0.0], [-0.3, 1.0, 0.0]],
...     bonds=[(0, 1), (0, 2)],
... )
>>> MoleculeGeometryOptimizer.optimize_coordinates(water)
True
"""

from molgeom.coordinates import CartesianCoordinates
from molgeom.errors import (
    ForceFieldSetupError,
    NoMoleculeError,
    OptimizerError,
    UnsupportedForceFieldError,
)
from molgeom.forcefield import (
    ForceField,
    create_force_field,
    force_fields,
    register_force_field,
    unregister_force_field,
)
from molgeom.molecule import Atom, Bond, Molecule
from molgeom.optimizer import MoleculeGeometryOptimizer, OptimizerSettings
from molgeom.run import OptimizationConfig, OptimizationResult, run_optimization

# built-in force fields register on import
import molgeom.uff  # noqa: E402,F401  isort:skip
import molgeom.openmm_forcefield  # noqa: E402,F401  isort:skip

__all__ = [
    "Atom",
    "Bond",
    "Molecule",
    "CartesianCoordinates",
    "ForceField",
    "register_force_field",
    "unregister_force_field",
    "create_force_field",
    "force_fields",
    "MoleculeGeometryOptimizer",
    "OptimizerSettings",
    "OptimizationConfig",
    "OptimizationResult",
    "run_optimization",
    "OptimizerError",
    "NoMoleculeError",
    "UnsupportedForceFieldError",
    "ForceFieldSetupError",
]
