"""
molgeom.errors
==============

Exception taxonomy for geometry optimization.

The optimizer driver catches these in :meth:`MoleculeGeometryOptimizer.setup`
and turns them into a ``False`` return plus a readable
:meth:`~molgeom.optimizer.MoleculeGeometryOptimizer.error_string`. The
force-field registry and force fields raise them directly.

Classes
-------
OptimizerError : Base class.
NoMoleculeError : No molecule bound to the optimizer.
UnsupportedForceFieldError : Unknown force-field name.
ForceFieldSetupError : A force field rejected the molecule.
"""


class OptimizerError(RuntimeError):
    """Base class for all molgeom errors."""

    pass


class NoMoleculeError(OptimizerError):
    """
    Raised when an operation needs a molecule but none is bound.
    """

    pass


class UnsupportedForceFieldError(OptimizerError, KeyError):
    """
    Raised by :func:`molgeom.forcefield.create_force_field` for a name that
    is not registered.
    """

    def __init__(self, name: str):
        super().__init__(f"Force field '{name}' is not supported.")
        self.name = name

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class ForceFieldSetupError(OptimizerError):
    """
    Raised by :meth:`ForceField.setup` when the molecule cannot be
    parameterized (e.g. an element with no atom type).
    """

    pass
