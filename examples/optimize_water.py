# examples/optimize_water.py
#
# Linear walkthrough of molgeom:
# - Build a distorted water molecule
# - Step the optimizer by hand and watch the energy drop
# - Optimize with the static helper and with the OpenMM-backed force field
# - Run asynchronously
#
# Requirements:
#   - numpy, OpenMM installed

from __future__ import annotations

import numpy as np

from molgeom import Molecule, MoleculeGeometryOptimizer
from molgeom.run import OptimizationConfig, run_optimization


def make_water() -> Molecule:
    return Molecule(
        ["O", "H", "H"],
        [[0.0, 0.0, 0.0], [1.2, 0.0, 0.0], [-0.4, 1.1, 0.0]],
        bonds=[(0, 1), (0, 2)],
        name="water",
    )


# ---- 1) step by hand ---------------------------------------------------------
water = make_water()
optimizer = MoleculeGeometryOptimizer(water)  # default force field: "uff"
if not optimizer.setup():
    raise SystemExit(optimizer.error_string())

print(f"start   E = {optimizer.energy():10.4f} kcal/mol")
for i in range(5):
    converged = optimizer.step()
    print(f"step {i + 1}  E = {optimizer.energy():10.4f}  rmsg = {optimizer.rmsg():.3e}")
    if converged:
        break

# the molecule itself has not moved yet
optimizer.write_coordinates()
print("O-H after 5 steps:", water.distance(0, 1), water.distance(0, 2))

# ---- 2) one-liners -----------------------------------------------------------
water = make_water()
print("optimize_coordinates:", MoleculeGeometryOptimizer.optimize_coordinates(water))
print("O-H:", np.round([water.distance(0, 1), water.distance(0, 2)], 4))

water = make_water()
result = run_optimization(water, OptimizationConfig(force_field="uff-openmm", verbose=True))
print("OpenMM result:", result.converged, result.steps, "steps")

# ---- 3) asynchronous -----------------------------------------------------------
water = make_water()
future = MoleculeGeometryOptimizer.optimize_coordinates_async(water)
print("async:", future.result())  # read positions only after the future is done
