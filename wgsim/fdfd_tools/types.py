"""This module defines types for the package."""
from typing import Tuple

import numpy as np

# Define useful types.
# A 2D field where each grid point takes on a single (complex) value.
ScalarField = np.ndarray
# The in-plane electric field [Ex, Ey] of the Hz-polarized problem.
FieldPair = Tuple[ScalarField, ScalarField]
# Number of grid cells along x and y, (Nx, Ny).
Dims = Tuple[int, int]
# Fractional grid offsets (x, y) at which a quantity is sampled.
Offset = Tuple[float, float]
# Padding applied on each side of each axis, ((x_lo, x_hi), (y_lo, y_hi)).
PadWidths = Tuple[Tuple[int, int], Tuple[int, int]]
# Inclusive cell indices of a rectangular contour, (x0, x1, y0, y1).
Box = Tuple[int, int, int, int]
