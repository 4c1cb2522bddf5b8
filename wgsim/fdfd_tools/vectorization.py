"""
Functions for moving between 2D fields and their 1D array representation.

Vectorized versions of the field use column-major (ie., Fortran, Matlab)
ordering, so that index (i, j) of a field with dims (Nx, Ny) maps to
i + j * Nx. A multi-component field [f_0, f_1, ...] is vectorized by
stacking the vectorized components.
"""
from typing import List, Sequence

import numpy as np

from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import types


def vec(f: Sequence[types.ScalarField]) -> np.ndarray:
    """
    Create a 1D ndarray from a list of 2D field components.

    :param f: Field components [f_0, f_1, ...], each of the same shape.
    :return: 1D ndarray containing the linearized field
    """
    return np.hstack(tuple(np.asarray(fi).flatten(order='F') for fi in f))


def unvec(v: np.ndarray, dims: types.Dims) -> List[types.ScalarField]:
    """
    Perform the inverse of vec(): split a 1D ndarray into 2D components.

    :param v: 1D ndarray holding one or more components of shape dims.
    :param dims: Shape of each component.
    :return: [f_0, f_1, ...] where each f_ is an ndarray of shape dims.
    :raises ShapeMismatch: If v does not hold a whole number of components.
    """
    n = int(np.prod(dims))
    if n == 0 or v.size % n != 0:
        raise error.ShapeMismatch(
            'Cannot reshape vector of size {} into components of shape {}'.
            format(v.size, tuple(dims)))
    return [vi.reshape(dims, order='F') for vi in np.split(v, v.size // n)]
