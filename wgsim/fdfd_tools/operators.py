"""
Sparse matrix operators for the 2D Hz-polarized (Ex, Ey, Hz) wave equations.

These functions return sparse-matrix (scipy.sparse.spmatrix) representations of
 a variety of operators, intended for use with fields vectorized using the
 fdfd_tools.vec() and .unvec() functions (column-major/Fortran ordering).

Field locations follow the staggering table in fdfd_tools.grid: Hz at the
 cell centers, Ex and Ey on the cell edges. The time dependence is
 exp(-i * omega * t), so that

    curl E = i * omega * H - M
    curl H = -i * omega * eps * E

 and a mode travelling towards +x varies as exp(+i * beta * x).

The following operators are included:
- Hz-only wave operator (scalar formulation)
- E-only wave operator (coupled Ex/Ey formulation)
- Curl for use with E, H fields
- H to E and E to H conversion

Also available:
- Periodic and mirrored shifts
- Discrete derivatives
"""
from typing import List, Optional, Tuple

import numpy as np
import scipy.sparse as sparse

from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import types
from wgsim.fdfd_tools.grid import Boundary, PmlSpec, Staggering
from wgsim.fdfd_tools.grid import boundary_index, stretch_operator
from wgsim.fdfd_tools.vectorization import vec


def shift(dims: types.Dims,
          shift_distance: Tuple[int, int],
          boundary: Boundary = Boundary.PERIODIC) -> sparse.spmatrix:
    """
    Operator shifting a vectorized field, (S f)[i, j] = f[i + sx, j + sy].

    Indices past the edge of the grid are wrapped (periodic) or reflected back
    into the grid (mirror).

    :param dims: Shape of the grid being shifted
    :param shift_distance: Number of cells (sx, sy) to shift by. May be negative.
    :param boundary: Boundary policy for indices falling off the grid
    :return: Sparse matrix for performing the shift
    """
    if len(dims) != 2:
        raise error.InvalidDimensions('Invalid shape: {}'.format(dims))
    dims = tuple(int(d) for d in dims)

    ijk0 = np.meshgrid(*[np.arange(n) for n in dims], indexing='ij')
    ijk = [
        boundary_index(ind + s, n, boundary)
        for ind, s, n in zip(ijk0, shift_distance, dims)
    ]

    n = int(np.prod(dims))
    row_ind = np.ravel_multi_index(ijk0, dims, order='F').flatten(order='F')
    col_ind = np.ravel_multi_index(ijk, dims, order='F').flatten(order='F')
    return sparse.csr_matrix((np.ones(n), (row_ind, col_ind)), shape=(n, n))


def inverse_shift(dims: types.Dims,
                  shift_distance: Tuple[int, int],
                  boundary: Boundary = Boundary.PERIODIC) -> sparse.spmatrix:
    """
    Declared inverse of shift(dims, shift_distance, boundary), i.e. the
     opposite shift.

    For periodic boundaries this is the exact inverse (and the transpose).
    Mirror shifts are not bijective: the product with the forward shift is
     the identity only on cells at least |shift_distance| away from the edges.
    """
    return shift(dims, tuple(-s for s in shift_distance), boundary)


def deriv_forward(dims: types.Dims,
                  boundary: Boundary = Boundary.PERIODIC
                 ) -> List[sparse.spmatrix]:
    """
    Utility operators for taking discretized derivatives (forward variant),
     (D f)[i] = f[i + 1] - f[i].

    :param dims: Shape of the grid
    :param boundary: Boundary policy of the underlying shifts
    :return: [Dx, Dy]
    """
    n = int(np.prod(dims))
    return [
        shift(dims, unit, boundary) - sparse.eye(n)
        for unit in ((1, 0), (0, 1))
    ]


def deriv_back(dims: types.Dims,
               boundary: Boundary = Boundary.PERIODIC) -> List[sparse.spmatrix]:
    """
    Utility operators for taking discretized derivatives (backward variant),
     (D f)[i] = f[i] - f[i - 1].

    :param dims: Shape of the grid
    :param boundary: Boundary policy of the underlying shifts
    :return: [Dx, Dy]
    """
    n = int(np.prod(dims))
    return [
        sparse.eye(n) - shift(dims, unit, boundary)
        for unit in ((-1, 0), (0, -1))
    ]


def curl_h(dims: types.Dims,
           boundary: Boundary = Boundary.PERIODIC,
           pml: Optional[PmlSpec] = None) -> sparse.spmatrix:
    """
    Curl operator for use with the Hz field, Hz -> [curl_x, curl_y].

    Uses forward differences, landing on the Ex (X_EDGE) and Ey (Y_EDGE)
     locations, each scaled by the PML stretching sampled there.

    :param dims: Shape of the grid
    :param boundary: Boundary policy of the derivatives
    :param pml: PML parameters, or None for no PML
    :return: Sparse matrix of shape (2 * N, N)
    """
    dx, dy = deriv_forward(dims, boundary)
    sx = stretch_operator(dims, 0, Staggering.Y_EDGE, pml)
    sy = stretch_operator(dims, 1, Staggering.X_EDGE, pml)
    return sparse.vstack([sy @ dy, -sx @ dx]).tocsr()


def curl_e(dims: types.Dims,
           boundary: Boundary = Boundary.PERIODIC,
           pml: Optional[PmlSpec] = None) -> sparse.spmatrix:
    """
    Curl operator for use with the in-plane E field, [Ex, Ey] -> curl_z.

    Uses backward differences, landing on the Hz (CENTER) locations.

    :param dims: Shape of the grid
    :param boundary: Boundary policy of the derivatives
    :param pml: PML parameters, or None for no PML
    :return: Sparse matrix of shape (N, 2 * N)
    """
    dx, dy = deriv_back(dims, boundary)
    sx = stretch_operator(dims, 0, Staggering.CENTER, pml)
    sy = stretch_operator(dims, 1, Staggering.CENTER, pml)
    return sparse.hstack([-sy @ dy, sx @ dx]).tocsr()


def _check_eps(eps_x: np.ndarray, eps_y: np.ndarray) -> types.Dims:
    if eps_x.ndim != 2 or eps_x.shape != eps_y.shape:
        raise error.ShapeMismatch(
            'Permittivity components have shapes {} and {}'.format(
                eps_x.shape, eps_y.shape))
    return eps_x.shape


def h_full(omega: float,
           eps_x: np.ndarray,
           eps_y: np.ndarray,
           boundary: Boundary = Boundary.PERIODIC,
           pml: Optional[PmlSpec] = None) -> sparse.spmatrix:
    """
    Wave operator curl_e (1/eps) curl_h - omega**2, for use with Hz,
     with wave equation
    (curl (1/eps) curl - omega**2) Hz = i * omega * M

    For eps = 1 and no PML this is the five-point Laplacian stencil
     (4 on the diagonal, -1 on the neighbors) shifted by -omega**2.

    :param omega: Angular frequency of the simulation
    :param eps_x: Permittivity at the Ex locations
    :param eps_y: Permittivity at the Ey locations
    :param boundary: Boundary policy of the derivatives
    :param pml: PML parameters, or None for no PML
    :return: Sparse matrix of shape (N, N) containing the wave operator
    """
    dims = _check_eps(eps_x, eps_y)
    inv_eps = sparse.diags(1 / vec([eps_x, eps_y]))
    n = int(np.prod(dims))

    op = (curl_e(dims, boundary, pml) @ inv_eps @ curl_h(dims, boundary, pml) -
          omega**2 * sparse.eye(n))
    return op.tocsr()


def e_full(omega: float,
           eps_x: np.ndarray,
           eps_y: np.ndarray,
           boundary: Boundary = Boundary.MIRROR,
           pml: Optional[PmlSpec] = None) -> sparse.spmatrix:
    """
    Wave operator curl_h curl_e - omega**2 * eps, for use with [Ex, Ey],
     with wave equation
    (curl curl - omega**2 * eps) E = -curl M

    :param omega: Angular frequency of the simulation
    :param eps_x: Permittivity at the Ex locations
    :param eps_y: Permittivity at the Ey locations
    :param boundary: Boundary policy of the derivatives
    :param pml: PML parameters, or None for no PML
    :return: Sparse matrix of shape (2 * N, 2 * N) containing the wave operator
    """
    dims = _check_eps(eps_x, eps_y)
    e = sparse.diags(vec([eps_x, eps_y]))

    op = (curl_h(dims, boundary, pml) @ curl_e(dims, boundary, pml) -
          omega**2 * e)
    return op.tocsr()


def h2e(omega: float,
        eps_x: np.ndarray,
        eps_y: np.ndarray,
        boundary: Boundary = Boundary.PERIODIC,
        pml: Optional[PmlSpec] = None) -> sparse.spmatrix:
    """
    Utility operator for converting the Hz field into [Ex, Ey],
     E = (i / omega) (1/eps) curl_h Hz. Assumes no electric current.

    :param omega: Angular frequency of the simulation
    :param eps_x: Permittivity at the Ex locations
    :param eps_y: Permittivity at the Ey locations
    :param boundary: Boundary policy of the derivatives
    :param pml: PML parameters, or None for no PML
    :return: Sparse matrix for converting Hz to vec([Ex, Ey])
    """
    dims = _check_eps(eps_x, eps_y)
    return sparse.diags(1j / (omega * vec([eps_x, eps_y]))) @ curl_h(
        dims, boundary, pml)


def e2h(omega: float,
        dims: types.Dims,
        boundary: Boundary = Boundary.PERIODIC,
        pml: Optional[PmlSpec] = None) -> sparse.spmatrix:
    """
    Utility operator for converting [Ex, Ey] into Hz away from magnetic
     currents, Hz = curl_e E / (i * omega). Add M / (i * omega) where a
     magnetic current is present.

    :param omega: Angular frequency of the simulation
    :param dims: Shape of the grid
    :param boundary: Boundary policy of the derivatives
    :param pml: PML parameters, or None for no PML
    :return: Sparse matrix for converting vec([Ex, Ey]) to Hz
    """
    return curl_e(dims, boundary, pml) / (1j * omega)
