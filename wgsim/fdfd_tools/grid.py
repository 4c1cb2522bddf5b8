"""
Grid helpers: permittivity padding, Yee-grid staggering and stretched
coordinate PMLs.

All quantities live on a uniform grid with unit cell size. Hz and the
(cell-centered) permittivity are sampled at integer positions (i, j); the
electric field components are offset by half a cell:

    Hz, eps   (i, j)         Staggering.CENTER
    Ex, eps_x (i, j + 1/2)   Staggering.X_EDGE
    Ey, eps_y (i + 1/2, j)   Staggering.Y_EDGE

The interpolation of eps, the derivative operators in `operators` and the
PML stretching all rely on this table; changing one without the others
silently produces wrong fields.
"""
import dataclasses
import enum
from typing import Optional, Tuple

import numpy as np
import scipy.sparse as sparse

from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import types


class Staggering(enum.Enum):
    """Fractional (x, y) offsets of the quantities on the Yee grid."""
    CENTER = (0.0, 0.0)
    X_EDGE = (0.0, 0.5)
    Y_EDGE = (0.5, 0.0)

    @property
    def offsets(self) -> types.Offset:
        return self.value

    def offset(self, axis: int) -> float:
        return self.offsets[axis]


class Boundary(enum.Enum):
    """Treatment of grid indices that fall outside the domain."""
    PERIODIC = "periodic"
    MIRROR = "mirror"


def boundary_index(v: np.ndarray, n: int, boundary: Boundary) -> np.ndarray:
    """Maps (possibly out-of-range) indices back into `range(n)`.

    Periodic boundaries wrap around. Mirror boundaries reflect about the edge
    cells, i.e. -1 -> 0 and n -> n - 1.

    Args:
        v: Integer indices.
        n: Number of cells along the axis.
        boundary: Boundary policy.

    Returns:
        Indices within `range(n)`.

    Raises:
        InvalidDimensions: If a mirrored index is more than one reflection
            away.
    """
    v = np.asarray(v)
    if boundary == Boundary.PERIODIC:
        return np.mod(v, n)
    if np.any(v >= 2 * n) or np.any(v < -n):
        raise error.InvalidDimensions(
            'Index out of range for mirror boundary on axis of size {}'.format(
                n))
    v = np.where(v >= n, 2 * n - v - 1, v)
    v = np.where(v < 0, -1 - v, v)
    return v


def pad_widths(shape: Tuple[int, int], dims: types.Dims) -> types.PadWidths:
    """Computes how many cells to add on each side to reach `dims`.

    The low side receives `floor(diff / 2)` cells and the high side
    `ceil(diff / 2)`, independently per axis.

    Raises:
        InvalidDimensions: If `dims` is non-positive or smaller than `shape`.
    """
    if len(dims) != 2 or len(shape) != 2:
        raise error.InvalidDimensions(
            'Expected 2D shapes, got shape {} and dims {}'.format(
                tuple(shape), tuple(dims)))
    if any(d <= 0 for d in dims):
        raise error.InvalidDimensions(
            'Grid dimensions must be positive, got {}'.format(tuple(dims)))
    if any(d < s for d, s in zip(dims, shape)):
        raise error.InvalidDimensions(
            'Grid dimensions {} are smaller than permittivity shape {}'.format(
                tuple(dims), tuple(shape)))

    diffs = [int(d) - int(s) for d, s in zip(dims, shape)]
    return tuple((diff // 2, diff - diff // 2) for diff in diffs)


def pad_to_dims(eps: types.ScalarField,
                dims: types.Dims) -> types.ScalarField:
    """Expands `eps` to `dims` by replicating its edge rows and columns.

    Args:
        eps: 2D permittivity of the device region.
        dims: Full simulation size (Nx, Ny).

    Returns:
        Array of shape `dims` whose centered sub-array equals `eps`.
    """
    eps = np.asarray(eps)
    return np.pad(eps, pad_widths(eps.shape, dims), mode='edge')


def interp_eps(eps: types.ScalarField,
               boundary: Boundary = Boundary.PERIODIC) -> types.FieldPair:
    """Samples a cell-centered permittivity at the Ex and Ey locations.

    Each staggered value is the average of a cell and its forward neighbor
    along the axis in which the field component is offset (y for Ex, x for
    Ey). The neighbor of the last cell follows `boundary` so that indices
    match those of the shift operators.

    Args:
        eps: Cell-centered permittivity of shape (Nx, Ny).
        boundary: Boundary policy of the shift operators.

    Returns:
        `(eps_x, eps_y)`, both of shape (Nx, Ny).
    """
    nx, ny = eps.shape
    ix = boundary_index(np.arange(nx) + 1, nx, boundary)
    iy = boundary_index(np.arange(ny) + 1, ny, boundary)
    eps_x = 0.5 * (eps + eps[:, iy])
    eps_y = 0.5 * (eps + eps[ix, :])
    return eps_x, eps_y


@dataclasses.dataclass(frozen=True)
class PmlSpec:
    """Parameters of the stretched-coordinate PML.

    Attributes:
        thickness: Number of PML cells on each edge of the grid.
        omega: Angular frequency the PML is designed for.
        strength: Maximum conductivity at the outer edge. Defaults to
            `1 / omega`.
        exponent: Power-law grading of the conductivity.
    """
    thickness: int
    omega: float
    strength: Optional[float] = None
    exponent: float = 3.5

    @property
    def sigma_max(self) -> float:
        if self.strength is None:
            return 1 / self.omega
        return self.strength


def stretched_coords(n: int, offset: float, pml: Optional[PmlSpec]
                    ) -> np.ndarray:
    """Computes the stretching factors `s = 1 / (1 + i * sigma / omega)`.

    The conductivity `sigma` is zero in the interior and grows as
    `sigma_max * depth**exponent` inside the outermost `pml.thickness` cells,
    where `depth` runs from 0 at the inner PML boundary to 1 at the edge of
    the domain `[0, n - 0.5]`.

    Args:
        n: Number of cells along the axis.
        offset: Sub-cell offset of the sampled positions (0 or 0.5).
        pml: PML parameters. `None` disables the PML.

    Returns:
        Complex array of length `n`; all ones when there is no PML.
    """
    if pml is None or pml.thickness <= 0:
        return np.ones(n, dtype=complex)

    t = pml.thickness
    pos = np.arange(n) + offset
    depth = ((t - pos).clip(0) + (pos - (n - 0.5 - t)).clip(0)) / t
    sigma = pml.sigma_max * depth**pml.exponent
    return 1 / (1 + 1j * sigma / pml.omega)


def stretch_operator(dims: types.Dims, axis: int, stagger: Staggering,
                     pml: Optional[PmlSpec]) -> sparse.spmatrix:
    """Diagonal operator applying the PML stretching along `axis`.

    The factors are evaluated at the positions of `stagger` along `axis` and
    broadcast across the other axis.
    """
    s = stretched_coords(dims[axis], stagger.offset(axis), pml)
    if axis == 0:
        s_grid = np.broadcast_to(s[:, None], dims)
    else:
        s_grid = np.broadcast_to(s[None, :], dims)
    return sparse.diags(s_grid.flatten(order='F'))
