"""
Power calculations on solved fields.

Two independent estimates are provided: the power carried by a known mode
(from a least-squares projection of the fields on a cross-section), and the
net Poynting flux out of a rectangular contour.

On the staggered grid, Ey[i, j] and Hz[i, j] (likewise Ex[i, j] and
Hz[i, j]) straddle the bond between cells i and i + 1 (j and j + 1), and
`Re(conj(Ey) * Hz)` is the exact time-averaged power through that bond.
"""
import dataclasses
from typing import Sequence, Tuple

import numpy as np

from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import types


def project(mode: np.ndarray, field: np.ndarray) -> np.ndarray:
    """Least-squares projection of `field` onto `mode`.

    Returns `(<mode, field> / |mode|**2) * mode`.
    """
    mode = np.asarray(mode).ravel()
    field = np.asarray(field).ravel()
    if mode.size != field.size:
        raise error.ShapeMismatch(
            'Cannot project field of size {} onto mode of size {}'.format(
                field.size, mode.size))
    return np.vdot(mode, field) / np.vdot(mode, mode).real * mode


def mode_overlap_power(ey: types.ScalarField, hz: types.ScalarField,
                       mode_ey: np.ndarray, mode_hz: np.ndarray, x: int,
                       span: slice) -> float:
    """Power in the mode (`mode_ey`, `mode_hz`) at cross-section `x`.

    Args:
        ey: Simulated Ey.
        hz: Simulated Hz.
        mode_ey: Ey profile of the mode along `span`.
        mode_hz: Hz profile of the mode along `span`.
        x: Row of the cross-section.
        span: Columns covered by the mode profiles.

    Returns:
        `0.5 * Re(sum(proj(Ey) * conj(proj(Hz))))`.
    """
    proj_e = project(mode_ey, ey[x, span])
    proj_h = project(mode_hz, hz[x, span])
    return 0.5 * np.real(np.vdot(proj_h, proj_e))


def average_mode_power(ey: types.ScalarField, hz: types.ScalarField,
                       mode_ey: np.ndarray, mode_hz: np.ndarray,
                       positions: Sequence[int],
                       span: slice) -> Tuple[float, np.ndarray]:
    """Averages `mode_overlap_power` over several cross-sections.

    Single cross-sections pick up evanescent content near the device; the
    power of the propagating mode is constant along the guide, so averaging
    suppresses the former.

    Returns:
        Tuple of the average and the per-cross-section samples.
    """
    samples = np.array([
        mode_overlap_power(ey, hz, mode_ey, mode_hz, x, span)
        for x in positions
    ])
    return np.mean(samples), samples


@dataclasses.dataclass(frozen=True)
class BoxFlux:
    """Outward power through each side of a rectangular contour."""
    left: float
    right: float
    bottom: float
    top: float

    @property
    def total(self) -> float:
        return self.left + self.right + self.bottom + self.top


def inset_box(dims: types.Dims, inset: int) -> types.Box:
    """Contour `inset` cells inside the edges of the grid.

    Raises:
        InvalidDimensions: If the contour would be empty.
    """
    box = (inset, dims[0] - 1 - inset, inset, dims[1] - 1 - inset)
    if box[0] >= box[1] or box[2] >= box[3]:
        raise error.InvalidDimensions(
            'Grid {} too small for a box inset by {} cells'.format(
                tuple(dims), inset))
    return box


def box_flux(ex: types.ScalarField, ey: types.ScalarField,
             hz: types.ScalarField, box: types.Box) -> BoxFlux:
    """Net time-averaged power leaving the contour `box`.

    The contour `(x0, x1, y0, y1)` encloses the Hz cells `x0 + 1 ... x1`
    and `y0 + 1 ... y1`; each side sums the Poynting flux through the bonds
    crossing it, signed along the outward normal.

    Args:
        ex: Simulated Ex.
        ey: Simulated Ey.
        hz: Simulated Hz.
        box: Contour as inclusive indices `(x0, x1, y0, y1)`.

    Returns:
        `BoxFlux` with the contribution of each side.
    """
    x0, x1, y0, y1 = box
    xs = slice(x0 + 1, x1 + 1)
    ys = slice(y0 + 1, y1 + 1)

    def flux(e, h):
        return 0.5 * np.sum(np.real(np.conj(e) * h))

    return BoxFlux(
        left=-flux(ey[x0, ys], hz[x0, ys]),
        right=flux(ey[x1, ys], hz[x1, ys]),
        bottom=flux(ex[xs, y0], hz[xs, y0]),
        top=-flux(ex[xs, y1], hz[xs, y1]),
    )
