"""Code to make one-way waveguide mode sources."""
import logging

import numpy as np
import scipy.sparse as sparse

from wgsim.fdfd_tools import error
from wgsim.fdfd_tools.vectorization import vec

logger = logging.getLogger(__name__)


def unit_power_normalization(beta: float,
                             lattice: bool = True,
                             tol: float = 1e-9) -> complex:
    """Computes the factor that makes a one-way source launch unit power.

    A two-row source `p` at row `r` and `-p * exp(i * beta)` at row `r - 1`
    launches the mode with amplitude `-(1 - exp(2i * beta)) / (2i * sin(beta))`
    times the source amplitude on the grid. Multiplying by
    `-2i * sin(beta) / (1 - exp(2i * beta))` therefore launches it with unit
    amplitude, i.e. unit power for a power-normalized profile.

    With `lattice=False` the continuum factor `-2i * beta / (...)` is used
    instead, which overestimates the power by `(beta / sin(beta))**2`.

    Args:
        beta: Phase advance of the mode per grid cell.
        lattice: Whether to use the grid-exact normalization.
        tol: Minimum allowed `|1 - exp(2i * beta)|`.

    Returns:
        The complex normalization factor.

    Raises:
        DegenerateMode: If the normalization is singular (mode at cutoff).
    """
    denom = 1 - np.exp(2j * beta)
    if np.abs(denom) < tol:
        raise error.DegenerateMode(
            'Source normalization is singular for beta = {} '
            '(|1 - exp(2i beta)| = {:.3e})'.format(beta, np.abs(denom)))
    if lattice:
        numer = 2 * np.sin(beta)
    else:
        numer = 2 * beta
    return -1j * numer / denom


def one_way_source(hz_profile: np.ndarray,
                   beta: float,
                   eps_y: np.ndarray,
                   position: int,
                   span: slice,
                   lattice: bool = True,
                   tol: float = 1e-9) -> np.ndarray:
    """Builds a magnetic current source that launches a mode towards +x.

    The mode profile is placed on row `position` and, multiplied by
    `-exp(i * beta)`, on row `position - 1`. The contributions of the two
    rows cancel for x < position, so that the mode is only launched in the
    forward direction. The field source is converted to a current by dividing
    by `eps_y` and scaled to unit input power.

    Args:
        hz_profile: Hz profile of the input mode along the source line.
        beta: Phase advance of the input mode per grid cell.
        eps_y: Permittivity at the Ey locations of the full grid.
        position: Row (x index) carrying the unshifted profile.
        span: Columns (y indices) covered by the profile.
        lattice: See `unit_power_normalization`.
        tol: See `unit_power_normalization`.

    Returns:
        Vectorized source `b` of the Hz wave equation.
    """
    dims = eps_y.shape
    profile = np.asarray(hz_profile).ravel()
    columns = np.arange(dims[1])[span]
    if profile.size != columns.size:
        raise error.ShapeMismatch(
            'Mode profile of length {} does not fit source span of {} cells'.
            format(profile.size, columns.size))
    if not 1 <= position < dims[0]:
        raise error.InvalidDimensions(
            'Source position {} outside of grid with {} rows'.format(
                position, dims[0]))

    b = np.zeros(dims, dtype=complex)
    b[position, span] = profile
    b[position - 1, span] = -profile * np.exp(1j * beta)

    # Convert from field to current source.
    b = b / eps_y

    b *= unit_power_normalization(beta, lattice=lattice, tol=tol)
    logger.debug('One-way source at rows {}-{}, beta = {:.4f}'.format(
        position - 1, position, beta))
    return vec([b])


def magnetic_to_electric_source(b: np.ndarray, omega: float,
                                op_curl_h: sparse.spmatrix) -> np.ndarray:
    """Converts the Hz-equation source into the [Ex, Ey] equation source.

    The Hz equation is driven by `b = i * omega * M`; the same magnetic
    current drives the E equation through `-curl M`.

    Args:
        b: Source of the Hz wave equation.
        omega: Angular frequency.
        op_curl_h: Curl operator acting on Hz-located fields.

    Returns:
        Source of the [Ex, Ey] wave equation.
    """
    return -op_curl_h @ (b / (1j * omega))
