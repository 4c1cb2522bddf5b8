"""
Slab waveguide mode solver for the Hz-polarized problem.

For a guide that is uniform along x, Hz[i, j] = h[j] * exp(i * beta * i)
solves the Hz wave equation of `operators.h_full` when

    (omega**2 - Ly) h = (2 - 2 cos(beta)) h / eps_y

where Ly = Dy^T (1/eps_x) Dy is the transverse part of the operator. This is
a symmetric-definite generalized eigenproblem; the fundamental mode has the
largest eigenvalue. Solving on the same lattice as the 2D problem makes the
modes (and beta) exact for the discretized equations.
"""
import logging
import warnings
from typing import Dict, Union

import numpy as np
import scipy.linalg
import scipy.sparse as sparse

from wgsim.fdfd_tools import error

logger = logging.getLogger(__name__)

# Mode amplitude at the ends of the line, relative to the peak, above which
# the Hz = 0 walls of the line noticeably change the mode.
EDGE_TOLERANCE = 5e-3


def operator(eps_x: np.ndarray) -> sparse.spmatrix:
    """
    Transverse operator Ly = Dy^T (1/eps_x) Dy on a line with Hz = 0 just
     outside both ends.

    :param eps_x: Permittivity at the Ex locations along the line; eps_x[j]
        sits between cells j and j + 1.
    :return: Sparse symmetric matrix of shape (n, n)
    """
    n = eps_x.size
    # Bond k joins cells k - 1 and k; the bond before the first cell reuses
    # the first permittivity value.
    eps_bonds = np.hstack((eps_x[:1], eps_x))
    dy = sparse.diags([np.ones(n), -np.ones(n)], [0, -1], shape=(n + 1, n))
    return (dy.T @ sparse.diags(1 / eps_bonds) @ dy).tocsr()


def edge_amplitude(h: np.ndarray) -> float:
    """Largest mode amplitude at either end of the line relative to the peak."""
    h = np.abs(np.asarray(h).ravel())
    return max(h[0], h[-1]) / np.max(h)


def solve_slab_mode(omega: float,
                    eps_x: np.ndarray,
                    eps_y: np.ndarray,
                    mode_number: int = 0,
                    edge_tol: float = EDGE_TOLERANCE
                   ) -> Dict[str, Union[float, np.ndarray]]:
    """
    Solves for a mode travelling towards +x along a line of constant x.

    The returned profiles are normalized to unit power, i.e.
     0.5 * Re(sum(conj(ey) * hz)) = 1.

    :param omega: Angular frequency of the simulation
    :param eps_x: Permittivity at the Ex locations along the line
    :param eps_y: Permittivity at the Ey locations along the line
    :param mode_number: Number of the mode, 0-indexed
    :param edge_tol: Largest `edge_amplitude` accepted without a warning
    :return: {'beta': float, 'hz': np.ndarray, 'ey': np.ndarray}
    """
    eps_x = np.asarray(eps_x).ravel()
    eps_y = np.asarray(eps_y).ravel()
    if eps_x.shape != eps_y.shape:
        raise error.ShapeMismatch(
            'Permittivity lines have lengths {} and {}'.format(
                eps_x.size, eps_y.size))
    if mode_number >= eps_x.size:
        raise error.InvalidDimensions(
            'Mode {} requested on a line of {} cells'.format(
                mode_number, eps_x.size))

    # check if eps has a imaginary part
    if np.any(np.imag(eps_x) != 0) or np.any(np.imag(eps_y) != 0):
        warnings.warn('Epsilon in slab mode solver has an imaginary part; '
                      'only the real part is used')
    eps_x = np.real(eps_x)
    eps_y = np.real(eps_y)

    n = eps_x.size
    a = omega**2 * np.eye(n) - operator(eps_x).toarray()
    b = np.diag(1 / eps_y)
    eigvals, eigvecs = scipy.linalg.eigh(a, b)

    k = eigvals[-(mode_number + 1)]
    h = eigvecs[:, -(mode_number + 1)]
    if not 0 < k < 4:
        raise error.DegenerateMode(
            'Mode {} is not propagating (2 - 2 cos(beta) = {:.4g})'.format(
                mode_number, k))
    beta = np.arccos(1 - k / 2)

    power = 0.5 * np.sin(beta) / omega * np.sum(np.abs(h)**2 / eps_y)
    h = h / np.sqrt(power)
    h = h * np.sign(h[np.argmax(np.abs(h))])
    ey = -1j * (np.exp(1j * beta) - 1) / (omega * eps_y) * h

    edge = edge_amplitude(h)
    if edge > edge_tol:
        logger.warning(
            'Slab mode {} reaches the ends of the line (edge/peak = {:.2e}); '
            'the profile is truncated'.format(mode_number, edge))

    logger.debug('Solved slab mode {}: beta = {:.5f}, n_eff = {:.4f}'.format(
        mode_number, beta, beta / omega))
    return {'beta': beta, 'hz': h.astype(complex), 'ey': ey}
