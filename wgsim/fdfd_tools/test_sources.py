import numpy as np
import pytest

from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import grid
from wgsim.fdfd_tools import operators
from wgsim.fdfd_tools import sources
from wgsim.fdfd_tools.vectorization import unvec


@pytest.mark.parametrize("beta", [0.2, 0.6, 1.3, 2.5])
def test_unit_power_normalization_cancels_launch_amplitude(beta):
    launched = -(1 - np.exp(2j * beta)) / (2j * np.sin(beta))
    norm = sources.unit_power_normalization(beta)
    np.testing.assert_allclose(norm * launched, 1)


@pytest.mark.parametrize("beta", [0.2, 0.6, 1.3])
def test_continuum_normalization_overestimates_power(beta):
    lattice = sources.unit_power_normalization(beta, lattice=True)
    continuum = sources.unit_power_normalization(beta, lattice=False)
    np.testing.assert_allclose(
        np.abs(continuum / lattice)**2, (beta / np.sin(beta))**2)


@pytest.mark.parametrize("beta", [0, np.pi, 1e-12])
def test_degenerate_mode(beta):
    with pytest.raises(error.DegenerateMode):
        sources.unit_power_normalization(beta)


def test_one_way_source_layout():
    dims = (6, 4)
    beta = 0.7
    eps_y = 2 * np.ones(dims)
    profile = np.array([1, 2j])
    b, = unvec(
        sources.one_way_source(profile, beta, eps_y, 3, slice(1, 3)), dims)

    norm = sources.unit_power_normalization(beta)
    np.testing.assert_allclose(b[3, 1:3], profile / 2 * norm)
    np.testing.assert_allclose(b[2, 1:3], -profile * np.exp(1j * beta) / 2 *
                               norm)

    mask = np.ones(dims, dtype=bool)
    mask[2:4, 1:3] = False
    np.testing.assert_array_equal(b[mask], 0)


def test_one_way_source_errors():
    eps_y = np.ones((6, 4))
    with pytest.raises(error.ShapeMismatch):
        sources.one_way_source(np.ones(3), 0.5, eps_y, 3, slice(1, 3))
    with pytest.raises(error.InvalidDimensions):
        sources.one_way_source(np.ones(2), 0.5, eps_y, 0, slice(1, 3))
    with pytest.raises(error.InvalidDimensions):
        sources.one_way_source(np.ones(2), 0.5, eps_y, 6, slice(1, 3))


def test_one_way_source_launches_unit_plane_wave():
    # A single column with periodic y boundaries is a 1D problem in which
    # Hz = exp(i * beta * x) with 2 - 2 cos(beta) = omega**2 * eps.
    dims = (80, 1)
    omega = 0.5
    eps = np.ones(dims)
    beta = np.arccos(1 - omega**2 / 2)
    pml = grid.PmlSpec(thickness=15, omega=omega)
    source_position = 30

    b = sources.one_way_source(np.ones(1), beta, eps, source_position,
                               slice(0, 1))
    a = operators.h_full(omega, eps, eps, grid.Boundary.PERIODIC, pml)
    hz, = unvec(np.linalg.solve(a.toarray(), b), dims)
    hz = hz[:, 0]

    forward = hz[source_position:60]
    backward = hz[16:source_position - 1]
    np.testing.assert_allclose(np.abs(forward), 1, rtol=0.05)
    assert np.max(np.abs(backward)) < 0.05

    # Forward propagating phase.
    np.testing.assert_allclose(forward[1:] / forward[:-1], np.exp(1j * beta),
                               atol=0.05)


def test_magnetic_to_electric_source():
    dims = (5, 4)
    omega = 0.4
    rng = np.random.RandomState(0)
    b = rng.randn(np.prod(dims)) + 1j * rng.randn(np.prod(dims))
    op_curl_h = operators.curl_h(dims)
    np.testing.assert_allclose(
        sources.magnetic_to_electric_source(b, omega, op_curl_h),
        1j / omega * (op_curl_h @ b))
