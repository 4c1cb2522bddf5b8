import numpy as np
import pytest

from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import grid
from wgsim.fdfd_tools import power
from wgsim.fdfd_tools import waveguide_mode


def test_project():
    mode = np.array([1, 1j, 0.5])
    np.testing.assert_allclose(power.project(mode, 2j * mode), 2j * mode)
    np.testing.assert_allclose(power.project(mode, np.array([1j, 1, 0])), 0)


def test_project_shape_mismatch():
    with pytest.raises(error.ShapeMismatch):
        power.project(np.ones(3), np.ones(4))


def test_mode_overlap_power_simple():
    dims = (4, 5)
    span = slice(1, 3)
    ey = np.zeros(dims, dtype=complex)
    hz = np.zeros(dims, dtype=complex)
    ey[2, span] = 2
    hz[2, span] = 1
    p = power.mode_overlap_power(ey, hz, np.array([2, 2]), np.array([1, 1]),
                                 2, span)
    np.testing.assert_allclose(p, 2)


@pytest.mark.parametrize("a,b", [(1, 0), (0.8, 0.3j), (0.5, -0.5)])
def test_mode_overlap_power_counter_propagating(a, b):
    omega = 0.2
    eps = np.ones((1, 24))
    eps[0, 9:15] = 12.25
    eps_x, eps_y = grid.interp_eps(eps)
    mode = waveguide_mode.solve_slab_mode(omega, eps_x[0], eps_y[0])
    beta = mode['beta']
    h = mode['hz']
    ey_back = -1j * (np.exp(-1j * beta) - 1) / (omega * eps_y[0]) * h

    xs = np.arange(10)[:, None]
    hz = (a * np.exp(1j * beta * xs) + b * np.exp(-1j * beta * xs)) * h
    ey = (a * np.exp(1j * beta * xs) * mode['ey'] +
          b * np.exp(-1j * beta * xs) * ey_back)

    span = slice(0, 24)
    for x in (2, 7):
        p = power.mode_overlap_power(ey, hz, mode['ey'], h, x, span)
        np.testing.assert_allclose(p, abs(a)**2 - abs(b)**2, atol=1e-10)

    p_avg, samples = power.average_mode_power(ey, hz, mode['ey'], h,
                                              range(3, 8), span)
    assert samples.shape == (5,)
    np.testing.assert_allclose(p_avg, abs(a)**2 - abs(b)**2, atol=1e-10)


def test_inset_box():
    assert power.inset_box((80, 80), 15) == (15, 64, 15, 64)
    assert power.inset_box((30, 20), 2) == (2, 27, 2, 17)
    with pytest.raises(error.InvalidDimensions):
        power.inset_box((20, 20), 10)


def test_box_flux_uniform_x_flow():
    dims = (10, 8)
    ex = np.zeros(dims)
    ey = np.ones(dims)
    hz = np.ones(dims)
    flux = power.box_flux(ex, ey, hz, (2, 7, 1, 5))

    # Four cells wide along y.
    assert flux.left == -2
    assert flux.right == 2
    assert flux.bottom == 0
    assert flux.top == 0
    assert flux.total == 0


def test_box_flux_outward_signs():
    dims = (10, 8)
    ex = np.zeros(dims)
    ey = np.zeros(dims)
    hz = np.ones(dims)
    box = (2, 7, 1, 5)

    # Field on the outer bonds only, pointing away from the box.
    ey[2] = -1
    ey[7] = 1
    ex[:, 1] = 1
    ex[:, 5] = -1
    flux = power.box_flux(ex, ey, hz, box)

    assert flux.left == 2
    assert flux.right == 2
    # Five cells wide along x.
    assert flux.bottom == 2.5
    assert flux.top == 2.5
    assert flux.total == 9
