import logging

import numpy as np
import pytest
from schematics.exceptions import DataError

import wgsim
from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import power
from wgsim.simulation import schema
from wgsim.simulation import solve
from wgsim.simulation import spec_builder

logging.basicConfig(format=wgsim.LOG_FORMAT)
logging.getLogger("").setLevel(logging.DEBUG)

DIMS = (80, 80)


def make_straight_guide(shape=(40, 40), width=6, eps_core=12.25):
    eps = np.ones(shape)
    start = (shape[1] - width) // 2
    eps[:, start:start + width] = eps_core
    return eps


def test_make_layout_defaults():
    layout = solve.make_layout((40, 40), DIMS, schema.SimulationConfig())

    assert layout.pads == ((20, 20), (20, 20))
    assert layout.span == slice(20, 60)
    assert layout.source_position == 17
    assert layout.output_positions == tuple(range(60, 69))
    assert layout.box == (15, 64, 15, 64)


def test_make_layout_custom_source():
    config = schema.SimulationConfig({"source_position": 12})
    layout = solve.make_layout((40, 40), DIMS, config)
    assert layout.source_position == 12


@pytest.mark.parametrize("dims,source_position", [
    ((24, 24), None),
    ((80, 80), 10),
    ((80, 80), 70),
    ((80, 80), 65),
])
def test_make_layout_invalid(dims, source_position):
    config = schema.SimulationConfig({"source_position": source_position})
    with pytest.raises(error.InvalidDimensions):
        solve.make_layout((20, 20), dims, config)


@pytest.mark.parametrize("omega", [0.15, 0.2, 0.25])
def test_straight_waveguide(omega):
    eps = make_straight_guide()
    spec = spec_builder.build_spec(omega, eps, DIMS)
    res = solve.simulate(spec, eps, DIMS)

    assert res.hz.shape == DIMS
    assert res.ex.shape == DIMS
    assert res.ey.shape == DIMS
    np.testing.assert_array_equal(res.eps[20:60, 20:60], eps)

    # Unit input power, fully transmitted.
    np.testing.assert_allclose(res.power, 1, rtol=0.01)
    np.testing.assert_allclose(res.power_samples, 1, rtol=0.01)
    assert res.power > 0.95

    # Energy conservation: the power leaving the box around the source is
    # the power in the output mode.
    flux = res.box_flux
    assert abs(flux.total - res.power) < 0.05 * res.power
    assert flux.total <= 1.01
    assert res.power <= 1.01
    assert abs(flux.left) < 0.01
    assert abs(flux.bottom) < 0.01
    assert abs(flux.top) < 0.01


def test_box_without_source_has_no_net_flux():
    eps = make_straight_guide()
    spec = spec_builder.build_spec(0.2, eps, DIMS)
    res = solve.simulate(spec, eps, DIMS)

    flux = power.box_flux(res.ex, res.ey, res.hz, (20, 64, 15, 64))
    assert abs(flux.total) < 1e-6
    np.testing.assert_allclose(flux.right, res.power, rtol=0.01)


def test_continuum_normalization(caplog):
    eps = make_straight_guide()
    spec = spec_builder.build_spec(0.2, eps, DIMS)
    config = schema.SimulationConfig({"lattice_normalization": False})
    res = solve.simulate(spec, eps, DIMS, config)

    beta = spec.input.beta
    np.testing.assert_allclose(res.power, (beta / np.sin(beta))**2,
                               rtol=0.01)
    assert "outside of [0, 1]" in caplog.text


def test_device_80x80():
    # Straight guide with a scatterer in the middle.
    eps = make_straight_guide()
    eps[15:25, 10:30] = 4
    spec = spec_builder.build_spec(0.2, eps, DIMS)
    config = schema.SimulationConfig({"pml_thickness": 10})
    res = solve.simulate(spec, eps, DIMS, config)

    for field in (res.ex, res.ey, res.hz):
        assert field.shape == DIMS
        assert np.all(np.isfinite(field))
    assert np.isfinite(res.power)
    assert res.power < 1.01
    assert res.box_flux.total <= 1.01


def test_simulate_e_straight_waveguide():
    eps = make_straight_guide()
    spec = spec_builder.build_spec(0.2, eps, DIMS)
    res = solve.simulate_e(spec, eps, DIMS)

    np.testing.assert_allclose(res.power, 1, rtol=0.02)
    assert abs(res.box_flux.total - res.power) < 0.05 * res.power


@pytest.mark.parametrize("boundary", ["periodic", "mirror"])
def test_formulations_agree(boundary):
    dims = (40, 30)
    eps = make_straight_guide((20, 10), width=4)
    eps[8:12, 2:5] = 6
    config = schema.SimulationConfig({
        "pml_thickness": 5,
        "box_margin": 2,
        "boundary": boundary,
    })
    # Only the agreement of the fields is checked, so the truncated mode
    # profile of the narrow device is fine.
    spec = spec_builder.build_spec(0.3, eps, dims, config, edge_tol=None)

    res_h = solve.simulate(spec, eps, dims, config)
    res_e = solve.simulate_e(spec, eps, dims, config)

    scale = np.max(np.abs(res_h.hz))
    np.testing.assert_allclose(res_e.hz, res_h.hz, atol=1e-8 * scale)
    np.testing.assert_allclose(res_e.ex, res_h.ex, atol=1e-8 * scale)
    np.testing.assert_allclose(res_e.ey, res_h.ey, atol=1e-8 * scale)
    np.testing.assert_allclose(res_e.power, res_h.power, atol=1e-8)


def test_invalid_spec():
    eps = make_straight_guide()
    spec = spec_builder.build_spec(0.2, eps, DIMS)
    spec.omega = -1
    with pytest.raises(DataError):
        solve.simulate(spec, eps, DIMS)


def test_mode_profile_mismatch():
    eps = make_straight_guide()
    spec = spec_builder.build_spec(0.2, eps, DIMS)
    with pytest.raises(error.ShapeMismatch):
        solve.simulate(spec, eps[:, :30], DIMS)


def test_weakly_guided_mode_requires_wider_device():
    eps = make_straight_guide()
    with pytest.raises(error.DegenerateMode):
        spec_builder.build_spec(0.12, eps, DIMS)


def test_weakly_guided_mode_in_wide_device():
    dims = (80, 110)
    eps = make_straight_guide((40, 70))
    spec = spec_builder.build_spec(0.12, eps, dims)
    res = solve.simulate(spec, eps, dims)

    np.testing.assert_allclose(res.power, 1, rtol=0.01)
    assert abs(res.box_flux.total - res.power) < 0.05 * res.power
