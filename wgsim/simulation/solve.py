"""Simulates a waveguide device and measures the power in the output mode.

Two formulations of the same physics are available:

- `simulate` solves the scalar Hz wave equation (N unknowns) and recovers
  Ex, Ey from Hz. Periodic shifts by default.
- `simulate_e` solves the coupled Ex/Ey wave equation (2N unknowns) and
  recovers Hz from E. Mirror shifts by default.

For the same boundary policy both give the same fields.
"""
import dataclasses
import logging
from typing import Optional, Tuple

import numpy as np

from wgsim.fdfd_solvers import local_matrix_solvers
from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import grid
from wgsim.fdfd_tools import operators
from wgsim.fdfd_tools import power
from wgsim.fdfd_tools import sources
from wgsim.fdfd_tools import types
from wgsim.fdfd_tools.vectorization import unvec
from wgsim.simulation import schema

logger = logging.getLogger(__name__)

# Shared direct solver; it holds no state between solves.
DIRECT_SOLVER = local_matrix_solvers.DirectSolver()

# Power above the input power by more than this is reported as suspicious.
POWER_TOLERANCE = 0.05


@dataclasses.dataclass(frozen=True)
class Layout:
    """Locations of the source, monitors and power box on the grid.

    Attributes:
        dims: Grid size.
        pads: Padding added around the permittivity.
        span: Columns covered by the device (and the mode profiles).
        source_position: Row carrying the unshifted input profile.
        output_positions: Rows at which the output mode power is sampled.
        box: Contour used for the box flux.
    """
    dims: types.Dims
    pads: types.PadWidths
    span: slice
    source_position: int
    output_positions: Tuple[int, ...]
    box: types.Box


def make_layout(shape: Tuple[int, int], dims: types.Dims,
                config: schema.SimulationConfig) -> Layout:
    """Places source, monitors and power box for a device of `shape`.

    Raises:
        InvalidDimensions: If the grid leaves no room for the source or the
            output monitors outside of the PML.
    """
    pads = grid.pad_widths(shape, dims)
    (x_lo, x_hi), (y_lo, y_hi) = pads
    t_pml = config.pml_thickness

    source_position = config.source_position
    if source_position is None:
        source_position = max(t_pml + config.box_margin + 2, (x_lo + 1) // 2)
    if source_position - 1 < t_pml or source_position >= dims[0] - t_pml:
        raise error.InvalidDimensions(
            'Source rows {}-{} overlap the PML of thickness {} on a grid of '
            '{} rows'.format(source_position - 1, source_position, t_pml,
                             dims[0]))

    last = dims[0] - t_pml - 2
    first = min(dims[0] - x_hi, last)
    if first <= source_position:
        raise error.InvalidDimensions(
            'No output cross-section between source row {} and PML on grid '
            '{}'.format(source_position, tuple(dims)))

    return Layout(
        dims=tuple(dims),
        pads=pads,
        span=slice(y_lo, dims[1] - y_hi),
        source_position=source_position,
        output_positions=tuple(range(first, last + 1)),
        box=power.inset_box(dims, t_pml + config.box_margin))


@dataclasses.dataclass(frozen=True)
class SimulationResult:
    """Output of a simulation.

    Attributes:
        power: Average power in the output mode (input power is ~1).
        power_samples: Output mode power at each monitor row.
        box_flux: Power leaving the box around the interior, per side.
        ex: Simulated Ex.
        ey: Simulated Ey.
        hz: Simulated Hz.
        eps: Padded permittivity.
    """
    power: float
    power_samples: np.ndarray
    box_flux: power.BoxFlux
    ex: types.ScalarField
    ey: types.ScalarField
    hz: types.ScalarField
    eps: types.ScalarField


@dataclasses.dataclass(frozen=True)
class _Problem:
    eps: np.ndarray
    eps_x: np.ndarray
    eps_y: np.ndarray
    layout: Layout
    boundary: grid.Boundary
    pml: grid.PmlSpec
    source: np.ndarray


def _setup(spec: schema.SimulationSpec, eps: np.ndarray, dims: types.Dims,
           config: Optional[schema.SimulationConfig],
           default_boundary: grid.Boundary) -> _Problem:
    if config is None:
        config = schema.SimulationConfig()
    spec.validate()
    config.validate()

    eps = np.asarray(eps)
    boundary = default_boundary
    if config.boundary is not None:
        boundary = grid.Boundary(config.boundary)

    eps_full = grid.pad_to_dims(eps, dims)
    layout = make_layout(eps.shape, dims, config)
    eps_x, eps_y = grid.interp_eps(eps_full, boundary)
    pml = grid.PmlSpec(
        thickness=config.pml_thickness,
        omega=spec.omega,
        strength=config.pml_strength,
        exponent=config.pml_exponent)

    b = sources.one_way_source(
        spec.input.hz,
        spec.input.beta,
        eps_y,
        layout.source_position,
        layout.span,
        lattice=config.lattice_normalization,
        tol=config.degenerate_tol)

    logger.debug('Simulating grid {} (device {}) at omega = {} with {} '
                 'boundaries'.format(layout.dims, eps.shape, spec.omega,
                                     boundary.value))
    return _Problem(
        eps=eps_full,
        eps_x=eps_x,
        eps_y=eps_y,
        layout=layout,
        boundary=boundary,
        pml=pml,
        source=b)


def _measure(spec: schema.SimulationSpec, problem: _Problem,
             ex: types.ScalarField, ey: types.ScalarField,
             hz: types.ScalarField) -> SimulationResult:
    layout = problem.layout
    p_out, samples = power.average_mode_power(ey, hz, spec.output.ey,
                                              spec.output.hz,
                                              layout.output_positions,
                                              layout.span)
    flux = power.box_flux(ex, ey, hz, layout.box)

    logger.info('Output power in desired mode (input power approx. 1.0): '
                '{:.3f}'.format(p_out))
    logger.debug('Box flux: left {:.4f}, right {:.4f}, bottom {:.4f}, '
                 'top {:.4f}, total {:.4f}'.format(flux.left, flux.right,
                                                   flux.bottom, flux.top,
                                                   flux.total))
    if p_out < 0 or p_out > 1 + POWER_TOLERANCE:
        logger.warning('Output power {:.4f} outside of [0, 1]'.format(p_out))

    return SimulationResult(
        power=p_out,
        power_samples=samples,
        box_flux=flux,
        ex=ex,
        ey=ey,
        hz=hz,
        eps=problem.eps)


def simulate(spec: schema.SimulationSpec,
             eps: np.ndarray,
             dims: types.Dims,
             config: Optional[schema.SimulationConfig] = None,
             solver: Optional[local_matrix_solvers.LocalMatrixSolver] = None
            ) -> SimulationResult:
    """Simulates the design using the scalar Hz formulation.

    Args:
        spec: Frequency and input/output modes.
        eps: Permittivity of the design region.
        dims: Size of the simulation (Nx, Ny); should be considerably larger
            than `eps.shape`.
        config: Solver settings. Defaults to `SimulationConfig()`.
        solver: Matrix solver. Defaults to a direct solver.

    Returns:
        The power in the output mode together with fields and diagnostics.
        For accurate efficiencies, normalize by the power measured for an
        unbroken input waveguide.
    """
    if solver is None:
        solver = DIRECT_SOLVER
    problem = _setup(spec, eps, dims, config, grid.Boundary.PERIODIC)
    dims = problem.layout.dims

    A = operators.h_full(spec.omega, problem.eps_x, problem.eps_y,
                         problem.boundary, problem.pml)
    hz = solver.solve(A, problem.source)

    e = operators.h2e(spec.omega, problem.eps_x, problem.eps_y,
                      problem.boundary, problem.pml) @ hz
    ex, ey = unvec(e, dims)
    hz, = unvec(hz, dims)
    return _measure(spec, problem, ex, ey, hz)


def simulate_e(spec: schema.SimulationSpec,
               eps: np.ndarray,
               dims: types.Dims,
               config: Optional[schema.SimulationConfig] = None,
               solver: Optional[local_matrix_solvers.LocalMatrixSolver] = None
              ) -> SimulationResult:
    """Simulates the design using the coupled Ex/Ey formulation.

    Takes the same arguments as `simulate`. The input mode is injected by
    the same magnetic current as in `simulate`.
    """
    if solver is None:
        solver = DIRECT_SOLVER
    problem = _setup(spec, eps, dims, config, grid.Boundary.MIRROR)
    dims = problem.layout.dims

    op_curl_h = operators.curl_h(dims, problem.boundary, problem.pml)
    b = sources.magnetic_to_electric_source(problem.source, spec.omega,
                                            op_curl_h)
    A = operators.e_full(spec.omega, problem.eps_x, problem.eps_y,
                         problem.boundary, problem.pml)
    e = solver.solve(A, b)

    # Hz = (curl E + M) / (i omega) with M = source / (i omega).
    hz = (operators.e2h(spec.omega, dims, problem.boundary, problem.pml) @ e -
          problem.source / spec.omega**2)
    ex, ey = unvec(e, dims)
    hz, = unvec(hz, dims)
    return _measure(spec, problem, ex, ey, hz)
