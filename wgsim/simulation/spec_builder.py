"""Builds simulation specs from the waveguides at the edges of a device."""
import logging
from typing import Optional

import numpy as np

from wgsim.fdfd_tools import error
from wgsim.fdfd_tools import grid
from wgsim.fdfd_tools import types
from wgsim.fdfd_tools import waveguide_mode
from wgsim.simulation import schema
from wgsim.simulation import solve

logger = logging.getLogger(__name__)


def build_spec(omega: float,
               eps: np.ndarray,
               dims: types.Dims,
               config: Optional[schema.SimulationConfig] = None,
               mode_number: int = 0,
               edge_tol: Optional[float] = waveguide_mode.EDGE_TOLERANCE
              ) -> schema.SimulationSpec:
    """Creates a spec that launches and measures the waveguide modes.

    The input mode is solved on the source row and the output mode on the
    first monitor row, both restricted to the columns of the device. The
    padded permittivity is used, so the device edges must be cut through
    the input and output waveguides.

    Args:
        omega: Angular frequency.
        eps: Permittivity of the design region.
        dims: Size of the simulation.
        config: Solver settings used to place source and monitors.
        mode_number: Mode to launch and measure (0 is the fundamental).
        edge_tol: Largest mode amplitude at the edges of the device columns,
            relative to the peak. `None` disables the check.

    Returns:
        Validated `SimulationSpec`.

    Raises:
        DegenerateMode: If a mode extends past the device columns, in which
            case the launched and measured profiles do not match the mode of
            the full grid. Widen the device region.
    """
    if config is None:
        config = schema.SimulationConfig()
    eps = np.asarray(eps)
    layout = solve.make_layout(eps.shape, dims, config)

    boundary = grid.Boundary(config.boundary or grid.Boundary.PERIODIC.value)
    eps_x, eps_y = grid.interp_eps(grid.pad_to_dims(eps, dims), boundary)

    def mode_at(x):
        mode = waveguide_mode.solve_slab_mode(omega,
                                              eps_x[x, layout.span],
                                              eps_y[x, layout.span],
                                              mode_number,
                                              edge_tol=np.inf)
        edge = waveguide_mode.edge_amplitude(mode['hz'])
        if edge_tol is not None and edge > edge_tol:
            raise error.DegenerateMode(
                'Mode {} at row {} reaches the edge of the device columns '
                '{}-{} (edge/peak = {:.2e} > {:.2e}); widen the device '
                'region'.format(mode_number, x, layout.span.start,
                                 layout.span.stop - 1, edge, edge_tol))
        return mode

    mode_in = mode_at(layout.source_position)
    mode_out = mode_at(layout.output_positions[0])
    logger.debug('Input beta = {:.5f}, output beta = {:.5f}'.format(
        mode_in['beta'], mode_out['beta']))

    spec = schema.SimulationSpec({
        'omega': omega,
        'in': {
            'hz': mode_in['hz'],
            'beta': mode_in['beta'],
        },
        'out': {
            'hz': mode_out['hz'],
            'ey': mode_out['ey'],
            'beta': mode_out['beta'],
        },
    })
    spec.validate()
    return spec
