from wgsim.simulation.schema import ModeSpec, SimulationConfig, SimulationSpec
from wgsim.simulation.solve import (Layout, SimulationResult, make_layout,
                                    simulate, simulate_e)
from wgsim.simulation.spec_builder import build_spec
from wgsim.simulation.io import read_result, write_result
