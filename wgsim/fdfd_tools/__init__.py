"""
Electromagnetic FDFD simulation tools

Tools for 2D Hz-polarized (Ex, Ey, Hz) Finite Difference Frequency Domain
(FDFD) simulations of waveguide devices. These tools handle conversion of
fields to/from vector form, padding and staggering of the permittivity,
creation of the wave operator matrices, stretched-coordinate PMLs, one-way
mode sources, field conversion operators, power calculations and a slab
waveguide mode solver.

Solving the resulting sparse systems is left to `wgsim.fdfd_solvers`.


Dependencies:
- numpy
- scipy

"""
from wgsim.fdfd_tools.types import *
from wgsim.fdfd_tools.error import *

from .vectorization import vec, unvec

from wgsim.fdfd_tools import grid
from wgsim.fdfd_tools import operators
from wgsim.fdfd_tools import power
from wgsim.fdfd_tools import sources
from wgsim.fdfd_tools import waveguide_mode
