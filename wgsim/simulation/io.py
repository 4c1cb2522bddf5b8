"""Reads and writes simulation results as HDF5 files.

Complex arrays are stored as pairs of real datasets with suffixes `_r` and
`_i`.
"""
import logging

import h5py
import numpy as np

from wgsim.fdfd_tools import power
from wgsim.simulation import solve

logger = logging.getLogger(__name__)

FIELD_NAMES = ('ex', 'ey', 'hz', 'eps')
FLUX_SIDES = ('left', 'right', 'bottom', 'top')


def write_result(filename: str, result: solve.SimulationResult) -> None:
    """Writes `result` to the HDF5 file `filename`, replacing it if present."""
    with h5py.File(filename, 'w') as f:
        f.create_dataset('power', data=np.array([result.power]))
        f.create_dataset('power_samples', data=result.power_samples)
        f.create_dataset(
            'box_flux',
            data=np.array(
                [getattr(result.box_flux, side) for side in FLUX_SIDES]))
        for name in FIELD_NAMES:
            data = np.asarray(getattr(result, name))
            f.create_dataset(name + '_r', data=np.real(data))
            f.create_dataset(name + '_i', data=np.imag(data))
    logger.debug('Wrote simulation result to {}'.format(filename))


def read_result(filename: str) -> solve.SimulationResult:
    """Reads a result written by `write_result`."""
    with h5py.File(filename, 'r') as f:
        fields = {
            name: f[name + '_r'][()] + 1j * f[name + '_i'][()]
            for name in FIELD_NAMES
        }
        flux = power.BoxFlux(*(float(v) for v in f['box_flux'][()]))
        return solve.SimulationResult(
            power=float(f['power'][0]),
            power_samples=f['power_samples'][()],
            box_flux=flux,
            **fields)
