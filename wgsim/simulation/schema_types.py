"""This module defines additional `schematics` types."""
import numbers

import numpy as np
from schematics import types


class ComplexArrayType(types.BaseType):
    """Defines a `schematics` type for complex numpy arrays.

    Arrays are serialized as `{"real": [...], "imag": [...]}`. Real lists are
    also accepted as primitive form.
    """

    def to_native(self, value, context=None):
        if value is None:
            return None
        if isinstance(value, dict):
            if set(value.keys()) != {"real", "imag"}:
                raise ValueError(
                    "Complex array primitive form must have keys 'real' and "
                    "'imag', got {}".format(sorted(value.keys())))
            value = np.array(value["real"]) + 1j * np.array(value["imag"])
        elif isinstance(value, (list, tuple, numbers.Number)):
            value = np.array(value)
        elif not isinstance(value, np.ndarray):
            raise ValueError(
                "Could not convert to complex array, got {}".format(value))
        return np.asarray(value, dtype=complex)

    def to_primitive(self, value, context=None):
        value = np.asarray(value, dtype=complex)
        return {
            "real": np.real(value).tolist(),
            "imag": np.imag(value).tolist(),
        }
