"""Defines the schema of simulation inputs and solver settings."""
from schematics import models
from schematics import types
from schematics.exceptions import ValidationError

from wgsim.simulation.schema_types import ComplexArrayType


class ModeSpec(models.Model):
    """Describes a waveguide mode along a cross-section.

    Attributes:
        hz: Hz profile along the cross-section.
        ey: Ey profile along the cross-section (required for output modes).
        beta: Phase advance of the mode per grid cell (required for input
            modes).
    """
    hz = ComplexArrayType(required=True)
    ey = ComplexArrayType()
    beta = types.FloatType()


class SimulationSpec(models.Model):
    """Specification of a single simulation.

    Attributes:
        omega: Angular frequency (in units of inverse grid cells).
        input: Mode launched into the device. Serialized as `in`.
        output: Mode whose transmitted power is measured. Serialized as `out`.
    """
    omega = types.FloatType(required=True)
    input = types.ModelType(ModeSpec, required=True, serialized_name="in")
    output = types.ModelType(ModeSpec, required=True, serialized_name="out")

    def validate_omega(self, data, value):
        if value is not None and value <= 0:
            raise ValidationError(
                "Frequency must be positive, got {}".format(value))
        return value

    def validate_input(self, data, value):
        if value is not None and value.beta is None:
            raise ValidationError("Input mode requires `beta`.")
        return value

    def validate_output(self, data, value):
        if value is not None and value.ey is None:
            raise ValidationError("Output mode requires `ey`.")
        return value


class SimulationConfig(models.Model):
    """Solver settings.

    Attributes:
        pml_thickness: Number of PML cells on each edge of the grid.
        pml_exponent: Power-law grading of the PML conductivity.
        pml_strength: Maximum PML conductivity. Defaults to `1 / omega`.
        boundary: Either "periodic" or "mirror". Defaults to "periodic" for
            the Hz formulation and "mirror" for the Ex/Ey formulation.
        source_position: Row carrying the unshifted input profile. Defaults
            to `pml_thickness + box_margin + 2` or halfway through the input
            padding, whichever is further from the edge.
        box_margin: Inset of the power box from the PML.
        lattice_normalization: Whether to use the grid-exact source
            normalization (see `sources.unit_power_normalization`).
        degenerate_tol: Tolerance below which the source normalization is
            considered singular.
    """
    pml_thickness = types.IntType(default=10, min_value=0)
    pml_exponent = types.FloatType(default=3.5, min_value=0)
    pml_strength = types.FloatType(min_value=0)
    boundary = types.StringType(choices=("periodic", "mirror"))
    source_position = types.IntType(min_value=1)
    box_margin = types.IntType(default=5, min_value=0)
    lattice_normalization = types.BooleanType(default=True)
    degenerate_tol = types.FloatType(default=1e-9, min_value=0)
