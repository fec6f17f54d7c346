"""
physical: dimensional analysis and unit algebra for Python.

Quantities carry a dimension vector and a unit alongside their magnitude, so
adding a force to a mass fails loudly while multiplying a mass by an
acceleration yields a force. Magnitudes are floats or one-dimensional numpy
arrays; unit exponents are exact integers or rationals unless a float forces
them into the approximate tier.

The units registry is built lazily through `physical.units.u` or on the first
string unit lookup.
"""

from importlib import metadata as _metadata

from physical.core.api import (
    add,
    commensurable,
    convert,
    dimension_vector,
    divide,
    equals,
    lookup_unit,
    make_quantity,
    multiply,
    power,
    quantity,
    subtract,
)
from physical.core.dimensions import Dimension
from physical.core.errors import (
    ArrayLengthMismatch,
    DivisionByZero,
    DuplicateUnitName,
    IncommensurableDimensions,
    IncompatibleAffineComposition,
    RegistryFrozen,
    UndefinedPower,
    UnitError,
    UnknownUnit,
)
from physical.core.numbers import TieredNumber
from physical.core.quantity import Quantity
from physical.core.unit import CompositeUnit, UnitDefinition

__license__ = "MIT"

# Try to read the installed package version first; fall back to a default for local dev.
try:
    __version__ = _metadata.version("physical")
except _metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "__license__",
    "TieredNumber",
    "Dimension",
    "UnitDefinition",
    "CompositeUnit",
    "Quantity",
    "lookup_unit",
    "make_quantity",
    "quantity",
    "multiply",
    "divide",
    "power",
    "add",
    "subtract",
    "convert",
    "commensurable",
    "equals",
    "dimension_vector",
    "UnitError",
    "UnknownUnit",
    "DuplicateUnitName",
    "RegistryFrozen",
    "IncommensurableDimensions",
    "IncompatibleAffineComposition",
    "ArrayLengthMismatch",
    "DivisionByZero",
    "UndefinedPower",
]
