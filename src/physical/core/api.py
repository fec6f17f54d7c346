"""
physical.core.api
=================

Named-function forms of the unit engine's operations.

The operators on :class:`Quantity` and :class:`CompositeUnit` are the usual
way to compute; these functions exist for callers that prefer (or need) a
plain callable, e.g. ``functools.reduce(multiply, factors)``.
"""

from __future__ import annotations

from typing import Any, Union

from physical.core.conversion import convert as _convert
from physical.core.dimensions import Dimension
from physical.core.numbers import NumberLike
from physical.core.quantity import Quantity
from physical.core.unit import CompositeUnit, UnitDefinition, UnitLike, as_unit

Operand = Union[Quantity, CompositeUnit, UnitDefinition]


def lookup_unit(name: str) -> UnitDefinition:
    """Resolve a unit name, symbol or alias in the default registry.

    Raises ``UnknownUnit`` for anything else, including unit expressions;
    use ``Quantity`` or ``UnitsRegistry.unit`` for those.
    """
    from physical.units.registry import DEFAULT_REGISTRY

    return DEFAULT_REGISTRY.get(name)


def make_quantity(magnitude: Any, unit: UnitLike) -> Quantity:
    return Quantity(magnitude, unit)


def quantity(magnitude: Any, unit_name: UnitLike) -> Quantity:
    """``quantity(4.5, "newton")`` -> 4.5 N."""
    return Quantity(magnitude, unit_name)


def multiply(a: Operand, b: Operand) -> Any:
    if isinstance(a, UnitDefinition):
        a = a.as_unit()
    return a * b


def divide(a: Operand, b: Operand) -> Any:
    if isinstance(a, UnitDefinition):
        a = a.as_unit()
    return a / b


def power(a: Operand, n: NumberLike) -> Any:
    return a ** n


def add(a: Quantity, b: Quantity) -> Quantity:
    return a + b


def subtract(a: Quantity, b: Quantity) -> Quantity:
    return a - b


def convert(q: Quantity, target: UnitLike) -> Quantity:
    """Express ``q`` in ``target``; raises IncommensurableDimensions on mismatch."""
    return _convert(q, target)


def dimension_vector(x: "Operand | str") -> Dimension:
    if isinstance(x, Quantity):
        return x.dim
    return as_unit(x).dim


def commensurable(a: "Operand | str", b: "Operand | str") -> bool:
    """True when both operands share a dimension vector."""
    return dimension_vector(a) == dimension_vector(b)


def equals(a: Quantity, b: Quantity) -> bool:
    """Tolerant equality after conversion; raises IncommensurableDimensions on mismatch."""
    return a.equals(b)


__all__ = [
    "lookup_unit",
    "make_quantity",
    "quantity",
    "multiply",
    "divide",
    "power",
    "add",
    "subtract",
    "convert",
    "dimension_vector",
    "commensurable",
    "equals",
]
