"""
physical.core.quantity
======================

Defines the `Quantity` class: a magnitude paired with a `CompositeUnit`.

The magnitude is either a real scalar (``float``) or a one-dimensional,
read-only ``numpy`` array of floats sharing one unit. Quantities are
immutable; every operation returns a new one.

The system supports:
- Addition and subtraction of commensurable quantities (the right operand is
  converted into the left operand's unit first).
- Multiplication, division and exponentiation, with the unit worked out by
  the unit algebra and the magnitude computed elementwise.
- Explicit conversion between commensurable units.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Callable, Iterator, Union

import numpy as np

from physical.core.conversion import convert, convert_magnitude, to_base_unit
from physical.core.dimensions import DIM_0, Dimension
from physical.core.errors import (
    ArrayLengthMismatch,
    IncommensurableDimensions,
    UndefinedPower,
)
from physical.core.numbers import FLOAT_ABS_TOL, FLOAT_REL_TOL, NumberLike, as_tiered
from physical.core.unit import DIMENSIONLESS, CompositeUnit, UnitDefinition, UnitLike, as_unit
from physical.core.utils import format_dim

Number = Union[int, float]
Magnitude = Union[float, np.ndarray]


def _as_magnitude(value: Any) -> Magnitude:
    if isinstance(value, Quantity):
        raise TypeError("Quantity magnitude cannot itself be a Quantity")
    if isinstance(value, numbers.Real):
        return float(value)
    arr = np.array(value, dtype=float)
    if arr.ndim == 0:
        return float(arr)
    if arr.ndim != 1:
        raise ValueError(f"Quantity magnitude must be a scalar or a 1-D sequence, got {arr.ndim}-D")
    arr.setflags(write=False)
    return arr


def _is_plain_magnitude(x: Any) -> bool:
    return isinstance(x, (numbers.Real, np.ndarray, list, tuple)) and not isinstance(x, bool)


def _check_lengths(a: Magnitude, b: Magnitude) -> None:
    if isinstance(a, np.ndarray) and isinstance(b, np.ndarray) and a.shape != b.shape:
        raise ArrayLengthMismatch(len(a), len(b))


def _elementwise(op: Callable[[Any, Any], Any], a: Magnitude, b: Magnitude) -> Magnitude:
    """Apply a numpy binary op with IEEE semantics; scalars come back as float."""
    _check_lengths(a, b)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        out = op(a, b)
    if np.ndim(out) == 0:
        return float(out)
    return out


class Quantity:
    """
    Represents a physical quantity: a magnitude in a given unit.

    Attributes
    ----------
    value : float or numpy.ndarray
        The magnitude expressed in ``unit``.
    unit : CompositeUnit
        The unit the magnitude is expressed in.
    dim : Dimension
        The dimension vector of ``unit``.
    """

    __slots__ = ("_value", "_unit")

    def __init__(self, value: Any, unit: UnitLike = DIMENSIONLESS) -> None:
        object.__setattr__(self, "_unit", as_unit(unit))
        object.__setattr__(self, "_value", _as_magnitude(value))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Quantity is immutable")

    def __reduce__(self) -> tuple:
        return (Quantity, (self._value, self._unit))

    # --- Introspection ---
    @property
    def value(self) -> Magnitude:
        return self._value

    @property
    def unit(self) -> CompositeUnit:
        return self._unit

    @property
    def dim(self) -> Dimension:
        return self._unit.dim

    @property
    def is_array(self) -> bool:
        return isinstance(self._value, np.ndarray)

    def __len__(self) -> int:
        if not self.is_array:
            raise TypeError("len() of a scalar Quantity")
        return len(self._value)

    def __iter__(self) -> Iterator["Quantity"]:
        if not self.is_array:
            raise TypeError("Scalar Quantity is not iterable")
        for x in self._value:
            yield Quantity(x, self._unit)

    def __getitem__(self, index: Any) -> "Quantity":
        if not self.is_array:
            raise TypeError("Scalar Quantity is not subscriptable")
        return Quantity(self._value[index], self._unit)

    # --- Dimension checks ---
    def commensurable(self, other: "Quantity | UnitLike") -> bool:
        other_dim = other.dim if isinstance(other, Quantity) else as_unit(other).dim
        return self.dim == other_dim

    def _coerce_other(self, other: Any, operation: str) -> Magnitude:
        """Return ``other``'s magnitude expressed in this quantity's unit."""
        if isinstance(other, Quantity):
            if other.dim != self.dim:
                raise IncommensurableDimensions(operation, self, other)
            return convert_magnitude(other._value, other._unit, self._unit)
        if _is_plain_magnitude(other):
            # plain numbers only make sense next to a dimensionless quantity
            if self.dim != DIM_0:
                raise IncommensurableDimensions(operation, self, DIM_0)
            return convert_magnitude(_as_magnitude(other), DIMENSIONLESS, self._unit)
        raise TypeError(f"Cannot {operation} Quantity and {type(other).__name__}")

    # --- Conversion ---
    def to(self, new_unit: UnitLike) -> "Quantity":
        return convert(self, new_unit)

    def in_unit(self, new_unit: UnitLike) -> Magnitude:
        """Raw magnitude of this quantity in ``new_unit``."""
        return convert(self, new_unit)._value

    def to_base(self) -> "Quantity":
        """Express in canonical base units (m, kg, s, A, K, mol, cd, rad)."""
        return convert(self, to_base_unit(self._unit))

    # --- Arithmetic ---
    def __add__(self, other: Any) -> "Quantity":
        rhs = self._coerce_other(other, "add")
        return Quantity(_elementwise(np.add, self._value, rhs), self._unit)

    def __radd__(self, other: Any) -> "Quantity":
        return self.__add__(other)

    def __sub__(self, other: Any) -> "Quantity":
        rhs = self._coerce_other(other, "subtract")
        return Quantity(_elementwise(np.subtract, self._value, rhs), self._unit)

    def __rsub__(self, other: Any) -> "Quantity":
        lhs = self._coerce_other(other, "subtract")
        return Quantity(_elementwise(np.subtract, lhs, self._value), self._unit)

    def __mul__(self, other: Any) -> "Quantity":
        if isinstance(other, Quantity):
            unit = self._unit.multiply(other._unit)
            return Quantity(_elementwise(np.multiply, self._value, other._value), unit)
        if isinstance(other, (CompositeUnit, UnitDefinition)):
            return Quantity(self._value, self._unit.multiply(other))
        if _is_plain_magnitude(other):
            return Quantity(_elementwise(np.multiply, self._value, _as_magnitude(other)), self._unit)
        return NotImplemented

    def __rmul__(self, other: Any) -> "Quantity":
        # allows 3 * (2 m) -> 6 m and u.kg * (2 m) -> 2 kg·m
        if isinstance(other, (CompositeUnit, UnitDefinition)):
            return Quantity(self._value, as_unit(other).multiply(self._unit))
        if _is_plain_magnitude(other):
            return Quantity(_elementwise(np.multiply, _as_magnitude(other), self._value), self._unit)
        return NotImplemented

    def __truediv__(self, other: Any) -> "Quantity":
        if isinstance(other, Quantity):
            unit = self._unit.divide(other._unit)
            return Quantity(_elementwise(np.divide, self._value, other._value), unit)
        if isinstance(other, (CompositeUnit, UnitDefinition)):
            return Quantity(self._value, self._unit.divide(other))
        if _is_plain_magnitude(other):
            return Quantity(_elementwise(np.divide, self._value, _as_magnitude(other)), self._unit)
        return NotImplemented

    def __rtruediv__(self, other: Any) -> "Quantity":
        # scalar / quantity -> inverse unit
        if isinstance(other, (CompositeUnit, UnitDefinition)):
            unit = as_unit(other).divide(self._unit)
            return Quantity(_elementwise(np.divide, 1.0, self._value), unit)
        if not _is_plain_magnitude(other):
            return NotImplemented
        unit = self._unit.inverse()
        return Quantity(_elementwise(np.divide, _as_magnitude(other), self._value), unit)

    def __pow__(self, n: NumberLike) -> "Quantity":
        k = as_tiered(n)
        if not k.is_integer and np.any(np.asarray(self._value) < 0):
            raise UndefinedPower(
                f"Cannot raise negative magnitude of {self!r} to non-integer power {k}"
            )
        unit = self._unit.power(k)
        return Quantity(_elementwise(np.power, self._value, float(k)), unit)

    def __neg__(self) -> "Quantity":
        return Quantity(-self._value, self._unit)

    def __pos__(self) -> "Quantity":
        return self

    def __abs__(self) -> "Quantity":
        return Quantity(abs(self._value), self._unit)

    # --- Equality & comparisons ---
    def equals(self, other: "Quantity | Number") -> bool:
        """
        Tolerant magnitude equality after converting ``other`` into this unit.

        Raises ``IncommensurableDimensions`` when the dimensions differ.
        """
        rhs = self._coerce_other(other, "compare")
        if np.shape(self._value) != np.shape(rhs):
            return False
        return bool(
            np.allclose(self._value, rhs, rtol=FLOAT_REL_TOL, atol=FLOAT_ABS_TOL)
        )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Quantity):
            if self.dim != other.dim:
                return False
            return self.equals(other)
        if isinstance(other, numbers.Real) and self.dim == DIM_0:
            return self.equals(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def _scalar_pair(self, other: object) -> tuple[float, float]:
        if self.is_array or (isinstance(other, Quantity) and other.is_array):
            raise TypeError("Ordering comparisons are only defined for scalar quantities")
        # plain numbers compare against dimensionless quantities only
        if isinstance(other, bool) or not isinstance(other, (Quantity, numbers.Real)):
            raise TypeError(f"Cannot compare Quantity with {type(other).__name__}")
        return self._value, float(self._coerce_other(other, "compare"))

    @staticmethod
    def _is_close(a: float, b: float) -> bool:
        return math.isclose(a, b, rel_tol=FLOAT_REL_TOL, abs_tol=FLOAT_ABS_TOL)

    def __lt__(self, other: object) -> bool:
        a, b = self._scalar_pair(other)
        return a < b and not self._is_close(a, b)

    def __le__(self, other: object) -> bool:
        a, b = self._scalar_pair(other)
        return a < b or self._is_close(a, b)

    def __gt__(self, other: object) -> bool:
        a, b = self._scalar_pair(other)
        return a > b and not self._is_close(a, b)

    def __ge__(self, other: object) -> bool:
        a, b = self._scalar_pair(other)
        return a > b or self._is_close(a, b)

    def as_key(self, precision: int = 12) -> tuple:
        """
        Returns a hashable, discretized key for this quantity.

        The standard `__hash__` is not implemented because `__eq__` is
        tolerant, which would violate the Python hash contract. The key is
        built from the dimension and the canonical magnitude rounded to
        ``precision`` decimal places.
        """
        canonical = self._unit.scale * np.asarray(self._value) + self._unit.offset
        rounded = np.round(np.asarray(canonical, dtype=float), precision) + 0.0  # drops -0.0
        if rounded.ndim == 0:
            return (self.dim, float(rounded))
        return (self.dim, tuple(float(x) for x in rounded))

    # --- Display ---
    def _format_value(self) -> str:
        if self.is_array:
            return "[" + ", ".join(f"{x:.15g}" for x in self._value) + "]"
        return f"{self._value:.15g}"

    def __repr__(self) -> str:
        name = self._unit.name
        mag = self._format_value()
        return f"{mag} {name}" if name else mag

    def __format__(self, spec: str) -> str:
        """
        Supported specifiers
        --------------------
        "" (empty), or "native"
            Display the quantity in its current unit (default).
        "base" (or "si")
            Display the quantity converted to canonical base units.
        "dim"
            Display only the dimension, in base symbols (e.g. "kg·m/s²").
        """
        spec = (spec or "").strip().lower()
        if spec in ("", "native"):
            return repr(self)
        if spec in ("base", "si"):
            return repr(self.to_base())
        if spec == "dim":
            return format_dim(self.dim)
        raise ValueError("Unknown format spec; use '', 'native', 'base' or 'dim'")

    # numpy must defer to our reflected operators (array * quantity)
    __array_ufunc__ = None


__all__ = ["Quantity", "Magnitude"]
