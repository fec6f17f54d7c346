# physical.core.dimensions

from __future__ import annotations

import numbers
from collections.abc import Iterable
from enum import IntEnum
from typing import Any, Tuple, TypeAlias, Union

from physical.core.numbers import ZERO, NumberLike, TieredNumber, as_tiered


class BaseDimension(IntEnum):
    """Base dimensions, in vector order."""

    LENGTH = 0
    MASS = 1
    TIME = 2
    CURRENT = 3
    TEMPERATURE = 4
    AMOUNT = 5
    LUMINOUS = 6
    ANGLE = 7

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = ("L", "M", "T", "I", "Θ", "N", "J", "α")
N_BASE = len(BaseDimension)

# --- Public typing -----------------------------------------------------------
Dim: TypeAlias = "Dimension"
DimTuple = Tuple[TieredNumber, ...]
DimLike = Union["Dimension", Iterable[NumberLike]]

# --- Core object -------------------------------------------------------------

class Dimension(tuple):
    """
    Immutable 8-length vector of tiered exponents, one per base dimension
    (L, M, T, I, Θ, N, J, α).

    Tuple subclass => hashable, comparable, usable as dict keys. Components
    are :class:`TieredNumber`, so a dimension built from plain ints equals and
    hashes like the plain int tuple.
    """

    __slots__ = ()

    def __new__(cls, data: DimLike = (0,) * N_BASE) -> "Dimension":
        if isinstance(data, Dimension):
            return data
        if not isinstance(data, Iterable):
            raise TypeError(
                f"Dimension requires an iterable of exponents, got {type(data).__name__}"
            )
        # an absent base is always the exact zero, even when it came out of float arithmetic
        t = tuple(x if x else ZERO for x in map(as_tiered, data))
        if len(t) != N_BASE:
            raise ValueError("Dimension must have length 8 (L, M, T, I, Θ, N, J, α).")
        return tuple.__new__(cls, t)

    @classmethod
    def of(cls, base: BaseDimension, exponent: NumberLike = 1) -> "Dimension":
        """Vector with a single non-zero component."""
        data: list[NumberLike] = [0] * N_BASE
        data[base] = exponent
        return cls(data)

    # --- Algebra (operator overloads) ---
    def __mul__(self, other: DimLike) -> "Dimension":  # type: ignore[override]
        """Unit × unit: componentwise addition of exponents."""
        o = Dimension(other)
        return Dimension(x + y for x, y in zip(self, o, strict=True))

    def __truediv__(self, other: DimLike) -> "Dimension":
        o = Dimension(other)
        return Dimension(x - y for x, y in zip(self, o, strict=True))

    def __rtruediv__(self, other: DimLike) -> "Dimension":
        """Handles (tuple / Dimension) by calculating (other / self)."""
        return Dimension(other) / self

    def __pow__(self, n: NumberLike, modulo: Any | None = None) -> "Dimension":
        # Python may call __pow__ with a third arg (modulo); reject it
        if modulo is not None:
            raise TypeError("Modulo exponentiation is not supported for Dimension.")
        if isinstance(n, bool) or not isinstance(n, (numbers.Real, TieredNumber)):
            raise TypeError(
                f"Exponent must be a real number or TieredNumber, got {type(n).__name__}"
            )
        k = as_tiered(n)
        return Dimension(e * k for e in self)

    def inverse(self) -> "Dimension":
        return Dimension(-e for e in self)

    def __neg__(self) -> "Dimension":
        return self.inverse()

    def __rmul__(self, other: Any) -> "Dimension":
        """Prevent (int * Dimension) from falling back to tuple repetition."""
        raise TypeError(f"unsupported operand type(s) for *: '{type(other).__name__}' and 'Dimension'")

    def __add__(self, other: Any) -> "Dimension":
        """Block tuple concatenation (e.g., LENGTH + MASS)."""
        raise TypeError("Dimensions cannot be added; multiply them to combine exponents")

    def __radd__(self, other: Any) -> "Dimension":
        raise TypeError("Dimensions cannot be added; multiply them to combine exponents")

    # --- Helpers ---
    @property
    def is_dimensionless(self) -> bool:
        return not any(self)

    @property
    def is_exact(self) -> bool:
        """True when no component sits in the floating tier."""
        return all(x.is_exact for x in self)

    def commensurable(self, other: DimLike) -> bool:
        return self == Dimension(other)

    def component(self, base: BaseDimension) -> TieredNumber:
        return self[base]

    def as_tuple(self) -> DimTuple:
        return tuple(self)

    def __repr__(self) -> str:
        parts = ""
        for label, v in zip(_LABELS, self, strict=True):
            if v:
                exp = f"({v})" if v.tier == "rational" else str(v)
                parts += f"[{label}^{exp}]"
        return parts


def commensurable(a: DimLike, b: DimLike) -> bool:
    """Exact dimension-vector equality."""
    return Dimension(a) == Dimension(b)


# --- Function shims ----------------------------------------------------------

def dim_mul(a: DimLike, b: DimLike) -> Dimension:
    return Dimension(a) * b

def dim_div(a: DimLike, b: DimLike) -> Dimension:
    return Dimension(a) / b

def dim_pow(a: DimLike, n: NumberLike) -> Dimension:
    return Dimension(a) ** n

# --- Public constants --------------------------------------------------------

DIM_0: Dim       = Dimension()
LENGTH: Dim      = Dimension.of(BaseDimension.LENGTH)
MASS: Dim        = Dimension.of(BaseDimension.MASS)
TIME: Dim        = Dimension.of(BaseDimension.TIME)
CURRENT: Dim     = Dimension.of(BaseDimension.CURRENT)
TEMPERATURE: Dim = Dimension.of(BaseDimension.TEMPERATURE)
AMOUNT: Dim      = Dimension.of(BaseDimension.AMOUNT)
LUMINOUS: Dim    = Dimension.of(BaseDimension.LUMINOUS)
ANGLE: Dim       = Dimension.of(BaseDimension.ANGLE)

BASE_VECTORS: Tuple[Dim, ...] = (LENGTH, MASS, TIME, CURRENT, TEMPERATURE, AMOUNT, LUMINOUS, ANGLE)
