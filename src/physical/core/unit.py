"""
physical.core.unit
==================

Unit definitions and the unit algebra.

A :class:`UnitDefinition` is one named unit (``m``, ``ft``, ``°C``) with its
dimension vector and its conversion rule to the canonical unit of that
dimension. A :class:`CompositeUnit` is a product of definitions raised to
tiered exponents (``kg·m/s²``); multiplication, division and powers of units
all happen on composites.

Affine units (those with a non-zero offset, such as °C) do not distribute
over products or powers, so a composite holding one must be exactly that unit
to the first power. Anything else raises ``IncompatibleAffineComposition``.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Tuple, Union

from physical.core.dimensions import DIM_0, Dimension
from physical.core.errors import IncompatibleAffineComposition
from physical.core.numbers import ONE, NumberLike, TieredNumber, as_tiered
from physical.core.utils import format_terms

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from physical.core.quantity import Quantity

Term = Tuple["UnitDefinition", TieredNumber]
UnitLike = Union["CompositeUnit", "UnitDefinition", str]


@dataclass(frozen=True, slots=True)
class UnitDefinition:
    """
    A named unit.

    Attributes
    ----------
    name : str
        Long name (e.g. "meter", "degree Celsius").
    symbol : str
        Short symbol (e.g. "m", "°C"). Defaults to ``name``.
    dim : Dimension
        Dimension vector (L,M,T,I,Θ,N,J,α).
    scale : float
        Multiplicative factor from 1 of this unit to the canonical unit of
        ``dim``. Examples: m=1.0, cm=0.01, ft=0.3048.
    offset : float
        Additive offset applied after scaling (affine units only, e.g.
        °C: offset=273.15 so that K = °C·1 + 273.15).
    """

    name: str
    symbol: str
    dim: Dimension
    scale: float = 1.0
    offset: float = 0.0

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("unit name must be a non-empty string")
        if not self.symbol:
            object.__setattr__(self, "symbol", self.name)
        if not isinstance(self.dim, Dimension):
            object.__setattr__(self, "dim", Dimension(self.dim))
        if not (self.scale > 0 and math.isfinite(self.scale)):
            raise ValueError("scale must be a positive, finite number")
        if not math.isfinite(self.offset):
            raise ValueError("offset must be a finite number")
        object.__setattr__(self, "scale", float(self.scale))
        object.__setattr__(self, "offset", float(self.offset))

    @property
    def is_affine(self) -> bool:
        return self.offset != 0.0

    @property
    def is_canonical(self) -> bool:
        return self.scale == 1.0 and self.offset == 0.0

    def to_canonical(self, x: Any) -> Any:
        return x * self.scale + self.offset

    def from_canonical(self, x: Any) -> Any:
        return (x - self.offset) / self.scale

    def as_unit(self) -> "CompositeUnit":
        return CompositeUnit(((self, ONE),))

    # --- Algebra: lift to a single-term composite ---
    def __mul__(self, other: Any) -> "CompositeUnit":
        return self.as_unit() * other

    def __truediv__(self, other: Any) -> "CompositeUnit":
        return self.as_unit() / other

    def __rtruediv__(self, other: Any) -> "CompositeUnit":
        return other / self.as_unit()

    def __pow__(self, n: NumberLike) -> "CompositeUnit":
        return self.as_unit() ** n

    def __rmul__(self, value: Any) -> "Quantity":
        return value * self.as_unit()

    __array_ufunc__ = None

    def __str__(self) -> str:
        return self.symbol


class CompositeUnit:
    """
    Product of (UnitDefinition, TieredNumber) terms.

    Terms for the same definition are merged and zero exponents dropped on
    construction; the dimension vector is computed once and cached. Term order
    follows first appearance; :meth:`canonical_terms` gives the deterministic
    order used for equality, hashing and display.
    """

    __slots__ = ("_terms", "_dim", "_scale")

    def __init__(self, terms: Iterable[Tuple["UnitDefinition", NumberLike]] = ()) -> None:
        merged: dict[UnitDefinition, TieredNumber] = {}
        for definition, exp in terms:
            e = as_tiered(exp)
            merged[definition] = merged[definition] + e if definition in merged else e

        cleaned = tuple((d, e) for d, e in merged.items() if e)
        _check_affine(cleaned)

        dim = DIM_0
        scale = 1.0
        for d, e in cleaned:
            dim = dim * (d.dim ** e)
            scale *= d.scale ** float(e)

        object.__setattr__(self, "_terms", cleaned)
        object.__setattr__(self, "_dim", dim)
        object.__setattr__(self, "_scale", scale)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("CompositeUnit is immutable")

    def __reduce__(self) -> tuple:
        return (CompositeUnit, (self._terms,))

    @classmethod
    def of(cls, definition: UnitDefinition, exponent: NumberLike = 1) -> "CompositeUnit":
        return cls(((definition, exponent),))

    # --- Introspection ---
    @property
    def terms(self) -> Tuple[Term, ...]:
        return self._terms

    @property
    def dim(self) -> Dimension:
        return self._dim

    @property
    def scale(self) -> float:
        """Effective scale to canonical: product of definition.scale ** exponent."""
        return self._scale

    @property
    def offset(self) -> float:
        return self._terms[0][0].offset if self.is_affine else 0.0

    @property
    def is_affine(self) -> bool:
        return any(d.is_affine for d, _ in self._terms)

    @property
    def is_dimensionless(self) -> bool:
        return self._dim.is_dimensionless

    @property
    def is_empty(self) -> bool:
        return not self._terms

    def canonical_terms(self) -> Tuple[Term, ...]:
        return tuple(sorted(self._terms, key=_term_key))

    @property
    def name(self) -> str:
        return format_terms([(d.symbol, e) for d, e in self.canonical_terms()])

    # --- Algebra ---
    def multiply(self, other: UnitLike) -> "CompositeUnit":
        o = as_unit(other)
        if (self.is_affine and not o.is_empty) or (o.is_affine and not self.is_empty):
            raise IncompatibleAffineComposition(
                f"Cannot multiply '{self.name}' by '{o.name}': affine units cannot be "
                "combined with other units"
            )
        return CompositeUnit(self._terms + o._terms)

    def inverse(self) -> "CompositeUnit":
        if self.is_affine:
            raise IncompatibleAffineComposition(
                f"Cannot invert affine unit '{self.name}'"
            )
        return CompositeUnit((d, -e) for d, e in self._terms)

    def divide(self, other: UnitLike) -> "CompositeUnit":
        return self.multiply(as_unit(other).inverse())

    def power(self, n: NumberLike) -> "CompositeUnit":
        k = as_tiered(n)
        if k == ONE:
            return self
        if self.is_affine:
            raise IncompatibleAffineComposition(
                f"Cannot raise affine unit '{self.name}' to the power {k}"
            )
        return CompositeUnit((d, e * k) for d, e in self._terms)

    def equivalent(self, other: UnitLike) -> bool:
        """Same dimension, scale and offset, regardless of how the unit is spelled."""
        o = as_unit(other)
        return (
            self._dim == o._dim
            and math.isclose(self._scale, o._scale, rel_tol=1e-12, abs_tol=0.0)
            and self.offset == o.offset
        )

    # --- Operators ---
    def __mul__(self, other: Any) -> "CompositeUnit":
        if not isinstance(other, (CompositeUnit, UnitDefinition)):
            return NotImplemented
        return self.multiply(other)

    def __rmul__(self, value: Any) -> "Quantity":
        # allows 3 * u.m -> Quantity
        from physical.core.quantity import Quantity

        return Quantity(value, self)

    def __truediv__(self, other: Any) -> "CompositeUnit":
        if not isinstance(other, (CompositeUnit, UnitDefinition)):
            return NotImplemented
        return self.divide(other)

    def __rtruediv__(self, n: Any) -> "CompositeUnit":
        if not isinstance(n, numbers.Real) or n != 1:
            raise TypeError(
                f"Invalid operation: cannot divide {n} by a unit ({self.name}). "
                "Only 1/unit (reciprocal) is supported."
            )
        return self.inverse()

    def __pow__(self, n: NumberLike) -> "CompositeUnit":
        return self.power(n)

    # Make numpy defer to __rmul__ so array * unit builds one array Quantity
    __array_ufunc__ = None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UnitDefinition):
            other = as_unit(other)
        if not isinstance(other, CompositeUnit):
            return NotImplemented
        return self.canonical_terms() == other.canonical_terms()

    def __hash__(self) -> int:
        return hash(self.canonical_terms())

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"CompositeUnit({self.name!r})"


def _term_key(term: Term) -> tuple:
    d, _ = term
    return (tuple(float(x) for x in d.dim), d.name)


def _check_affine(terms: Tuple[Term, ...]) -> None:
    affine = [d for d, _ in terms if d.is_affine]
    if not affine:
        return
    if len(terms) != 1 or terms[0][1] != ONE:
        names = ", ".join(d.symbol for d in affine)
        raise IncompatibleAffineComposition(
            f"Affine unit(s) {names} must appear alone with exponent exactly 1"
        )


def as_unit(spec: Any) -> CompositeUnit:
    """Coerce a definition, composite or unit expression into a CompositeUnit."""
    if isinstance(spec, CompositeUnit):
        return spec
    if isinstance(spec, UnitDefinition):
        return spec.as_unit()
    if isinstance(spec, str):
        from physical.units.registry import DEFAULT_REGISTRY

        return DEFAULT_REGISTRY.unit(spec)
    raise TypeError(f"Expected a unit, got {type(spec).__name__}")


DIMENSIONLESS = CompositeUnit()


__all__ = ["UnitDefinition", "CompositeUnit", "DIMENSIONLESS", "as_unit", "Term"]
