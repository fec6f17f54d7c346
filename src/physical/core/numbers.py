# physical.core.numbers
"""
Exact-when-possible numbers used for unit exponents.

A :class:`TieredNumber` holds exactly one of

* an ``int``            (integer tier),
* a ``Fraction``        (rational tier, lowest terms, never integral),
* a ``float``           (floating tier).

Results always land in the most exact tier the operation allows. Integer and
rational operands stay exact; as soon as a float is involved the result is a
float. A float is never turned back into an exact value, so ``1.0`` and ``1``
are different exponents.

>>> TieredNumber(5) * TieredNumber(1, 5)
TieredNumber(1)
>>> TieredNumber(4) ** TieredNumber(1, 2)
TieredNumber(2)
>>> TieredNumber(2) ** TieredNumber(1, 2)
TieredNumber(1.4142135623730951)
"""

from __future__ import annotations

import math
import numbers
from fractions import Fraction
from typing import Any, Union

from physical.core.errors import DivisionByZero, UndefinedPower

# Float-tier equality tolerance. Only ever applied between two floats.
FLOAT_REL_TOL = 1e-12
FLOAT_ABS_TOL = 1e-12

INTEGER = "integer"
RATIONAL = "rational"
FLOATING = "floating"

Exact = Union[int, Fraction]
NumberLike = Union["TieredNumber", int, Fraction, float]


def _normalize(x: Any) -> int | Fraction | float:
    if isinstance(x, TieredNumber):
        return x._value
    if isinstance(x, bool):
        raise TypeError("bool is not a valid TieredNumber value")
    if isinstance(x, numbers.Integral):
        return int(x)
    if isinstance(x, Fraction):
        return x.numerator if x.denominator == 1 else x
    if isinstance(x, numbers.Real):
        return float(x)
    raise TypeError(f"TieredNumber requires int, Fraction or float, got {type(x).__name__}")


def _coerce(x: Any) -> "TieredNumber | None":
    if isinstance(x, TieredNumber):
        return x
    try:
        return TieredNumber(x)
    except TypeError:
        return None


def _ieee_div(a: float, b: float) -> float:
    if b != 0.0:
        return a / b
    if a == 0.0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _iroot(x: int, n: int) -> int | None:
    """Exact integer n-th root of ``x`` or None."""
    if x < 0:
        return None
    if x in (0, 1):
        return x
    if n == 2:
        r = math.isqrt(x)
    else:
        # integer Newton from an overestimate; decreases to floor(x ** (1/n))
        r = 1 << -(-x.bit_length() // n)
        while True:
            y = ((n - 1) * r + x // r ** (n - 1)) // n
            if y >= r:
                break
            r = y
    return r if r ** n == x else None


def _float_pow(base: float, exp: float) -> float:
    if base < 0 and not exp.is_integer():
        raise UndefinedPower(f"Cannot raise negative value {base} to non-integer power {exp}")
    odd = exp.is_integer() and int(exp) % 2 == 1
    if base == 0.0 and exp < 0:
        return math.copysign(math.inf, base) if odd else math.inf
    try:
        return base ** exp
    except OverflowError:
        return -math.inf if (base < 0 and odd) else math.inf


def _power(base: int | Fraction | float, exp: int | Fraction | float) -> int | Fraction | float:
    if isinstance(base, float) or isinstance(exp, float):
        return _float_pow(float(base), float(exp))

    if isinstance(exp, int):
        if base == 0 and exp < 0:
            raise DivisionByZero(f"Cannot raise exact zero to negative power {exp}")
        if exp >= 0:
            return base ** exp
        return Fraction(base) ** exp

    # rational, non-integral exponent
    if base < 0:
        raise UndefinedPower(f"Cannot raise negative value {base} to non-integer power {exp}")
    frac = Fraction(base)
    num = _iroot(frac.numerator, exp.denominator)
    den = _iroot(frac.denominator, exp.denominator)
    if num is not None and den is not None:
        return _power(Fraction(num, den), exp.numerator)
    return _float_pow(float(base), float(exp))


class TieredNumber:
    """An int, reduced Fraction or float that remembers how exact it is."""

    __slots__ = ("_value",)

    def __init__(self, value: NumberLike = 0, denominator: int | None = None) -> None:
        if denominator is not None:
            if isinstance(value, bool) or isinstance(denominator, bool) \
                    or not isinstance(value, numbers.Integral) \
                    or not isinstance(denominator, numbers.Integral):
                raise TypeError("numerator and denominator must be integers")
            if denominator == 0:
                raise DivisionByZero(f"Zero denominator in {value}/0")
            value = Fraction(int(value), int(denominator))
        object.__setattr__(self, "_value", _normalize(value))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("TieredNumber is immutable")

    def __reduce__(self) -> tuple:
        return (TieredNumber, (self._value,))

    # --- Introspection ---
    @property
    def value(self) -> int | Fraction | float:
        return self._value

    @property
    def tier(self) -> str:
        if isinstance(self._value, float):
            return FLOATING
        if isinstance(self._value, Fraction):
            return RATIONAL
        return INTEGER

    @property
    def is_exact(self) -> bool:
        return not isinstance(self._value, float)

    @property
    def is_integer(self) -> bool:
        """True when the value is integral (including floats such as ``2.0``)."""
        v = self._value
        if isinstance(v, float):
            return v.is_integer()
        return isinstance(v, int)

    # --- Arithmetic ---
    def __add__(self, other: Any) -> "TieredNumber":
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return TieredNumber(self._value + o._value)

    def __radd__(self, other: Any) -> "TieredNumber":
        return self.__add__(other)

    def __sub__(self, other: Any) -> "TieredNumber":
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return TieredNumber(self._value - o._value)

    def __rsub__(self, other: Any) -> "TieredNumber":
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return o - self

    def __mul__(self, other: Any) -> "TieredNumber":
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return TieredNumber(self._value * o._value)

    def __rmul__(self, other: Any) -> "TieredNumber":
        return self.__mul__(other)

    def __truediv__(self, other: Any) -> "TieredNumber":
        o = _coerce(other)
        if o is None:
            return NotImplemented
        a, b = self._value, o._value
        if self.is_exact and o.is_exact:
            if b == 0:
                raise DivisionByZero(f"Cannot divide {self} by exact zero")
            return TieredNumber(Fraction(a) / b)
        return TieredNumber(_ieee_div(float(a), float(b)))

    def __rtruediv__(self, other: Any) -> "TieredNumber":
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return o / self

    def __pow__(self, other: Any, modulo: Any | None = None) -> "TieredNumber":
        if modulo is not None:
            raise TypeError("Modulo exponentiation is not supported for TieredNumber.")
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return TieredNumber(_power(self._value, o._value))

    def __rpow__(self, other: Any) -> "TieredNumber":
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return o ** self

    def __neg__(self) -> "TieredNumber":
        return TieredNumber(-self._value)

    def __pos__(self) -> "TieredNumber":
        return self

    def __abs__(self) -> "TieredNumber":
        return TieredNumber(abs(self._value))

    def reciprocal(self) -> "TieredNumber":
        return TieredNumber(1) / self

    # --- Comparison ---
    def __eq__(self, other: object) -> bool:
        o = _coerce(other)
        if o is None:
            return NotImplemented
        a, b = self._value, o._value
        a_float, b_float = isinstance(a, float), isinstance(b, float)
        if a_float and b_float:
            return a == b or math.isclose(a, b, rel_tol=FLOAT_REL_TOL, abs_tol=FLOAT_ABS_TOL)
        if a_float or b_float:
            # exact and approximate tiers never compare equal
            return False
        return a == b

    def __hash__(self) -> int:
        if isinstance(self._value, float):
            return hash(FLOATING)
        return hash(self._value)

    def __lt__(self, other: Any) -> bool:
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return self._value < o._value

    def __le__(self, other: Any) -> bool:
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return self._value <= o._value

    def __gt__(self, other: Any) -> bool:
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return self._value > o._value

    def __ge__(self, other: Any) -> bool:
        o = _coerce(other)
        if o is None:
            return NotImplemented
        return self._value >= o._value

    # --- Conversions ---
    def __bool__(self) -> bool:
        return self._value != 0

    def __float__(self) -> float:
        return float(self._value)

    def __int__(self) -> int:
        if not self.is_integer:
            raise ValueError(f"{self} is not an integer")
        return int(self._value)

    def __repr__(self) -> str:
        return f"TieredNumber({self})"

    def __str__(self) -> str:
        v = self._value
        if isinstance(v, Fraction):
            return f"{v.numerator}/{v.denominator}"
        return repr(v)


def as_tiered(x: NumberLike) -> TieredNumber:
    """Return ``x`` as a TieredNumber without copying existing instances."""
    return x if isinstance(x, TieredNumber) else TieredNumber(x)


ZERO = TieredNumber(0)
ONE = TieredNumber(1)


__all__ = [
    "TieredNumber",
    "as_tiered",
    "NumberLike",
    "ZERO",
    "ONE",
    "INTEGER",
    "RATIONAL",
    "FLOATING",
    "FLOAT_REL_TOL",
    "FLOAT_ABS_TOL",
]
