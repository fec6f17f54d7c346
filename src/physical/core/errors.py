"""
physical.core.errors
====================

Exception types raised by the unit engine.

Every error derives from :class:`UnitError` and from the built-in exception
that best describes it, so ``except TypeError`` around a dimension mismatch or
``except ValueError`` around an unknown symbol keeps working.
"""

from __future__ import annotations


class UnitError(Exception):
    """Base class for all errors raised by ``physical``."""


class UnknownUnit(UnitError, ValueError):
    """A name, symbol or alias is not known to the registry."""

    def __init__(self, symbol: str, detail: str | None = None) -> None:
        self.symbol = symbol
        msg = f"Unknown unit symbol: {symbol}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class DuplicateUnitName(UnitError, ValueError):
    """A registration would shadow an existing unit or alias."""


class RegistryFrozen(UnitError, RuntimeError):
    """The registry no longer accepts registrations."""


class IncommensurableDimensions(UnitError, TypeError):
    """Two operands do not share a dimension vector."""

    def __init__(self, operation: str, left: object, right: object) -> None:
        self.operation = operation
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot {operation}: incommensurable dimensions "
            f"{_describe(left)} and {_describe(right)}"
        )


class IncompatibleAffineComposition(UnitError, TypeError):
    """An affine unit (one with an offset) was used in a composite unit."""


class ArrayLengthMismatch(UnitError, ValueError):
    """Elementwise operation on arrays of different lengths."""

    def __init__(self, left: int, right: int) -> None:
        self.lengths = (left, right)
        super().__init__(f"Array length mismatch: {left} and {right}")


class DivisionByZero(UnitError, ZeroDivisionError):
    """Exact (integer or rational) division by zero."""


class UndefinedPower(UnitError, ValueError):
    """Non-integer power of a negative value."""


def _describe(obj: object) -> str:
    dim = getattr(obj, "dim", obj)
    text = repr(dim)
    return text if text else "[dimensionless]"


__all__ = [
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
