"""
physical.core.utils
===================

Helpers for displaying dimensions and unit terms in a readable scientific
format (e.g. 'kg·m/s²', 'm^(1/2)').
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from physical.core.dimensions import Dim
from physical.core.numbers import INTEGER, RATIONAL, TieredNumber

_SUPERSCRIPTS = str.maketrans("0123456789-", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻")

# Canonical symbols for each base dimension, in vector order (L,M,T,I,Θ,N,J,α)
BASE_SYMBOLS: Tuple[str, ...] = ("m", "kg", "s", "A", "K", "mol", "cd", "rad")

# Conventional display order: M, L, T, I, Θ, N, J, α
_DISPLAY_ORDER: Tuple[int, ...] = (1, 0, 2, 3, 4, 5, 6, 7)


def _sup(n: int) -> str:
    return "" if n == 1 else str(n).translate(_SUPERSCRIPTS)


def format_exponent(exp: TieredNumber) -> str:
    """Suffix for a (positive) exponent: '²', '^(1/2)', '^1.5'."""
    if exp.tier == INTEGER:
        return _sup(int(exp))
    if exp.tier == RATIONAL:
        return f"^({exp})"
    return f"^{exp}"


def format_terms(terms: Sequence[Tuple[str, TieredNumber]]) -> str:
    """
    Join (symbol, exponent) pairs into 'num/den' form.

    The order of ``terms`` is kept. An empty sequence gives ''.
    """
    num: List[str] = []
    den: List[str] = []
    for sym, exp in terms:
        if exp > 0:
            num.append(sym + format_exponent(exp))
        elif exp < 0:
            den.append(sym + format_exponent(-exp))

    if not num and not den:
        return ""
    numerator = "·".join(num) if num else "1"
    if not den:
        return numerator
    denominator = "·".join(den)
    if len(den) > 1:
        denominator = f"({denominator})"
    return f"{numerator}/{denominator}"


def format_dim(dim: Dim) -> str:
    """
    Turn a dimension vector into 'kg·m/s²' style using the canonical base
    symbols. Dimensionless gives '1'.
    """
    terms = [(BASE_SYMBOLS[i], dim[i]) for i in _DISPLAY_ORDER if dim[i]]
    return format_terms(terms) or "1"


__all__ = ["BASE_SYMBOLS", "format_exponent", "format_terms", "format_dim"]
