# physical/units/prefixes.py
"""SI decimal prefixes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Prefix:
    name: str
    symbol: str
    factor: float


PREFIXES: Tuple[Prefix, ...] = (
    Prefix("quetta", "Q", 1e30),
    Prefix("ronna", "R", 1e27),
    Prefix("yotta", "Y", 1e24),
    Prefix("zetta", "Z", 1e21),
    Prefix("exa", "E", 1e18),
    Prefix("peta", "P", 1e15),
    Prefix("tera", "T", 1e12),
    Prefix("giga", "G", 1e9),
    Prefix("mega", "M", 1e6),
    Prefix("kilo", "k", 1e3),
    Prefix("hecto", "h", 1e2),
    Prefix("deca", "da", 1e1),
    Prefix("deci", "d", 1e-1),
    Prefix("centi", "c", 1e-2),
    Prefix("milli", "m", 1e-3),
    Prefix("micro", "µ", 1e-6),
    Prefix("nano", "n", 1e-9),
    Prefix("pico", "p", 1e-12),
    Prefix("femto", "f", 1e-15),
    Prefix("atto", "a", 1e-18),
    Prefix("zepto", "z", 1e-21),
    Prefix("yocto", "y", 1e-24),
    Prefix("ronto", "r", 1e-27),
    Prefix("quecto", "q", 1e-30),
)
