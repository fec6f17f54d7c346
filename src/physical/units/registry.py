"""
physical.units.registry
=======================

A structured, extensible, and testable units registry.

- Encapsulates registry state in a `UnitsRegistry` class (thread-safe).
- Data-driven registration of SI base/derived units and common non-SI units.
- Normalization that handles ASCII fallbacks and Unicode NFC.
- Lazy synthesis of SI-prefixed units ("km", "kilometer"), never stacked.
- Support for aliases (e.g., "meter" -> "m", "celsius" -> "°C").
- Initialize-then-freeze lifecycle: registrations happen first, the first
  lookup freezes the registry and later registrations raise `RegistryFrozen`.

Each unit is registered under both its long name and its symbol. Multiple
registries can coexist; tests build fresh ones with
`_bootstrap_default_registry()`.
"""
from __future__ import annotations

import logging
import math
import threading
import unicodedata
from typing import ClassVar, Dict, Iterable, Mapping, Optional, Tuple

from physical.core.dimensions import (
    AMOUNT,
    ANGLE,
    CURRENT,
    DIM_0,
    LENGTH,
    LUMINOUS,
    MASS,
    TEMPERATURE,
    TIME,
    Dimension,
    DimLike,
    dim_div,
    dim_mul,
    dim_pow,
)
from physical.core.errors import (
    DuplicateUnitName,
    IncompatibleAffineComposition,
    RegistryFrozen,
    UnknownUnit,
)
from physical.core.unit import CompositeUnit, UnitDefinition
from physical.units.parser import evaluate_unit_expr
from physical.units.prefixes import PREFIXES, Prefix

logger = logging.getLogger(__name__)

# Ordered by descending length for robust matching ("da" before "d")
_PREFIX_SYMBOLS_DESC: Tuple[Prefix, ...] = tuple(sorted(PREFIXES, key=lambda p: len(p.symbol), reverse=True))
_PREFIX_NAMES_DESC: Tuple[Prefix, ...] = tuple(sorted(PREFIXES, key=lambda p: len(p.name), reverse=True))

# Characters that make a string a unit expression rather than a single symbol
_EXPR_CHARS = frozenset("*/^()·⁰¹²³⁴⁵⁶⁷⁸⁹⁻ ")

# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------
_GREEK_MU = "μ"
_MICRO_SIGN = "µ"


def normalize_symbol(s: str) -> str:
    """Normalize user-provided unit symbols.

    Rules:
    - Strip surrounding whitespace.
    - Unicode normalize to NFC (composed forms like "Å").
    - Greek small mu (U+03BC) becomes the micro sign (U+00B5).

    The ASCII micro fallback ("um" -> "µm") is applied at lookup time, and
    only when the literal symbol is unknown.
    """
    if not s:
        return s
    s = unicodedata.normalize("NFC", s.strip())
    return s.replace(_GREEK_MU, _MICRO_SIGN)


# ---------------------------------------------------------------------------
# Units registry
# ---------------------------------------------------------------------------
class UnitsRegistry:
    """Thread-safe registry of `UnitDefinition` objects with SI prefix synthesis."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._units: Dict[str, UnitDefinition] = {}
        self._aliases: Dict[str, str] = {}
        self._non_prefixable: set[str] = set()
        self._canonical: Dict[Dimension, UnitDefinition] = {}
        self._prefix_cache: Dict[str, UnitDefinition] = {}
        self._frozen = False

    def __contains__(self, symbol: str) -> bool:
        return self.has(symbol)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"<UnitsRegistry: {len(self.all())} units, {state}>"

    # ------------------------- lifecycle -----------------------------------
    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Stop accepting registrations. Idempotent."""
        with self._lock:
            if not self._frozen:
                self._frozen = True
                logger.debug("Registry %#x frozen with %d units", id(self), len(self.all()))

    def _check_mutable(self, what: str) -> None:
        if self._frozen:
            raise RegistryFrozen(f"Cannot register {what}: the registry is frozen")

    # ------------------------- registration --------------------------------
    def set_non_prefixable(self, symbols: Iterable[str]) -> None:
        """Mark unit symbols that must not accept SI prefixes (e.g., 'kg', 'min')."""
        with self._lock:
            self._check_mutable("non-prefixable symbols")
            self._non_prefixable.update(normalize_symbol(s) for s in symbols)

    def is_non_prefixable(self, symbol: str) -> bool:
        return normalize_symbol(symbol) in self._non_prefixable

    def register(self, definition: UnitDefinition) -> UnitDefinition:
        """Register a definition under its name and its symbol.

        Raises `DuplicateUnitName` if either key is already a unit or an alias.
        """
        keys = {normalize_symbol(definition.name), normalize_symbol(definition.symbol)}
        with self._lock:
            self._check_mutable(f"unit '{definition.name}'")
            for key in keys:
                if key in UnitNamespace._reserved_names:
                    raise DuplicateUnitName(
                        f"Cannot register unit '{definition.name}': "
                        f"'{key}' conflicts with a UnitNamespace attribute/method."
                    )
                if key in self._units:
                    raise DuplicateUnitName(
                        f"Cannot register unit '{definition.name}': "
                        f"a unit named '{key}' already exists."
                    )
                if key in self._aliases:
                    raise DuplicateUnitName(
                        f"Cannot register unit '{definition.name}': "
                        f"an alias named '{key}' already exists."
                    )
            for key in keys:
                self._units[key] = definition
            if definition.is_canonical and definition.dim not in self._canonical:
                self._canonical[definition.dim] = definition
        logger.debug(
            "Registered unit %s (%s): dim=%r scale=%r offset=%r",
            definition.name, definition.symbol, definition.dim, definition.scale, definition.offset,
        )
        return definition

    def register_alias(self, alias: str, target: str) -> None:
        """Add another spelling for an existing unit."""
        key = normalize_symbol(alias)
        with self._lock:
            self._check_mutable(f"alias '{alias}'")
            if key in UnitNamespace._reserved_names:
                raise DuplicateUnitName(
                    f"Cannot register alias '{alias}': "
                    "name conflicts with UnitNamespace attribute/method."
                )
            definition = self._resolve(target)
            if key in self._units:
                raise DuplicateUnitName(
                    f"Cannot register alias '{alias}': a unit named '{key}' already exists."
                )
            existing = self._aliases.get(key)
            if existing is not None and existing != definition.name:
                raise DuplicateUnitName(
                    f"Cannot register alias '{alias}': it already refers to '{existing}'."
                )
            self._aliases[key] = definition.name
        logger.debug("Registered alias %s -> %s", key, definition.name)

    def define(
        self,
        name: str,
        scale: float,
        reference: "str | UnitDefinition | CompositeUnit",
        symbol: Optional[str] = None,
        offset: float = 0.0,
    ) -> UnitDefinition:
        """Register a unit defined as ``scale`` times ``reference``.

        ``offset`` is in canonical units of the reference dimension, so
        ``define("degC", 1, "K", offset=273.15)`` reproduces Celsius.
        """
        with self._lock:
            ref = self._unit_unfrozen(reference)
            if ref.is_affine:
                raise IncompatibleAffineComposition(
                    f"Cannot define '{name}' relative to affine unit '{ref.name}'"
                )
            return self.register(
                UnitDefinition(name, symbol or name, ref.dim, float(scale) * ref.scale, offset)
            )

    # ------------------------- lookups --------------------------------------
    def has(self, symbol: str) -> bool:
        try:
            self.get(symbol)
            return True
        except UnknownUnit:
            return False

    def get(self, symbol: str) -> UnitDefinition:
        """Lookup a unit by name, symbol or alias. If missing, try to synthesize via SI prefix.

        Raises `UnknownUnit` if unknown.
        """
        self.freeze()
        with self._lock:
            return self._resolve(symbol)

    def parse(self, expr: str) -> CompositeUnit:
        """Evaluate a unit expression such as 'kg*m/s**2' or 'm^(1/2)'."""
        self.freeze()
        return self._parse_unfrozen(expr)

    def unit(self, spec: "str | UnitDefinition | CompositeUnit") -> CompositeUnit:
        """Coerce a name, symbol, expression, definition or composite into a CompositeUnit."""
        self.freeze()
        return self._unit_unfrozen(spec)

    def canonical_for(self, dim: DimLike) -> Optional[UnitDefinition]:
        """The first scale-1, offset-0 unit registered for ``dim``, or None."""
        self.freeze()
        with self._lock:
            return self._canonical.get(Dimension(dim))

    def all(self) -> Mapping[str, UnitDefinition]:
        """Registered units keyed by both name and symbol (synthesized prefixes excluded)."""
        with self._lock:
            return dict(self._units)

    def aliases(self) -> Mapping[str, str]:
        with self._lock:
            return dict(self._aliases)

    def as_namespace(self) -> "UnitNamespace":
        return UnitNamespace(self)

    # ------------------------- internals -----------------------------------
    def _unit_unfrozen(self, spec: "str | UnitDefinition | CompositeUnit") -> CompositeUnit:
        if isinstance(spec, CompositeUnit):
            return spec
        if isinstance(spec, UnitDefinition):
            return spec.as_unit()
        if isinstance(spec, str):
            text = spec.strip()
            if text == "1" or any(c in _EXPR_CHARS for c in text):
                return self._parse_unfrozen(spec)
            return self._resolve(spec).as_unit()
        raise TypeError(f"Expected a unit name, expression or unit, got {type(spec).__name__}")

    def _parse_unfrozen(self, expr: str) -> CompositeUnit:
        try:
            return evaluate_unit_expr(expr, self._resolve)
        except UnknownUnit:
            raise
        except ValueError as e:
            raise UnknownUnit(expr, f"malformed unit expression: {e}") from None

    def _resolve(self, symbol: str) -> UnitDefinition:
        if not isinstance(symbol, str):
            raise TypeError(f"Unit symbol must be a string, got {type(symbol).__name__}")
        sym = normalize_symbol(symbol)
        with self._lock:
            found = self._lookup(sym)
            # ASCII 'u' standing in for the micro sign ("um" -> "µm")
            if found is None and sym.startswith("u") and len(sym) > 1:
                found = self._lookup(_MICRO_SIGN + sym[1:])
        if found is None:
            raise UnknownUnit(symbol)
        return found

    def _lookup(self, sym: str) -> Optional[UnitDefinition]:
        u = self._registered(sym)
        if u is not None:
            return u
        cached = self._prefix_cache.get(sym)
        if cached is not None:
            return cached
        return self._try_synthesize_prefixed(sym)

    def _registered(self, key: str) -> Optional[UnitDefinition]:
        target = self._aliases.get(key)
        if target is not None:
            return self._units.get(target) or self._prefix_cache.get(target)
        return self._units.get(key)

    def _split_prefix(self, sym: str) -> Iterable[Tuple[Prefix, str]]:
        for p in _PREFIX_SYMBOLS_DESC:
            if sym.startswith(p.symbol) and len(sym) > len(p.symbol):
                yield p, sym[len(p.symbol):]
        for p in _PREFIX_NAMES_DESC:
            if sym.startswith(p.name) and len(sym) > len(p.name):
                yield p, sym[len(p.name):]

    def _try_synthesize_prefixed(self, sym: str) -> Optional[UnitDefinition]:
        for prefix, rest in self._split_prefix(sym):
            # Only directly registered units take a prefix, so prefixes never stack
            base = self._registered(rest)
            if base is None or self._units.get(base.symbol) is not base:
                continue
            if base.is_affine or base.symbol in self._non_prefixable:
                continue
            name = prefix.name + base.name
            symbol = prefix.symbol + base.symbol
            new_unit = self._prefix_cache.get(symbol)
            if new_unit is None:
                new_unit = UnitDefinition(name, symbol, base.dim, base.scale * prefix.factor)
                self._prefix_cache[name] = new_unit
                self._prefix_cache[symbol] = new_unit
                logger.debug("Synthesized prefixed unit %s (%s)", name, symbol)
            self._prefix_cache[sym] = new_unit
            return new_unit
        return None


class UnitNamespace:
    """Attribute-style access to a registry: ``u.m``, ``u.kilometer``, ``u('kg*m/s**2')``."""

    _reserved_names: ClassVar[set[str]] = set()

    def __init__(self, reg: "UnitsRegistry") -> None:
        self._reg = reg

    def __contains__(self, spec: str) -> bool:
        return self._reg.has(spec)

    def define(
        self,
        name: str,
        scale: float,
        reference: "str | UnitDefinition | CompositeUnit",
        symbol: Optional[str] = None,
        offset: float = 0.0,
    ) -> CompositeUnit:
        return self._reg.define(name, scale, reference, symbol=symbol, offset=offset).as_unit()

    def __call__(self, spec: str) -> CompositeUnit:
        return self._reg.unit(spec)

    def __getattr__(self, name: str) -> CompositeUnit:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._reg.unit(name)
        except UnknownUnit as e:
            # Unknown symbol should look like a missing attribute
            raise AttributeError(name) from e

    def __dir__(self) -> list[str]:
        """List all available unit names and symbols for autocomplete."""
        base_dir = set(super().__dir__())
        return sorted(base_dir | set(self._reg.all()) | set(self._reg.aliases()))


UnitNamespace._reserved_names = set(dir(UnitNamespace))


# ---------------------------------------------------------------------------
# Bootstrap a default registry
# ---------------------------------------------------------------------------

def _bootstrap_default_registry() -> UnitsRegistry:
    reg = UnitsRegistry()

    # Base SI units (name, symbol, dim); the first canonical unit per dimension wins
    base_units = (
        ("meter",    "m",   LENGTH),
        ("kilogram", "kg",  MASS),
        ("second",   "s",   TIME),
        ("ampere",   "A",   CURRENT),
        ("kelvin",   "K",   TEMPERATURE),
        ("mole",     "mol", AMOUNT),
        ("candela",  "cd",  LUMINOUS),
        ("radian",   "rad", ANGLE),
    )

    # --- Helpful composite dimensions (readable + reuse) ---
    AREA         = dim_pow(LENGTH, 2)
    VOLUME       = dim_pow(LENGTH, 3)
    SOLID_ANGLE  = dim_pow(ANGLE, 2)                                              # sr
    VELOCITY     = dim_div(LENGTH, TIME)
    FORCE        = dim_mul(MASS, dim_div(LENGTH, dim_pow(TIME, 2)))              # N
    PRESSURE     = dim_div(FORCE, AREA)                                           # Pa
    ENERGY       = dim_mul(FORCE, LENGTH)                                         # J
    POWER        = dim_div(ENERGY, TIME)                                          # W
    CHARGE       = dim_mul(CURRENT, TIME)                                         # C
    VOLTAGE      = dim_div(POWER, CURRENT)                                        # V
    CAPACITANCE  = dim_div(CHARGE, VOLTAGE)                                       # F
    RESISTANCE   = dim_div(VOLTAGE, CURRENT)                                      # Ω
    CONDUCTANCE  = dim_div(CURRENT, VOLTAGE)                                      # S
    FLUX         = dim_mul(VOLTAGE, TIME)                                         # Wb
    FLUX_DENSITY = dim_div(FLUX, AREA)                                            # T (tesla)
    INDUCTANCE   = dim_div(FLUX, CURRENT)                                         # H
    LUMEN        = dim_mul(LUMINOUS, SOLID_ANGLE)                                 # lm = cd·sr
    LUX          = dim_div(LUMEN, AREA)                                           # lx
    FREQUENCY    = dim_pow(TIME, -1)                                              # Hz, Bq
    DOSE         = dim_div(ENERGY, MASS)                                          # Gy, Sv
    CATALYTIC    = dim_div(AMOUNT, TIME)                                          # kat

    # Derived (name, symbol, scale, dim)
    derived_units = (
        ("gram",      "g",   1e-3, MASS),
        ("steradian", "sr",  1.0,  SOLID_ANGLE),
        ("hertz",     "Hz",  1.0,  FREQUENCY),
        ("newton",    "N",   1.0,  FORCE),
        ("pascal",    "Pa",  1.0,  PRESSURE),
        ("joule",     "J",   1.0,  ENERGY),
        ("watt",      "W",   1.0,  POWER),
        ("coulomb",   "C",   1.0,  CHARGE),
        ("volt",      "V",   1.0,  VOLTAGE),
        ("farad",     "F",   1.0,  CAPACITANCE),
        ("ohm",       "Ω",   1.0,  RESISTANCE),
        ("siemens",   "S",   1.0,  CONDUCTANCE),
        ("weber",     "Wb",  1.0,  FLUX),
        ("tesla",     "T",   1.0,  FLUX_DENSITY),
        ("henry",     "H",   1.0,  INDUCTANCE),
        ("lumen",     "lm",  1.0,  LUMEN),
        ("lux",       "lx",  1.0,  LUX),
        ("becquerel", "Bq",  1.0,  FREQUENCY),
        ("gray",      "Gy",  1.0,  DOSE),
        ("sievert",   "Sv",  1.0,  DOSE),
        ("katal",     "kat", 1.0,  CATALYTIC),
    )

    angle_units = (
        ("degree",    "°",      math.pi / 180.0,    ANGLE),
        ("arcminute", "arcmin", math.pi / 10800.0,  ANGLE),
        ("arcsecond", "arcsec", math.pi / 648000.0, ANGLE),
        ("gradian",   "grad",   math.pi / 200.0,    ANGLE),
        ("turn",      "rev",    2.0 * math.pi,      ANGLE),
    )

    time_units = (
        ("minute",     "min",       60.0,                              TIME),
        ("hour",       "h",         60.0 * 60.0,                       TIME),
        ("day",        "d",         24.0 * 60.0 * 60.0,                TIME),
        ("week",       "wk",        7.0 * 24.0 * 60.0 * 60.0,          TIME),
        ("fortnight",  "fortnight", 14.0 * 24.0 * 60.0 * 60.0,         TIME),

        # Civil (Gregorian) average month/year
        ("month",      "mo",        (365.2425 / 12.0) * 24.0 * 3600.0, TIME),
        ("year",       "yr",        365.2425 * 24.0 * 3600.0,          TIME),
        ("julian_year", "yr_julian", 365.25 * 24.0 * 3600.0,           TIME),
        ("decade",     "decade",    10.0 * 365.2425 * 24.0 * 3600.0,   TIME),
        ("century",    "century",   100.0 * 365.2425 * 24.0 * 3600.0,  TIME),
    )

    # International yard and pound agreement (1959)
    imperial_units = (
        ("inch",          "in",  0.0254,             LENGTH),
        ("foot",          "ft",  0.3048,             LENGTH),
        ("yard",          "yd",  0.9144,             LENGTH),
        ("mile",          "mi",  1609.344,           LENGTH),
        ("nautical_mile", "nmi", 1852.0,             LENGTH),
        ("angstrom",      "Å",   1e-10,              LENGTH),
        ("astronomical_unit", "au", 149597870700.0,  LENGTH),
        ("pound",         "lb",  0.45359237,         MASS),
        ("ounce",         "oz",  0.028349523125,     MASS),
        ("stone",         "st",  6.35029318,         MASS),
        ("tonne",         "t",   1000.0,             MASS),
        ("pound_force",   "lbf", 4.4482216152605,    FORCE),
        ("mile_per_hour", "mph", 0.44704,            VELOCITY),
        ("knot",          "kn",  1852.0 / 3600.0,    VELOCITY),
        ("hectare",       "ha",  1e4,                AREA),
        ("liter",         "L",   1e-3,               VOLUME),
        ("gallon",        "gal", 3.785411784e-3,     VOLUME),
        ("bar",           "bar", 1e5,                PRESSURE),
        ("atmosphere",    "atm", 101325.0,           PRESSURE),
        ("psi",           "psi", 6894.757293168361,  PRESSURE),
        ("mmHg",          "mmHg", 133.322387415,     PRESSURE),
        ("calorie",       "cal", 4.184,              ENERGY),
        ("electronvolt",  "eV",  1.602176634e-19,    ENERGY),
        ("watt_hour",     "Wh",  3600.0,             ENERGY),
    )

    # Register all
    for name, sym, dim in base_units:
        reg.register(UnitDefinition(name, sym, dim))
    for group in (derived_units, angle_units, time_units, imperial_units):
        for name, sym, scale, dim in group:
            reg.register(UnitDefinition(name, sym, dim, scale))

    # Temperature: affine scales first, then the linear differences
    reg.register(UnitDefinition("celsius", "°C", TEMPERATURE, 1.0, 273.15))
    reg.register(UnitDefinition("fahrenheit", "°F", TEMPERATURE, 5.0 / 9.0, 459.67 * 5.0 / 9.0))
    reg.register(UnitDefinition("rankine", "°R", TEMPERATURE, 5.0 / 9.0))
    reg.register(UnitDefinition("delta_celsius", "Δ°C", TEMPERATURE, 1.0))
    reg.register(UnitDefinition("delta_fahrenheit", "Δ°F", TEMPERATURE, 5.0 / 9.0))

    # Plain numbers as an explicit unit ("1" is taken by the expression parser)
    reg.register(UnitDefinition("percent", "%", DIM_0, 0.01))

    # Common aliases
    aliases = {
        "metre": "m", "meters": "m", "metres": "m",
        "kilograms": "kg", "grams": "g", "gramme": "g",
        "sec": "s", "seconds": "s",
        "amp": "A", "amps": "A",
        "moles": "mol",
        "radians": "rad",
        "deg": "°", "degrees": "°",
        "arcminutes": "arcmin", "arcseconds": "arcsec",
        "revolution": "rev", "revolutions": "rev",
        "Ohm": "Ω", "OHM": "Ω", "ohms": "Ω",
        "minutes": "min", "hr": "h", "hours": "h",
        "days": "d", "weeks": "wk", "fortnights": "fortnight",
        "months": "mo", "years": "yr", "annum": "yr",
        "decades": "decade", "centuries": "century",
        "inches": "in", "feet": "ft", "yards": "yd", "miles": "mi",
        "pound_mass": "lb", "pound-mass": "lb", "lbm": "lb", "pounds": "lb",
        "ounces": "oz", "ton": "t", "tonnes": "t",
        "litre": "L", "liters": "L", "litres": "L", "l": "L",
        "atmospheres": "atm", "calories": "cal",
        "degC": "°C", "deg_celsius": "°C", "degree_celsius": "°C",
        "degF": "°F", "deg_fahrenheit": "°F", "degree_fahrenheit": "°F",
        "degR": "°R",
        "delta_degC": "Δ°C", "ΔC": "Δ°C",
        "delta_degF": "Δ°F", "ΔF": "Δ°F",
    }
    for alias, target in aliases.items():
        reg.register_alias(alias, target)

    reg.set_non_prefixable([
        "kg",
        "min", "h", "d", "wk", "fortnight",
        "mo", "yr", "yr_julian", "decade", "century",
        "°", "arcmin", "arcsec", "grad", "rev",
        "in", "ft", "yd", "mi", "nmi", "Å", "au",
        "lb", "oz", "st", "lbf", "mph", "kn", "ha", "gal",
        "atm", "psi", "mmHg",
        "°R", "Δ°C", "Δ°F", "%",
    ])

    logger.debug("Default registry bootstrapped with %d keys", len(reg.all()))
    return reg


# Public, shared default registry
DEFAULT_REGISTRY: UnitsRegistry = _bootstrap_default_registry()


__all__ = [
    "UnitsRegistry",
    "UnitNamespace",
    "DEFAULT_REGISTRY",
    "normalize_symbol",
]
