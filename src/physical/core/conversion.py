"""
physical.core.conversion
========================

Conversion of magnitudes between commensurable units.

Every unit maps to the canonical unit of its dimension through

    canonical = magnitude * scale + offset

so converting between two units is a single scale/offset step. Offsets are
only ever non-zero for single-term affine units (°C, °F); composites holding
an affine unit cannot be built, so the affine formula is applied at most once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Tuple

import numpy as np

from physical.core.dimensions import BASE_VECTORS
from physical.core.errors import IncommensurableDimensions, UnknownUnit
from physical.core.unit import CompositeUnit, UnitLike, as_unit

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from physical.core.quantity import Quantity
    from physical.units.registry import UnitsRegistry


def conversion_factors(source: UnitLike, target: UnitLike) -> Tuple[float, float]:
    """
    Return ``(factor, shift)`` such that ``value_in_target = value * factor + shift``.

    Raises ``IncommensurableDimensions`` when the dimension vectors differ.
    """
    src, tgt = as_unit(source), as_unit(target)
    if src.dim != tgt.dim:
        raise IncommensurableDimensions("convert", src, tgt)
    factor = src.scale / tgt.scale
    shift = (src.offset - tgt.offset) / tgt.scale
    return factor, shift


def convert_magnitude(value: Any, source: UnitLike, target: UnitLike) -> Any:
    """Convert a raw scalar or array magnitude from ``source`` to ``target`` units."""
    src, tgt = as_unit(source), as_unit(target)
    if src == tgt:
        return value
    if src.dim != tgt.dim:
        raise IncommensurableDimensions("convert", src, tgt)
    if src.is_affine or tgt.is_affine:
        # (m * s_src + off_src - off_tgt) / s_tgt
        return (value * src.scale + src.offset - tgt.offset) / tgt.scale
    return value * (src.scale / tgt.scale)


def convert(q: "Quantity", target: UnitLike) -> "Quantity":
    """Express ``q`` in ``target`` units. The dimension vector never changes."""
    from physical.core.quantity import Quantity

    tgt = as_unit(target)
    if q.unit == tgt:
        return q
    value = convert_magnitude(q.value, q.unit, tgt)
    if isinstance(value, np.ndarray):
        return Quantity(value, tgt)
    return Quantity(float(value), tgt)


def to_base_unit(unit: UnitLike, registry: "UnitsRegistry | None" = None) -> CompositeUnit:
    """
    Composite of canonical base units with the same dimension as ``unit``,
    one term per non-zero base dimension (e.g. N -> kg·m/s²).
    """
    if registry is None:
        from physical.units.registry import DEFAULT_REGISTRY

        registry = DEFAULT_REGISTRY

    u = as_unit(unit)
    terms = []
    for base, exp in zip(BASE_VECTORS, u.dim, strict=True):
        if not exp:
            continue
        canonical = registry.canonical_for(base)
        if canonical is None:
            raise UnknownUnit(repr(base), "no canonical unit registered for base dimension")
        terms.append((canonical, exp))
    return CompositeUnit(terms)


__all__ = ["conversion_factors", "convert_magnitude", "convert", "to_base_unit"]
