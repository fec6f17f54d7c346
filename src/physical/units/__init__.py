"""
physical.units
==============

Unit catalogue entry point. ``from physical.units import u`` gives attribute
access to the default registry (``u.m``, ``u.kilometer``, ``u("kg*m/s^2")``).

Nothing is bootstrapped until one of the names below is first read, so
importing ``physical.core`` alone never builds the default catalogue.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

# public name -> attribute of physical.units.registry
_LAZY = {
    "DEFAULT_REGISTRY": "DEFAULT_REGISTRY",
    "UnitsRegistry": "UnitsRegistry",
    "UnitNamespace": "UnitNamespace",
}


def __getattr__(name: str) -> Any:
    if name == "u":
        # rebuilt on each access so it always tracks the current default registry
        return import_module("physical.units.registry").DEFAULT_REGISTRY.as_namespace()
    if name in _LAZY:
        return getattr(import_module("physical.units.registry"), _LAZY[name])
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(_LAZY) | {"u"})


__all__ = ["u", "DEFAULT_REGISTRY", "UnitsRegistry", "UnitNamespace"]
