import math

import pytest

from physical.core.dimensions import LENGTH, TIME
from physical.core.errors import DuplicateUnitName, RegistryFrozen
from physical.core.quantity import Quantity
from physical.core.unit import CompositeUnit
from physical.units.registry import UnitNamespace


@pytest.fixture()
def ns(fresh_registry):
    return UnitNamespace(fresh_registry)


def test_attribute_access_returns_composite(ns):
    assert isinstance(ns.m, CompositeUnit)
    assert ns.m.dim == LENGTH
    assert ns.m == ns.meter == ns.metre

def test_attribute_access_synthesizes_prefixes(ns):
    assert ns.km == ns.kilometer
    assert math.isclose(ns.km.scale, 1000.0)

def test_unknown_attribute_is_attribute_error(ns):
    with pytest.raises(AttributeError):
        ns.furlong
    assert not hasattr(ns, "kkm")
    assert getattr(ns, "furlong", None) is None

def test_private_names_do_not_hit_registry(ns):
    with pytest.raises(AttributeError):
        ns._missing

def test_call_parses_expressions(ns):
    assert ns("m/s") == ns.m / ns.s
    assert ns("kg·m/s²") == ns.kg * ns.m / ns.s ** 2
    assert ns("°C") == ns.degC

def test_contains(ns):
    assert "km" in ns
    assert "furlong" not in ns

def test_namespace_quantity_construction(ns):
    q = 3 * ns.km
    assert isinstance(q, Quantity)
    assert math.isclose(q.to(ns.m).value, 3000.0)

def test_define_returns_composite(fresh_registry):
    ns = fresh_registry.as_namespace()
    furlong = ns.define("furlong", 220, "yd", symbol="fur")
    assert isinstance(furlong, CompositeUnit)
    assert furlong == ns.fur == ns.furlong
    fortnight_speed = ns.fur / ns.fortnight
    assert fortnight_speed.dim == LENGTH / TIME

def test_define_after_lookup_is_rejected(ns):
    ns.m
    with pytest.raises(RegistryFrozen):
        ns.define("furlong", 220, "yd")

def test_namespace_methods_cannot_be_shadowed(fresh_registry):
    with pytest.raises(DuplicateUnitName):
        fresh_registry.define("define", 1.0, "m")

def test_dir_lists_units_and_aliases(ns):
    names = dir(ns)
    for expected in ("m", "meter", "metre", "N", "°C", "define"):
        assert expected in names
    assert names == sorted(names)
