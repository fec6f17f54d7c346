import functools
import math

import pytest

import physical
from physical import (
    CompositeUnit,
    Dimension,
    IncommensurableDimensions,
    Quantity,
    UnitDefinition,
    UnitError,
    UnknownUnit,
    add,
    commensurable,
    convert,
    dimension_vector,
    divide,
    equals,
    lookup_unit,
    make_quantity,
    multiply,
    power,
    quantity,
    subtract,
)
from physical.core.dimensions import LENGTH, MASS, TIME
from physical.units import u


def test_public_names_are_exported():
    for name in physical.__all__:
        assert hasattr(physical, name), name
    assert isinstance(physical.__version__, str)

def test_lookup_unit_returns_definition():
    newton = lookup_unit("newton")
    assert isinstance(newton, UnitDefinition)
    assert newton is lookup_unit("N")
    assert newton.as_unit() == u.N
    assert lookup_unit("km").scale == 1000.0

def test_lookup_unit_rejects_expressions():
    with pytest.raises(UnknownUnit):
        lookup_unit("kg*m/s^2")
    with pytest.raises(UnknownUnit):
        lookup_unit("furlong")

def test_quantity_constructors():
    q = quantity(4.5, "newton")
    assert isinstance(q, Quantity)
    assert q.value == 4.5 and q.unit == u.N
    assert make_quantity(2.0, u.m) == Quantity(2.0, u.m)

def test_multiply_and_divide_units_and_quantities():
    assert multiply(u.kg, u.m) == u.kg * u.m
    assert divide(u.m, u.s) == u.m / u.s
    assert isinstance(multiply(u.kg, u.m), CompositeUnit)
    q = multiply(quantity(2.0, "kg"), quantity(3.0, "m/s^2"))
    assert q.dim == u.N.dim and q.value == 6.0
    assert divide(quantity(6.0, "m"), quantity(2.0, "s")).value == 3.0

def test_multiply_lifts_bare_definitions():
    m = u.m.terms[0][0]
    s = u.s.terms[0][0]
    assert multiply(m, s) == u.m * u.s
    assert divide(m, s) == u.m / u.s

def test_reduce_with_multiply():
    force = functools.reduce(multiply, [u.kg, u.m, u.s ** -2])
    assert force.dim == u.N.dim

def test_power():
    assert power(u.m, 2) == u.m ** 2
    assert power(quantity(3.0, "m"), 2).value == 9.0

def test_add_and_subtract():
    total = add(quantity(1.0, "m"), quantity(50.0, "cm"))
    assert math.isclose(total.value, 1.5) and total.unit == u.m
    diff = subtract(quantity(1.0, "m"), quantity(50.0, "cm"))
    assert math.isclose(diff.value, 0.5)
    with pytest.raises(IncommensurableDimensions):
        add(quantity(4.5, "newton"), quantity(17.0, "pound-mass"))

def test_convert():
    q = convert(quantity(36.0, "km/h"), "m/s")
    assert math.isclose(q.value, 10.0)
    assert q.unit == u.m / u.s
    with pytest.raises(IncommensurableDimensions):
        convert(quantity(1.0, "m"), "s")

def test_dimension_vector_and_commensurable():
    assert dimension_vector(u.N) == MASS * LENGTH / TIME ** 2
    assert dimension_vector(quantity(1.0, "km")) == LENGTH
    assert dimension_vector("m/s") == LENGTH / TIME
    assert isinstance(dimension_vector("m"), Dimension)
    assert commensurable(u.km, u.ft)
    assert commensurable("J", "eV")
    assert not commensurable(u.N, u.lb)

def test_equals():
    assert equals(quantity(1.0, "m"), quantity(100.0, "cm"))
    assert not equals(quantity(1.0, "m"), quantity(1.0, "ft"))
    with pytest.raises(IncommensurableDimensions):
        equals(quantity(1.0, "m"), quantity(1.0, "s"))

def test_every_error_is_a_unit_error():
    for name in physical.__all__:
        obj = getattr(physical, name)
        if isinstance(obj, type) and issubclass(obj, Exception):
            assert issubclass(obj, UnitError)
