import math

import numpy as np
import pytest

from physical.core.dimensions import DIM_0, LENGTH, MASS, TIME
from physical.core.errors import ArrayLengthMismatch, IncommensurableDimensions
from physical.core.quantity import Quantity
from physical.core.unit import UnitDefinition
from physical.units import u

m = UnitDefinition("meter", "m", LENGTH)
cm = UnitDefinition("centimeter", "cm", LENGTH, 0.01)
s = UnitDefinition("second", "s", TIME)
kg = UnitDefinition("kilogram", "kg", MASS)


# -------------------------------
# Arithmetic: +, -, scalars
# -------------------------------

def test_add_and_sub_same_dim():
    q1 = 1 * m
    q2 = 50 * cm  # 0.5 m

    total = q1 + q2   # left unit ("m") retained
    diff = q1 - q2

    assert total.unit == m and diff.unit == m
    assert math.isclose(total.value, 1.5)
    assert math.isclose(diff.value, 0.5)

def test_add_keeps_left_unit_when_reversed():
    total = (50 * cm) + (1 * m)
    assert total.unit == cm
    assert math.isclose(total.value, 150.0)

def test_add_dim_mismatch_raises():
    with pytest.raises(IncommensurableDimensions):
        (1 * m) + (1 * s)
    with pytest.raises(TypeError):  # also a TypeError
        (1 * m) - (1 * s)

def test_add_plain_number_to_dimensional_quantity_raises():
    with pytest.raises(IncommensurableDimensions):
        (1 * m) + 2
    with pytest.raises(IncommensurableDimensions):
        2 - (1 * m)

def test_add_plain_number_to_dimensionless_quantity():
    ratio = (3 * m) / (2 * m)
    assert ratio.dim == DIM_0
    assert math.isclose((ratio + 1).value, 2.5)
    assert math.isclose((1 - ratio).value, -0.5)

def test_add_plain_number_to_percent_converts():
    q = Quantity(50.0, u.percent)
    assert math.isclose((q + 1).value, 150.0)

def test_scalar_multiplication_and_division():
    q = 2 * m

    assert (q * 3).dim == LENGTH and math.isclose((q * 3).value, 6.0)
    assert (3 * q).dim == LENGTH and math.isclose((3 * q).value, 6.0)
    assert math.isclose((q / 2).value, 1.0)


# -------------------------------
# Arithmetic: *, / between quantities and units
# -------------------------------

def test_quantity_times_quantity():
    q = (2 * m) * (3 * s)  # -> 6 m·s
    assert q.dim == LENGTH * TIME
    assert q.unit == m * s
    assert math.isclose(q.value, 6.0)

def test_quantity_div_quantity():
    q = (10 * m) / (2 * s)  # -> 5 m/s
    assert q.dim == LENGTH / TIME
    assert q.unit.name == "m/s"
    assert math.isclose(q.value, 5.0)

def test_units_are_not_simplified_across_definitions():
    q = (1 * m) / (50 * cm)
    assert q.dim == DIM_0
    assert q.unit == m / cm
    assert math.isclose(q.value, 0.02)
    assert math.isclose(q.to(u.percent).value, 200.0)

def test_scalar_divided_by_quantity():
    q = 2 / (2 * m)  # -> 1 (1/m)
    assert q.dim == DIM_0 / LENGTH
    assert q.unit.name == "1/m"
    assert math.isclose(q.value, 1.0)

def test_quantity_times_and_divided_by_unit():
    q = (2 * m) * s
    assert q.unit == m * s and q.value == 2.0
    q = (2 * m) / s
    assert q.unit == m / s and q.value == 2.0

def test_unit_times_and_divided_by_quantity():
    q = kg * (2 * m)
    assert q.unit == kg * m and q.value == 2.0
    q = s / (4 * m)
    assert q.unit == s / m and q.value == 0.25

def test_negation_and_abs():
    q = -(3 * m)
    assert q.value == -3.0 and q.unit == m
    assert abs(q).value == 3.0
    assert +q is q

def test_float_division_by_zero_follows_ieee():
    q = (1 * m) / (0 * s)
    assert q.value == math.inf
    z = (0 * m) / (0 * s)
    assert math.isnan(z.value)
    assert ((-1 * m) / 0.0).value == -math.inf


# -------------------------------
# Elementwise arrays
# -------------------------------

def test_array_plus_array_elementwise():
    a = Quantity([1.0, 2.0, 3.0], m)
    b = Quantity([100.0, 200.0, 300.0], cm)
    total = a + b
    assert total.unit == m
    assert total.value.tolist() == pytest.approx([2.0, 4.0, 6.0])

def test_array_plus_scalar_broadcasts():
    a = Quantity([1.0, 2.0], m)
    total = a + Quantity(50.0, cm)
    assert total.value.tolist() == pytest.approx([1.5, 2.5])
    total = Quantity(50.0, cm) + a
    assert total.value.tolist() == pytest.approx([150.0, 250.0])

def test_array_times_array():
    d = Quantity([2.0, 4.0], m)
    t = Quantity([1.0, 2.0], s)
    v = d / t
    assert v.unit == m / s
    assert v.value.tolist() == [2.0, 2.0]

def test_array_length_mismatch():
    a = Quantity([1.0, 2.0, 3.0], m)
    b = Quantity([1.0, 2.0], m)
    with pytest.raises(ArrayLengthMismatch) as info:
        a + b
    assert info.value.lengths == (3, 2)
    with pytest.raises(ArrayLengthMismatch):
        a * b
    with pytest.raises(ValueError):  # also a ValueError
        a / b

def test_array_scalar_multiplication():
    a = Quantity([1.0, 2.0], m)
    assert (a * 2).value.tolist() == [2.0, 4.0]
    assert (2 * a).value.tolist() == [2.0, 4.0]
    assert (a * np.array([3.0, 4.0])).value.tolist() == [3.0, 8.0]

def test_array_division_by_zero_elementwise():
    a = Quantity([1.0, 0.0, -1.0], m)
    out = (a / Quantity([0.0, 0.0, 0.0], s)).value
    assert out[0] == math.inf
    assert math.isnan(out[1])
    assert out[2] == -math.inf

def test_array_results_are_read_only():
    a = Quantity([1.0, 2.0], m) * 2
    with pytest.raises(ValueError):
        a.value[0] = 0.0

def test_array_order_preserved():
    values = np.linspace(0.0, 1.0, 1001)
    q = Quantity(values, m).to(cm)
    assert np.allclose(q.value, values * 100.0)
