import math
import pickle
from fractions import Fraction

import pytest

from physical.core.errors import DivisionByZero, UndefinedPower
from physical.core.numbers import (
    FLOATING,
    INTEGER,
    RATIONAL,
    TieredNumber,
    as_tiered,
)


# -------------------------------
# Construction & tiers
# -------------------------------

@pytest.mark.parametrize(
    "value, tier",
    [
        (3, INTEGER),
        (Fraction(1, 5), RATIONAL),
        (Fraction(10, 5), INTEGER),   # collapses to 2
        (2.0, FLOATING),              # floats never collapse
        (0.5, FLOATING),
    ],
)
def test_tier_of_constructed_values(value, tier):
    assert TieredNumber(value).tier == tier


def test_numerator_denominator_constructor_reduces():
    x = TieredNumber(6, 4)
    assert x.value == Fraction(3, 2)
    assert str(x) == "3/2"
    assert TieredNumber(6, 3).value == 2
    assert TieredNumber(6, 3).tier == INTEGER


def test_zero_denominator_raises():
    with pytest.raises(DivisionByZero):
        TieredNumber(1, 0)


@pytest.mark.parametrize("bad", [True, "1", None, 1 + 2j])
def test_rejects_non_real_values(bad):
    with pytest.raises(TypeError):
        TieredNumber(bad)


def test_is_immutable():
    x = TieredNumber(1)
    with pytest.raises(AttributeError):
        x._value = 2


def test_as_tiered_passes_instances_through():
    x = TieredNumber(Fraction(1, 3))
    assert as_tiered(x) is x
    assert as_tiered(4) == TieredNumber(4)


def test_pickle_round_trip_keeps_tier():
    x = TieredNumber(Fraction(2, 7))
    y = pickle.loads(pickle.dumps(x))
    assert y == x and y.tier == RATIONAL


# -------------------------------
# Promotion rules
# -------------------------------

def test_integer_arithmetic_stays_integer():
    assert (TieredNumber(2) + 3).tier == INTEGER
    assert (TieredNumber(2) * 3).value == 6
    assert (TieredNumber(2) - 5).value == -3


def test_integer_division_produces_rational():
    x = TieredNumber(1) / 5
    assert x.tier == RATIONAL
    assert x.value == Fraction(1, 5)


def test_rational_product_collapses_to_integer():
    x = TieredNumber(5) * TieredNumber(1, 5)
    assert x.tier == INTEGER
    assert x == 1


def test_float_contaminates():
    x = TieredNumber(Fraction(1, 3)) + 0.5
    assert x.tier == FLOATING
    assert math.isclose(float(x), 1 / 3 + 0.5)


def test_reflected_operators():
    assert (1 + TieredNumber(2)).value == 3
    assert (1 - TieredNumber(2)).value == -1
    assert (1 / TieredNumber(4)).value == Fraction(1, 4)
    assert (2 ** TieredNumber(3)).value == 8


def test_negate_abs_and_reciprocal():
    x = TieredNumber(-3, 4)
    assert (-x).value == Fraction(3, 4)
    assert abs(x).value == Fraction(3, 4)
    assert x.reciprocal().value == Fraction(-4, 3)


# -------------------------------
# Division by zero
# -------------------------------

def test_exact_division_by_zero_raises():
    with pytest.raises(DivisionByZero):
        TieredNumber(1) / 0
    with pytest.raises(DivisionByZero):
        TieredNumber(0).reciprocal()


def test_division_by_zero_is_also_a_zero_division_error():
    with pytest.raises(ZeroDivisionError):
        TieredNumber(Fraction(1, 2)) / TieredNumber(0)


def test_float_division_by_zero_follows_ieee():
    assert float(TieredNumber(1.0) / 0.0) == math.inf
    assert float(TieredNumber(-1.0) / 0.0) == -math.inf
    assert math.isnan(float(TieredNumber(0.0) / 0.0))
    # mixed: exact numerator, float zero divisor
    assert float(TieredNumber(2) / 0.0) == math.inf


# -------------------------------
# Powers
# -------------------------------

def test_integer_power_exact():
    assert (TieredNumber(2) ** 10).value == 1024
    x = TieredNumber(2) ** -2
    assert x.tier == RATIONAL and x.value == Fraction(1, 4)


def test_zero_to_negative_power_raises():
    with pytest.raises(DivisionByZero):
        TieredNumber(0) ** -1


def test_rational_power_with_exact_root():
    assert (TieredNumber(4) ** TieredNumber(1, 2)) == 2
    assert (TieredNumber(4) ** TieredNumber(1, 2)).tier == INTEGER
    x = TieredNumber(Fraction(8, 27)) ** TieredNumber(2, 3)
    assert x.value == Fraction(4, 9)


@pytest.mark.regression(reason="Exact roots beyond float precision must stay exact")
@pytest.mark.parametrize("root, n", [
    (10**20 + 12345, 2),
    (10**20 + 12345, 3),
    (2**70 + 1, 5),
    (Fraction(10**18 + 7, 10**17 + 3), 2),
])
def test_large_exact_roots_stay_exact(root, n):
    x = TieredNumber(Fraction(root) ** n) ** TieredNumber(1, n)
    assert x.is_exact
    assert x.value == root


def test_large_non_root_is_float():
    x = TieredNumber((10**20 + 12345) ** 2 + 1) ** TieredNumber(1, 2)
    assert x.tier == FLOATING


def test_rational_power_without_exact_root_is_float():
    x = TieredNumber(2) ** TieredNumber(1, 2)
    assert x.tier == FLOATING
    assert math.isclose(float(x), math.sqrt(2))


def test_negative_base_non_integer_power_undefined():
    with pytest.raises(UndefinedPower):
        TieredNumber(-8) ** TieredNumber(1, 3)
    with pytest.raises(UndefinedPower):
        TieredNumber(-2.0) ** 0.5


def test_negative_base_integer_power_ok():
    assert (TieredNumber(-2) ** 3).value == -8
    assert float(TieredNumber(-2.0) ** 2.0) == 4.0


def test_modulo_pow_rejected():
    with pytest.raises(TypeError):
        pow(TieredNumber(2), 3, 5)


# -------------------------------
# Equality, ordering, hashing
# -------------------------------

def test_exact_equality():
    assert TieredNumber(1, 2) == Fraction(1, 2)
    assert TieredNumber(2) == 2
    assert TieredNumber(1, 3) != TieredNumber(1, 2)


def test_exact_and_float_tiers_never_equal():
    assert TieredNumber(1) != TieredNumber(1.0)
    assert TieredNumber(1.0) != 1
    assert TieredNumber(1, 2) != 0.5


def test_float_equality_is_tolerant():
    a = TieredNumber(0.1 + 0.2)
    b = TieredNumber(0.3)
    assert a == b
    assert TieredNumber(1.0) != TieredNumber(1.0 + 1e-6)


def test_hash_consistent_with_equality():
    assert hash(TieredNumber(2)) == hash(2)
    assert hash(TieredNumber(1, 2)) == hash(Fraction(1, 2))
    assert hash(TieredNumber(0.1 + 0.2)) == hash(TieredNumber(0.3))


def test_ordering_by_real_value():
    assert TieredNumber(1, 3) < TieredNumber(1, 2)
    assert TieredNumber(0.5) >= TieredNumber(1, 2)
    assert sorted([TieredNumber(2), TieredNumber(-1), TieredNumber(1, 2)]) == [-1, Fraction(1, 2), 2]


def test_truthiness_and_conversions():
    assert not TieredNumber(0)
    assert not TieredNumber(0.0)
    assert TieredNumber(1, 7)
    assert int(TieredNumber(3)) == 3
    assert int(TieredNumber(3.0)) == 3
    assert float(TieredNumber(1, 4)) == 0.25
    with pytest.raises(ValueError):
        int(TieredNumber(1, 2))


def test_is_integer_and_is_exact():
    assert TieredNumber(3).is_integer and TieredNumber(3).is_exact
    assert TieredNumber(2.0).is_integer and not TieredNumber(2.0).is_exact
    assert not TieredNumber(1, 2).is_integer


def test_repr_and_str():
    assert repr(TieredNumber(2)) == "TieredNumber(2)"
    assert repr(TieredNumber(1, 5)) == "TieredNumber(1/5)"
    assert str(TieredNumber(1.0)) == "1.0"
