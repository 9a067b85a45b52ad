"""
Unit Tests for loose value coercion

Tests cover:
1. Numeric conversion of strings, nulls, booleans and lists
2. String conversion
3. Loose equality across mixed types
"""

import math

import pytest

from rules.coercion import MISSING, loose_equals, to_number, to_string
from rules.rule_engine import Condition


class TestToNumber:
    """Tests for to_number."""

    @pytest.mark.parametrize("value, expected", [
        ("42", 42.0),
        (" 3.5 ", 3.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("-12", -12.0),
        ("0x1f", 31.0),
        ("0b101", 5.0),
        ("", 0.0),
        (None, 0.0),
        (True, 1.0),
        (False, 0.0),
        (7, 7.0),
        ([], 0.0),
        ([5], 5.0),
        ("Infinity", math.inf),
        ("-Infinity", -math.inf),
    ])
    def test_convertible_values(self, value, expected):
        """Test values that have a numeric reading."""
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [MISSING, "abc", "12abc", "1_000", "inf", "nan", [1, 2], {"a": 1}])
    def test_non_numeric_values_are_nan(self, value):
        """Test that anything without a numeric reading becomes NaN."""
        assert math.isnan(to_number(value))


class TestToString:
    """Tests for to_string."""

    def test_scalars(self):
        assert to_string(MISSING) == "undefined"
        assert to_string(None) == "null"
        assert to_string(True) == "true"
        assert to_string(5.0) == "5"
        assert to_string(1.5) == "1.5"
        assert to_string(12) == "12"
        assert to_string(math.nan) == "NaN"

    @pytest.mark.parametrize("value, expected", [
        (0.000001, "0.000001"),
        (0.000015, "0.000015"),
        (0.1, "0.1"),
        (-2.5, "-2.5"),
        (1e-7, "1e-7"),
        (1.5e-7, "1.5e-7"),
        (1e21, "1e+21"),
        (-2.5e22, "-2.5e+22"),
    ])
    def test_small_and_large_floats(self, value, expected):
        """Test decimal text down to 1e-6 and unpadded exponents beyond."""
        assert to_string(value) == expected

    def test_text_operators_see_decimal_form(self):
        condition = Condition(field="rate", operator="startsWith", value="0.0000")
        assert condition.evaluate({"rate": 0.000001}) is True

    def test_containers(self):
        assert to_string([1, "a", None]) == "1,a,"
        assert to_string({"a": 1}) == "[object Object]"


class TestLooseEquals:
    """Tests for loose_equals."""

    @pytest.mark.parametrize("left, right", [
        ("5", 5),
        (5, "5.0"),
        (5, 5.0),
        ("abc", "abc"),
        (None, MISSING),
        (True, 1),
        (True, "1"),
        ([1], 1),
        ([1, 2], "1,2"),
        ("", 0),
    ])
    def test_equal_pairs(self, left, right):
        assert loose_equals(left, right)
        assert loose_equals(right, left)

    @pytest.mark.parametrize("left, right", [
        ("abc", "ABC"),
        (None, 0),
        (MISSING, "5"),
        (MISSING, ""),
        ("true", True),
        ([1], [1]),
        (math.nan, math.nan),
        ("abc", math.nan),
    ])
    def test_unequal_pairs(self, left, right):
        assert not loose_equals(left, right)
        assert not loose_equals(right, left)

    def test_same_container_is_equal(self):
        values = [1, 2]
        assert loose_equals(values, values)
