"""
Loose value coercion used by condition operators.

Rows come from spreadsheets and JSON payloads, so "5", 5 and 5.0 must compare
equal and an absent column must behave predictably. The rules below are the
complete coercion table; nothing relies on Python's own cross-type comparison.

    to_number           to_string            loose_equals
    MISSING -> nan      MISSING -> "undefined"  MISSING/None only equal each other
    None    -> 0        None    -> "null"       bool  -> number, then compare
    bool    -> 1 / 0    bool    -> "true"/...   number vs str -> str to number
    ""      -> 0        5.0     -> "5"          list/dict vs scalar -> to_string
    "0x1f"  -> 31       [1, 2]  -> "1,2"        list/dict vs list/dict -> identity
    "abc"   -> nan      {...}   -> "[object Object]"
"""

import math
import re
from decimal import Decimal
from typing import Any


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_RADIX_RE = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_INFINITY = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}


def is_nullish(value: Any) -> bool:
    return value is None or value is MISSING


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_container(value: Any) -> bool:
    return isinstance(value, (list, tuple, dict))


def to_number(value: Any) -> float:
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if text in _INFINITY:
            return _INFINITY[text]
        if _DECIMAL_RE.match(text):
            return float(text)
        if _RADIX_RE.match(text):
            return float(int(text, 0))
        return math.nan
    if isinstance(value, (list, tuple)):
        return to_number(to_string(value))
    return math.nan


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    magnitude = abs(value)
    if value.is_integer() and magnitude < 1e21:
        return str(int(value))
    # plain decimals in [1e-6, 1e21), unpadded exponents outside
    if 1e-6 <= magnitude < 1e21:
        return format(Decimal(repr(value)), "f")
    mantissa, _, exponent = repr(value).partition("e")
    power = int(exponent)
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def to_string(value: Any) -> str:
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_number(value)
    if isinstance(value, (list, tuple)):
        return ",".join("" if is_nullish(item) else to_string(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def loose_equals(left: Any, right: Any) -> bool:
    if is_nullish(left) or is_nullish(right):
        return is_nullish(left) and is_nullish(right)
    if isinstance(left, bool):
        return loose_equals(to_number(left), right)
    if isinstance(right, bool):
        return loose_equals(left, to_number(right))
    if is_number(left) and is_number(right):
        return float(left) == float(right)
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if is_number(left) and isinstance(right, str):
        return float(left) == to_number(right)
    if isinstance(left, str) and is_number(right):
        return to_number(left) == float(right)
    if _is_container(left) and _is_container(right):
        return left is right
    if _is_container(left):
        return loose_equals(to_string(left), right)
    if _is_container(right):
        return loose_equals(left, to_string(right))
    return left == right
