import math
import re
from typing import Iterable, Union

from formula_engine.errors import CoercionError

FormulaValue = Union[None, int, float, str, bool]
RangeValue = list[list[FormulaValue]]
# What an expression may evaluate to before it reaches a function: ranges only
# ever appear as function arguments.
EvaluatedValue = Union[FormulaValue, RangeValue]

ERROR_PREFIX = "#ERROR"
DIV_ZERO = "#DIV/0!"
NOT_NUMERIC = f"{ERROR_PREFIX}: 无法执行数值运算"
UNKNOWN_NODE = f"{ERROR_PREFIX}: 未知节点类型"

# Leading numeric prefix of a string, the same one a float parser that stops at
# the first invalid character would accept.
NUMBER_PREFIX_REGEX = re.compile(
    r"[+-]?(?:Infinity|[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?)"
)


def parse_number(val: str) -> int | float:
    """Parse a NUMBER token literal."""
    return float(val) if "." in val else int(val)


def parse_number_prefix(text: str) -> float:
    match = NUMBER_PREFIX_REGEX.match(text.lstrip())
    if not match:
        raise CoercionError(f"Cannot convert text '{text}' to number")
    literal = match.group(0)
    if literal.lstrip("+-") == "Infinity":
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


def coerce_to_number(val: EvaluatedValue) -> int | float:
    """Convert a value to a number.

    Empty values count as 0 and booleans as 1/0. Text is parsed from its
    leading numeric prefix. Anything else, ranges included, raises
    CoercionError.
    """
    if val is None:
        return 0
    if isinstance(val, bool):
        return int(val)
    if isinstance(val, (int, float)):
        return val
    if isinstance(val, str):
        if not val:
            return 0
        return parse_number_prefix(val)
    raise CoercionError(f"Cannot convert {val!r} to number")


def coerce_to_bool(value: EvaluatedValue) -> bool:
    """Truthiness of a condition: 0, NaN, empty values and False are falsy."""
    if value is None:
        return False
    if isinstance(value, list):
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def aggregate_numbers(values: Iterable[FormulaValue]) -> list[int | float]:
    """Coerce every value to a number, silently dropping the ones that can't be."""
    result: list[int | float] = []
    for val in values:
        try:
            result.append(coerce_to_number(val))
        except CoercionError:
            continue
    return result


def is_error(value: EvaluatedValue) -> bool:
    """Return True if the value is an in-band error value."""
    return isinstance(value, str) and value.startswith("#")
