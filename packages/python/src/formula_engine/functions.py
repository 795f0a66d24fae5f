from typing import Any, Callable, Optional, ParamSpec, overload

from formula_engine.types import (
    ERROR_PREFIX,
    EvaluatedValue,
    FormulaValue,
    aggregate_numbers,
    coerce_to_bool,
)

P = ParamSpec("P")

# Keys are uppercase, lookups must uppercase the called name.
FORMULA_FUNCTIONS: dict[str, Callable[..., FormulaValue]] = {}


@overload
def formula_fn(
    fn: Callable[P, FormulaValue], *, name: Optional[str] = None
) -> Callable[P, FormulaValue]: ...
@overload
def formula_fn(
    fn: None = None, *, name: Optional[str] = None
) -> Callable[[Callable[P, FormulaValue]], Callable[P, FormulaValue]]: ...


def formula_fn(
    fn: Callable[P, FormulaValue] | None = None,
    *,
    name: Optional[str] = None,
) -> Any:
    """Decorator to register a function callable from formulas."""

    def decorator(fn: Callable[P, FormulaValue]) -> Callable[P, FormulaValue]:
        # Registered through a staticmethod, keep the descriptor on the class.
        if isinstance(fn, staticmethod):
            underlying = fn.__func__
            FORMULA_FUNCTIONS[(name or underlying.__name__).upper()] = underlying
            return fn  # type: ignore

        FORMULA_FUNCTIONS[(name or fn.__name__).upper()] = fn
        return fn

    if fn:
        return decorator(fn)
    else:
        return decorator


def lookup_function(name: str) -> Callable[..., FormulaValue] | None:
    return FORMULA_FUNCTIONS.get(name.upper())


def flatten_args(*args: EvaluatedValue) -> list[FormulaValue]:
    """Flatten function arguments, expanding ranges into their cells row by row."""
    result: list[FormulaValue] = []
    for arg in args:
        if isinstance(arg, list):
            result.extend(flatten_args(*arg))
        else:
            result.append(arg)
    return result


class FormulaFunctions:
    """Built-in functions.

    Aggregates skip values that can't be read as numbers. Empty cells count
    as 0, so they take part in COUNT and AVERAGE.
    """

    @formula_fn
    @staticmethod
    def SUM(*args: EvaluatedValue) -> FormulaValue:
        """Sum of the numeric values, 0 when there are none."""
        return sum(aggregate_numbers(flatten_args(*args)))

    @formula_fn
    @staticmethod
    def AVERAGE(*args: EvaluatedValue) -> FormulaValue:
        """Mean of the numeric values, 0 when there are none."""
        nums = aggregate_numbers(flatten_args(*args))
        return (sum(nums) / len(nums)) if nums else 0

    @formula_fn
    @staticmethod
    def COUNT(*args: EvaluatedValue) -> FormulaValue:
        return len(aggregate_numbers(flatten_args(*args)))

    # Unlike SUM and AVERAGE, MAX and MIN have no neutral value to fall back on.
    @formula_fn
    @staticmethod
    def MAX(*args: EvaluatedValue) -> FormulaValue:
        nums = aggregate_numbers(flatten_args(*args))
        return max(nums) if nums else ERROR_PREFIX

    @formula_fn
    @staticmethod
    def MIN(*args: EvaluatedValue) -> FormulaValue:
        nums = aggregate_numbers(flatten_args(*args))
        return min(nums) if nums else ERROR_PREFIX

    @formula_fn
    @staticmethod
    def IF(*args: EvaluatedValue) -> EvaluatedValue:
        """Return the second argument if the first is truthy, else the third (or None)."""
        if len(args) < 2:
            return f"{ERROR_PREFIX}: IF 函数需要至少 2 个参数"

        if coerce_to_bool(args[0]):
            return args[1]
        return args[2] if len(args) > 2 else None
