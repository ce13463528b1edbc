import math
from typing import Any, Callable, List

from volt.errors import VoltError
from volt.types import is_number


def _number(value: Any, fn: str) -> float:
    if not is_number(value):
        raise VoltError('TypeError', f"{fn}() requires a number")
    return float(value)


def _round_half_away(x: float) -> float:
    # Python's round() is banker's rounding; Volt rounds halves away from zero
    if math.isnan(x) or math.isinf(x):
        return x
    magnitude = abs(x)
    whole = math.floor(magnitude)
    # compare the fraction directly; adding 0.5 first can round up
    if magnitude - whole >= 0.5:
        whole += 1
    return float(math.copysign(whole, x))


def _log(x: float) -> float:
    if x <= 0:
        raise VoltError('ValueError', 'log() requires a positive number')
    return math.log(x)


def _sqrt(x: float) -> float:
    if x < 0:
        raise VoltError('ValueError', 'sqrt() requires a non-negative number')
    return math.sqrt(x)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _pow(x: float, y: float) -> float:
    try:
        return math.pow(x, y)
    except OverflowError:
        return math.inf
    except ValueError:
        raise VoltError('ValueError', 'pow() result is not a real number')


UNARY = {
    'sqrt': _sqrt,
    'abs': abs,
    'floor': lambda x: float(math.floor(x)) if math.isfinite(x) else x,
    'ceil': lambda x: float(math.ceil(x)) if math.isfinite(x) else x,
    'round': _round_half_away,
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
    'log': _log,
    'exp': _exp,
}

BINARY = {
    'pow': _pow,
    'min': min,
    'max': max,
}


def populate_math(interpreter) -> None:
    def unary(name: str, op: Callable[[float], float]):
        def std_fn(args: List[Any]) -> Any:
            x = _number(args[0], name)
            if name in ('sin', 'cos', 'tan') and math.isinf(x):
                raise VoltError('ValueError', f"{name}() of an infinite number")
            return op(x)
        return std_fn

    def binary(name: str, op: Callable[[float, float], float]):
        def std_fn(args: List[Any]) -> Any:
            return op(_number(args[0], name), _number(args[1], name))
        return std_fn

    for name, op in UNARY.items():
        interpreter.define(name, 1, unary(name, op))
    for name, op in BINARY.items():
        interpreter.define(name, 2, binary(name, op))
