"""Member access on arrays and hash maps.

``arr.length`` and ``map.size`` are plain properties. Everything else is
a method: reading it yields a native function bound to the receiver, so
``let p = arr.push; p(1);`` still pushes onto ``arr``. Methods that take
callbacks call back into the interpreter through ``call_value`` and
therefore get the usual arity checking.
"""

from typing import Any, Dict, List, Optional, Tuple

from volt.builtin_function import BuiltinFunction
from volt.errors import VoltError
from volt.lexer import Token
from volt.types import ArrayVal, MapVal, is_number, is_truthy, map_key, to_string


def get_member(interp: Any, target: Any, name: str, token: Optional[Token] = None) -> Any:
    if isinstance(target, ArrayVal):
        if name == 'length':
            return float(len(target))
        method = _array_methods(interp, target, token).get(name)
        if method is None:
            raise VoltError('AttributeError', f"Unknown array member: {name}", token)
        return BuiltinFunction(name, method[0], method[1])
    if isinstance(target, MapVal):
        if name == 'size':
            return float(len(target))
        method = _map_methods(interp, target, token).get(name)
        if method is None:
            raise VoltError('AttributeError', f"Unknown hash map member: {name}", token)
        return BuiltinFunction(name, method[0], method[1])
    raise VoltError('TypeError', 'Only arrays and hash maps have members', token)


def _integer_arg(value: Any, what: str) -> int:
    if not is_number(value) or not float(value).is_integer():
        raise VoltError('TypeError', f"{what} must be an integer")
    return int(value)


def _array_methods(interp: Any, arr: ArrayVal, token: Optional[Token]) -> Dict[str, Tuple[int, Any]]:
    def call(fn: Any, *args: Any) -> Any:
        return interp.call_value(fn, list(args), token)

    def push(args: List[Any]) -> Any:
        arr.push(args[0])
        return None

    def pop(args: List[Any]) -> Any:
        return arr.pop()

    # callbacks see a snapshot so that mutating the array mid-iteration
    # cannot skip or repeat elements
    def map_(args: List[Any]) -> Any:
        return ArrayVal([call(args[0], item) for item in list(arr.items)])

    def filter_(args: List[Any]) -> Any:
        return ArrayVal([item for item in list(arr.items) if is_truthy(call(args[0], item))])

    def reduce_(args: List[Any]) -> Any:
        acc = args[1]
        for item in list(arr.items):
            acc = call(args[0], acc, item)
        return acc

    def find(args: List[Any]) -> Any:
        for item in list(arr.items):
            if is_truthy(call(args[0], item)):
                return item
        return None

    def some(args: List[Any]) -> Any:
        return any(is_truthy(call(args[0], item)) for item in list(arr.items))

    def every(args: List[Any]) -> Any:
        return all(is_truthy(call(args[0], item)) for item in list(arr.items))

    def slice_(args: List[Any]) -> Any:
        size = len(arr)
        start = max(0, min(_integer_arg(args[0], 'slice start'), size))
        end = max(start, min(_integer_arg(args[1], 'slice end'), size))
        return ArrayVal(arr.items[start:end])

    def concat(args: List[Any]) -> Any:
        other = args[0]
        if not isinstance(other, ArrayVal):
            raise VoltError('TypeError', 'concat expects an array')
        return ArrayVal(arr.items + other.items)

    def join(args: List[Any]) -> Any:
        sep = args[0]
        if not isinstance(sep, str):
            raise VoltError('TypeError', 'join separator must be a string')
        return sep.join(to_string(item) for item in arr.items)

    def reverse(args: List[Any]) -> Any:
        return ArrayVal(reversed(arr.items))

    return {
        'push': (1, push),
        'pop': (0, pop),
        'map': (1, map_),
        'filter': (1, filter_),
        'reduce': (2, reduce_),
        'find': (1, find),
        'some': (1, some),
        'every': (1, every),
        'slice': (2, slice_),
        'concat': (1, concat),
        'join': (1, join),
        'reverse': (0, reverse),
    }


def _map_methods(interp: Any, mapping: MapVal, token: Optional[Token]) -> Dict[str, Tuple[int, Any]]:
    def key_of(value: Any) -> str:
        return interp.key_for(value, token)

    def keys(args: List[Any]) -> Any:
        return ArrayVal(mapping.keys())

    def values(args: List[Any]) -> Any:
        return ArrayVal(mapping.values())

    def has(args: List[Any]) -> Any:
        return mapping.contains(key_of(args[0]))

    def remove(args: List[Any]) -> Any:
        return mapping.remove(key_of(args[0]))

    return {
        'keys': (0, keys),
        'values': (0, values),
        'has': (1, has),
        'remove': (1, remove),
    }
