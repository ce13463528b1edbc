"""Runtime value model for Volt.

Volt values map onto Python objects as follows:

    nil      -> None
    bool     -> bool
    number   -> float (always; integers are only a display concern)
    string   -> str
    array    -> ArrayVal
    hash map -> MapVal
    function -> BuiltinFunction / FunctionValue

Arrays and hash maps are reference types: every binding that holds one
shares the same underlying storage, and equality between them is
identity. The helpers in this module define truthiness, equality and
string conversion for the whole interpreter.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional


class ArrayVal:
    """An ordered, growable, heterogeneous sequence of values."""
    __slots__ = ('items',)

    def __init__(self, items: Optional[Iterable[Any]] = None):
        self.items: List[Any] = list(items) if items is not None else []

    def __len__(self) -> int:
        return len(self.items)

    def get(self, index: int) -> Any:
        return self.items[index]

    def set(self, index: int, value: Any):
        self.items[index] = value

    def push(self, value: Any):
        self.items.append(value)

    def pop(self) -> Any:
        # popping an empty array yields nil
        if not self.items:
            return None
        return self.items.pop()

    def __repr__(self) -> str:
        return f"Array({self.items!r})"


class MapVal:
    """A mapping from canonical string keys to values.

    Keys are produced by :func:`map_key`, so ``1`` and ``"1"`` address the
    same entry. Missing keys read as nil.
    """
    __slots__ = ('entries',)

    def __init__(self, entries: Optional[Dict[str, Any]] = None):
        self.entries: Dict[str, Any] = dict(entries) if entries is not None else {}

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: str) -> Any:
        return self.entries.get(key)

    def set(self, key: str, value: Any):
        self.entries[key] = value

    def contains(self, key: str) -> bool:
        return key in self.entries

    def remove(self, key: str) -> bool:
        return self.entries.pop(key, _MISSING) is not _MISSING

    def keys(self) -> List[str]:
        return list(self.entries.keys())

    def values(self) -> List[Any]:
        return list(self.entries.values())

    def __repr__(self) -> str:
        return f"Map({self.entries!r})"


_MISSING = object()


class Callable:
    """Base class for values that can be called from Volt code."""
    name: str
    arity: int


def is_number(value: Any) -> bool:
    # bool is a subclass of int in Python; Volt keeps them apart
    return isinstance(value, float) or (isinstance(value, int) and not isinstance(value, bool))


def is_callable(value: Any) -> bool:
    return isinstance(value, Callable)


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0
    if isinstance(value, (ArrayVal, MapVal)):
        return len(value) > 0
    return True


def values_equal(a: Any, b: Any) -> bool:
    """Volt ``==``: scalars by value, containers and callables by identity."""
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return a is b


def format_number(num: float) -> str:
    """Render integral numbers without a fraction, others with up to 6 decimals."""
    if num.is_integer():
        return str(int(num))
    if math.isnan(num):
        return 'nan'
    if math.isinf(num):
        return 'inf' if num > 0 else '-inf'
    text = f"{num:.6f}".rstrip('0')
    if text.endswith('.'):
        text = text[:-1]
    if text in ('-0', ''):
        text = '0'
    return text


def number_literal(num: float) -> str:
    """Render a number so that the lexer reads back exactly the same value."""
    if num.is_integer():
        return str(int(num))
    return format(Decimal(repr(num)), 'f')


def to_string(value: Any) -> str:
    """Convert a Volt value to the text shown by ``print`` and ``str()``."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if is_number(value):
        return format_number(float(value))
    if isinstance(value, str):
        return value
    if isinstance(value, ArrayVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    if isinstance(value, MapVal):
        entries = ', '.join(f"{k}: {to_string(v)}" for k, v in value.entries.items())
        return '{' + entries + '}'
    return str(value)


def map_key(value: Any) -> Optional[str]:
    """Return the canonical key for ``value`` or None if it cannot be a key."""
    if value is None or isinstance(value, (bool, str)) or is_number(value):
        return to_string(value)
    return None


def type_name(value: Any) -> str:
    """Return the Volt type name of a runtime value."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'bool'
    if is_number(value):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, ArrayVal):
        return 'array'
    if isinstance(value, MapVal):
        return 'hashmap'
    if is_callable(value):
        return 'function'
    return type(value).__name__
