import re
import time
from typing import Any, List

from volt.errors import VoltError
from volt.types import ArrayVal, MapVal, is_number, to_string, type_name

NUMBER_TEXT = re.compile(r'\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*')


def populate_core(interpreter) -> None:
    def std_clock(args: List[Any]) -> Any:
        return time.time()

    def std_len(args: List[Any]) -> Any:
        value = args[0]
        if isinstance(value, (str, ArrayVal, MapVal)):
            return float(len(value))
        raise VoltError('TypeError', f"len() requires a string, array or hash map, not {type_name(value)}")

    def std_str(args: List[Any]) -> Any:
        return to_string(args[0])

    def std_num(args: List[Any]) -> Any:
        value = args[0]
        if is_number(value):
            return float(value)
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        if isinstance(value, str):
            if not NUMBER_TEXT.fullmatch(value):
                raise VoltError('ValueError', f"Cannot convert string to number: {value}")
            return float(value)
        raise VoltError('ValueError', f"Cannot convert {type_name(value)} to number")

    def std_type(args: List[Any]) -> Any:
        return type_name(args[0])

    def std_keys(args: List[Any]) -> Any:
        mapping = args[0]
        if not isinstance(mapping, MapVal):
            raise VoltError('TypeError', 'keys() requires a hash map')
        return ArrayVal(mapping.keys())

    def std_values(args: List[Any]) -> Any:
        mapping = args[0]
        if not isinstance(mapping, MapVal):
            raise VoltError('TypeError', 'values() requires a hash map')
        return ArrayVal(mapping.values())

    interpreter.define('clock', 0, std_clock)
    interpreter.define('len', 1, std_len)
    interpreter.define('str', 1, std_str)
    interpreter.define('num', 1, std_num)
    interpreter.define('type', 1, std_type)
    interpreter.define('keys', 1, std_keys)
    interpreter.define('values', 1, std_values)
