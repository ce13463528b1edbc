import json
import math
from typing import Any, List

from volt.errors import VoltError
from volt.types import ArrayVal, MapVal, is_number, type_name


def to_json(value: Any) -> Any:
    """Convert a Volt value into plain Python data for ``json.dumps``."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if is_number(value):
        if not math.isfinite(value):
            raise VoltError('ValueError', 'jsonEncode() cannot encode nan or inf')
        return int(value) if float(value).is_integer() else value
    if isinstance(value, ArrayVal):
        return [to_json(item) for item in value.items]
    if isinstance(value, MapVal):
        return {key: to_json(item) for key, item in value.entries.items()}
    raise VoltError('TypeError', f"jsonEncode() cannot encode a {type_name(value)}")


def from_json(data: Any) -> Any:
    if isinstance(data, dict):
        return MapVal({str(key): from_json(item) for key, item in data.items()})
    if isinstance(data, list):
        return ArrayVal(from_json(item) for item in data)
    if isinstance(data, bool) or data is None or isinstance(data, str):
        return data
    return float(data)


def populate_json(interpreter) -> None:
    def std_json_encode(args: List[Any]) -> Any:
        return json.dumps(to_json(args[0]), ensure_ascii=False)

    def std_json_decode(args: List[Any]) -> Any:
        text = args[0]
        if not isinstance(text, str):
            raise VoltError('TypeError', 'jsonDecode() requires a string')
        try:
            return from_json(json.loads(text))
        except json.JSONDecodeError as ex:
            raise VoltError('ValueError', f"Invalid JSON: {ex.msg}")
        except (OverflowError, ValueError):
            # integers too long to parse or too large for a float
            raise VoltError('ValueError', 'Invalid JSON: number out of range')

    interpreter.define('jsonEncode', 1, std_json_encode)
    interpreter.define('jsonDecode', 1, std_json_decode)
