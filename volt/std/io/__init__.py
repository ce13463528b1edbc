from typing import Any, List

from volt.errors import VoltError
from volt.types import to_string
from .basic_io import BasicIO


def populate_io(interpreter) -> None:
    basic_io = BasicIO()

    def require_str(value: Any, fn: str, what: str) -> str:
        if not isinstance(value, str):
            raise VoltError('TypeError', f"{fn}() {what} argument must be a string")
        return value

    def std_input(args: List[Any]) -> Any:
        prompt = args[0]
        return basic_io.input(prompt if isinstance(prompt, str) else to_string(prompt))

    def std_read_file(args: List[Any]) -> Any:
        return basic_io.read_file(require_str(args[0], 'readFile', 'path'))

    def std_write_file(args: List[Any]) -> Any:
        path = require_str(args[0], 'writeFile', 'path')
        data = require_str(args[1], 'writeFile', 'content')
        return basic_io.write_file(path, data)

    def std_append_file(args: List[Any]) -> Any:
        path = require_str(args[0], 'appendFile', 'path')
        data = require_str(args[1], 'appendFile', 'content')
        return basic_io.append_file(path, data)

    def std_file_exists(args: List[Any]) -> Any:
        return basic_io.file_exists(require_str(args[0], 'fileExists', 'path'))

    interpreter.define('input', 1, std_input)
    interpreter.define('readFile', 1, std_read_file)
    interpreter.define('writeFile', 2, std_write_file)
    interpreter.define('appendFile', 2, std_append_file)
    interpreter.define('fileExists', 1, std_file_exists)
