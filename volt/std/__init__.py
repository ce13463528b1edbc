"""Host library for Volt.

Every module here installs its natives through ``Interpreter.define`` so
that the interpreter never needs to know which host functions exist.
"""

from .core import populate_core
from .io import populate_io
from .json_lib import populate_json
from .math_lib import populate_math
from .time_lib import populate_time


def populate_standard(interpreter) -> None:
    populate_core(interpreter)
    populate_io(interpreter)
    populate_math(interpreter)
    populate_time(interpreter)
    populate_json(interpreter)
