from dataclasses import dataclass
from typing import Any, Callable as Fn, List

from volt.types import Callable


@dataclass(eq=False)
class BuiltinFunction(Callable):
    name: str
    arity: int
    fn: Fn[[List[Any]], Any]

    def __repr__(self) -> str:
        return f"<native fn {self.name}>"

    __str__ = __repr__
