from typing import Any, Dict, Optional

from volt.errors import VoltError
from volt.lexer import Token


class Environment:
    """Represents a scope environment mapping identifiers to values.

    Scopes only ever point outward to their parent, so a closure can keep
    its defining chain alive without creating reference cycles.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any):
        # defining always targets this scope and may shadow an outer binding
        self.values[name] = value

    def resolve(self, name: str) -> Optional['Environment']:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env
            env = env.parent
        return None

    def contains(self, name: str) -> bool:
        return self.resolve(name) is not None

    def get(self, name: str, token: Optional[Token] = None) -> Any:
        env = self.resolve(name)
        if env is None:
            raise VoltError('NameError', f"Undefined variable '{name}'", token)
        return env.values[name]

    def assign(self, name: str, value: Any, token: Optional[Token] = None):
        env = self.resolve(name)
        if env is None:
            raise VoltError('NameError', f"Undefined variable '{name}'", token)
        env.values[name] = value

    def depth(self) -> int:
        count = 0
        env = self.parent
        while env is not None:
            count += 1
            env = env.parent
        return count
