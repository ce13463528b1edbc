from dataclasses import dataclass
from typing import Any, List, Optional

from volt.lexer import Token


class VoltError(Exception):
    """Exception type used to propagate Volt runtime errors.

    ``name`` is a short category such as ``TypeError`` or ``IndexError``;
    ``token`` locates the offending construct and may be filled in later
    by the call site when a native function raises without one.
    """
    def __init__(self, name: str, message: str, token: Optional[Token] = None):
        super().__init__(message)
        self.name = name
        self.message = message
        self.token = token

    @property
    def line(self) -> Optional[int]:
        return self.token.line if self.token else None

    @property
    def column(self) -> Optional[int]:
        return self.token.column if self.token else None

    def __str__(self) -> str:
        if self.token is None:
            return f"{self.name}: {self.message}"
        return f"[Line {self.token.line}, Col {self.token.column}] {self.name}: {self.message}"


@dataclass(frozen=True)
class ParseDiagnostic:
    """A syntax error recorded by the parser."""
    line: int
    column: int
    lexeme: str
    message: str
    at_end: bool = False

    def __str__(self) -> str:
        if self.at_end:
            where = " at end"
        elif self.lexeme:
            where = f" at '{self.lexeme}'"
        else:
            where = ""
        return f"[Line {self.line}, Col {self.column}] Error{where}: {self.message}"


class ParseError(Exception):
    """Raised inside the parser to abandon the statement being parsed."""


class ProgramError(Exception):
    """Raised by ``run_program`` when the source has syntax errors."""
    def __init__(self, diagnostics: List[ParseDiagnostic]):
        super().__init__('\n'.join(str(d) for d in diagnostics))
        self.diagnostics = diagnostics


# Control-flow signals. Statement execution returns these instead of
# raising them, so no ``except Exception`` in a host can swallow one.

class ReturnSignal:
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"


class BreakSignal:
    __slots__ = ()

    def __repr__(self) -> str:
        return 'BreakSignal()'


class ContinueSignal:
    __slots__ = ()

    def __repr__(self) -> str:
        return 'ContinueSignal()'


BREAK = BreakSignal()
CONTINUE = ContinueSignal()
