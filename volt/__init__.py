# Volt language package
# This package provides a lexer, parser and tree-walking interpreter for the Volt language.
from .errors import VoltError, ProgramError, ParseDiagnostic
from .interpreter import run_program, Interpreter, FunctionValue
from .lexer import tokenize
from .parser import parse_program, parse_expression

__all__ = [
    'run_program',
    'Interpreter',
    'FunctionValue',
    'VoltError',
    'ProgramError',
    'ParseDiagnostic',
    'tokenize',
    'parse_program',
    'parse_expression',
]
