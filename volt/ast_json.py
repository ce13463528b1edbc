"""JSON serialization/deserialization for Volt AST.

This module converts between Volt AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node becomes an
object tagged with ``"type"`` (the node class name) whose other keys are
the dataclass fields; tokens are kept so that runtime errors raised while
executing a loaded tree still carry line and column information.
"""

from __future__ import annotations

import math
from dataclasses import fields, is_dataclass
from typing import Any, Dict

from . import ast as volt_ast
from .lexer import Token

# Every concrete node class, keyed by the tag written to JSON.
NODE_TYPES: Dict[str, type] = {
    name: cls for name, cls in vars(volt_ast).items()
    if isinstance(cls, type) and issubclass(cls, volt_ast.Node)
    and cls not in (volt_ast.Node, volt_ast.Expr, volt_ast.Stmt)
}


def token_to_obj(tok: Token) -> Dict[str, Any]:
    obj = {"kind": tok.type, "lexeme": tok.lexeme, "line": tok.line, "column": tok.column}
    if tok.literal is not None:
        obj["literal"] = tok.literal
    return obj


def token_from_obj(o: Dict[str, Any]) -> Token:
    return Token(o["kind"], o["lexeme"], o["line"], o["column"], o.get("literal"))


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (bool, str)):
        return node
    if isinstance(node, float):
        if not math.isfinite(node):
            # JSON has no inf/nan literals
            return {"__float__": repr(node)}
        return node
    if isinstance(node, int):
        return node
    if isinstance(node, (list, tuple)):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Token):
        return {"__token__": token_to_obj(node)}

    if isinstance(node, volt_ast.Node) and is_dataclass(node):
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj

    raise TypeError(f"Cannot serialize object of type {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, str, int, float)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError(f"Unexpected JSON value: {obj!r}")
    if "__token__" in obj:
        return token_from_obj(obj["__token__"])
    if "__float__" in obj:
        return float(obj["__float__"])

    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {}
    for f in fields(cls):
        value = ast_from_obj(obj[f.name])
        if t == "MapLit" and f.name == "entries":
            value = [tuple(pair) for pair in value]
        elif t == "Literal" and f.name == "value" and isinstance(value, int) and not isinstance(value, bool):
            # numbers are always floats at runtime
            value = float(value)
        kwargs[f.name] = value
    return cls(**kwargs)
