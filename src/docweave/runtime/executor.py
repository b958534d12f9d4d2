"""Build-time execution of compiled units.

THIS RUNS DOCUMENT CODE. Only feed it content from the same repository (or
otherwise reviewed); anyone who can edit the documents can already edit the
build. The interpreter below walks the syntax tree of the compiled unit and
understands a closed set of constructs, so a compiled unit can build a tree
and nothing else:

* ``import Name`` binds ``Name`` to the string ``"Name"`` for every declared
  component; the tree records component identity by name.
* ``default = <expr>`` is the single export.
* expressions are literals, lists, string-keyed dicts, bound names and calls
  to ``h(type, props, *children)``, the one tree-construction primitive.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Callable, Iterable
from typing import Any

from docweave.exceptions import ExecutionError
from docweave.runtime.tree import Element, create_element

logger = logging.getLogger(__name__)

ElementFactory = Callable[..., Element]

# Names the compiled-unit format reserves.
PRIMITIVE = "h"
EXPORT = "default"

_SCALARS = (str, int, float, bool, type(None))


class _Interpreter:
    def __init__(self, component_names: Iterable[str], create: ElementFactory, path: str | None) -> None:
        self.allowed = set(component_names)
        self.create = create
        self.path = path
        self.bindings: dict[str, str] = {}

    def fail(self, node: ast.AST | None, reason: str) -> ExecutionError:
        line = getattr(node, "lineno", None)
        where = f" (line {line})" if line is not None else ""
        return ExecutionError(self.path, f"{reason}{where}")

    def run(self, module: ast.Module) -> Element:
        result: Any = None
        exported = False
        for stmt in module.body:
            if isinstance(stmt, ast.Import):
                self._import(stmt)
            elif (
                isinstance(stmt, ast.Assign)
                and len(stmt.targets) == 1
                and isinstance(stmt.targets[0], ast.Name)
                and stmt.targets[0].id == EXPORT
            ):
                if exported:
                    raise self.fail(stmt, f"'{EXPORT}' assigned twice")
                result = self.evaluate(stmt.value)
                exported = True
            else:
                raise self.fail(stmt, f"unsupported statement {type(stmt).__name__}")
        if not exported:
            raise self.fail(None, f"compiled unit has no '{EXPORT}' export")
        if not isinstance(result, Element):
            raise self.fail(None, f"'{EXPORT}' is {type(result).__name__}, not an element")
        return result

    def _import(self, stmt: ast.Import) -> None:
        for alias in stmt.names:
            if alias.name not in self.allowed:
                raise self.fail(stmt, f"import of undeclared component {alias.name!r}")
            self.bindings[alias.asname or alias.name] = alias.name

    def evaluate(self, node: ast.expr) -> Any:
        if isinstance(node, ast.Constant):
            if not isinstance(node.value, _SCALARS):
                raise self.fail(node, f"unsupported constant {node.value!r}")
            return node.value
        if isinstance(node, ast.Name):
            if node.id in self.bindings:
                return self.bindings[node.id]
            raise self.fail(node, f"undefined name {node.id!r}")
        if isinstance(node, ast.List | ast.Tuple):
            return [self.evaluate(item) for item in node.elts]
        if isinstance(node, ast.Dict):
            return self._dict(node)
        if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub | ast.UAdd):
            operand = self.evaluate(node.operand)
            if isinstance(operand, bool) or not isinstance(operand, int | float):
                raise self.fail(node, "unary sign on a non-number")
            return -operand if isinstance(node.op, ast.USub) else operand
        if isinstance(node, ast.Call):
            return self._call(node)
        raise self.fail(node, f"unsupported expression {type(node).__name__}")

    def _dict(self, node: ast.Dict) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key_node, value_node in zip(node.keys, node.values, strict=True):
            if key_node is None:
                raise self.fail(node, "dict unpacking is not supported")
            key = self.evaluate(key_node)
            if not isinstance(key, str):
                raise self.fail(key_node, "dict keys must be strings")
            result[key] = self.evaluate(value_node)
        return result

    def _call(self, node: ast.Call) -> Element:
        if not isinstance(node.func, ast.Name) or node.func.id != PRIMITIVE:
            raise self.fail(node, f"only {PRIMITIVE}() may be called")
        if node.keywords or any(isinstance(arg, ast.Starred) for arg in node.args):
            raise self.fail(node, f"{PRIMITIVE}() takes positional arguments only")
        if not node.args:
            raise self.fail(node, f"{PRIMITIVE}() needs an element type")
        values = [self.evaluate(arg) for arg in node.args]
        type_ = values[0]
        props = values[1] if len(values) > 1 else None
        children = values[2:]
        if not isinstance(type_, str) or not type_:
            raise self.fail(node, f"element type must be a non-empty string, got {type_!r}")
        if props is not None and not isinstance(props, dict):
            raise self.fail(node, "element props must be a dict or None")
        try:
            return self.create(type_, props, *children)
        except (TypeError, ValueError, KeyError) as e:
            raise self.fail(node, f"building <{type_}> failed: {e}") from e


def execute(
    code: str,
    component_names: Iterable[str],
    *,
    path: str | None = None,
    create: ElementFactory = create_element,
) -> Element:
    """Run a compiled unit once and return the tree it exports.

    Raises:
        ExecutionError: If the code is not a well-formed compiled unit or
            building the tree fails.

    """
    try:
        module = ast.parse(code, mode="exec")
    except SyntaxError as e:
        raise ExecutionError(path, f"invalid compiled code: {e.msg} (line {e.lineno})") from e
    except ValueError as e:
        # e.g. unpaired surrogates, which cannot be encoded for the parser
        raise ExecutionError(path, f"invalid compiled code: {e}") from e

    interpreter = _Interpreter(component_names, create, path)
    try:
        tree = interpreter.run(module)
    except RecursionError as e:
        raise ExecutionError(path, "document nests too deeply") from e
    logger.debug("Materialized tree for /%s", path or "")
    return tree
