"""Evaluation of ``calculation`` field formulas.

A formula is an arithmetic expression over other fields' ``fieldId``
values, e.g. ``field_a * 2 + sum(field_b, field_c)``. Only numbers, the
operators ``+ - * / %``, parentheses and ``sum(...)`` are accepted; the
expression is walked as an AST and never passed to ``eval``.
"""
from __future__ import annotations

import ast
import logging
import operator
from typing import Any, Callable, Dict, Iterable, Mapping, Union

from .models import FormTemplateField

logger = logging.getLogger(__name__)

Number = Union[int, float]

MAX_FORMULA_LENGTH = 1000

_BINARY_OPERATORS: Dict[type, Callable[[Number, Number], Number]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
}
_UNARY_OPERATORS: Dict[type, Callable[[Number], Number]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class FormulaError(ValueError):
    """Raised for formulas that cannot be parsed or evaluated."""


def _as_number(name: str, value: Any) -> Number:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        raise FormulaError(f"Field {name!r} is not numeric: {value!r}") from None


def _evaluate(node: ast.AST, values: Mapping[str, Any]) -> Number:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
            return node.value
        raise FormulaError(f"Unsupported literal: {node.value!r}")
    if isinstance(node, ast.Name):
        if node.id not in values:
            raise FormulaError(f"Unknown field reference: {node.id}")
        return _as_number(node.id, values[node.id])
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate(node.left, values)
        right = _evaluate(node.right, values)
        try:
            return _BINARY_OPERATORS[type(node.op)](left, right)
        except ZeroDivisionError:
            raise FormulaError("Division by zero") from None
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate(node.operand, values))
    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id == "sum"
        and not node.keywords
    ):
        return sum(_evaluate(arg, values) for arg in node.args)
    raise FormulaError(f"Unsupported expression: {ast.dump(node)}")


def evaluate(formula: str, values: Mapping[str, Any]) -> Number:
    if len(formula) > MAX_FORMULA_LENGTH:
        raise FormulaError(f"Formulas are limited to {MAX_FORMULA_LENGTH} characters")
    try:
        tree = ast.parse(formula.strip(), mode="eval")
    except SyntaxError as exc:
        raise FormulaError(f"Invalid formula {formula!r}: {exc.msg}") from exc
    except (RecursionError, MemoryError):
        raise FormulaError("Formula is nested too deeply") from None
    try:
        return _evaluate(tree.body, values)
    except RecursionError:
        raise FormulaError("Formula is nested too deeply") from None


def apply_calculations(fields: Iterable[Any], data: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in every calculation field of ``fields`` from the values in ``data``.

    Fields are evaluated in document order, so a formula can use the result
    of an earlier calculation. Only the template's own fields can be
    referenced, and those missing from ``data`` count as 0. A formula that
    fails is logged and its field is left unset.
    """

    fields = list(fields)
    values: Dict[str, Any] = {item.field_id: data.get(item.field_id) for item in fields}
    result = dict(data)
    for item in fields:
        if item.field_type != FormTemplateField.CALCULATION or not item.formula:
            continue
        try:
            result[item.field_id] = values[item.field_id] = evaluate(item.formula, values)
        except FormulaError:
            result.pop(item.field_id, None)
            values[item.field_id] = None
            logger.warning("Could not evaluate formula for field %s", item.field_id, exc_info=True)
    return result
