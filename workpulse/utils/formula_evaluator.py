"""
Restricted arithmetic evaluator for custom KPI formulas.

Formulas are plain arithmetic over named numeric variables, e.g.
``completed_action_count / action_count * 100``. Only numeric literals,
variable names, the binary operators ``+ - * / // % **``, unary signs,
parentheses and the functions ``min``, ``max``, ``abs`` and ``round``
are accepted. Anything else is rejected before evaluation.
"""

from __future__ import annotations

import ast
import math
import operator
import sys
from typing import Any, Callable, Mapping

from workpulse.core.exceptions import CalculationError

_BINARY_OPERATORS: dict[type, Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: dict[type, Callable[[float], float]] = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}


def _round(value: float, ndigits: float = 0) -> float:
    return round(value, int(ndigits))


_FUNCTIONS: dict[str, Callable[..., float]] = {
    "min": min,
    "max": max,
    "abs": abs,
    "round": _round,
}

# Keeps "10 ** 10 ** 10" from hanging a batch worker
_MAX_EXPONENT = 100

# Largest power of ten a float can hold
_MAX_MAGNITUDE = math.log10(sys.float_info.max)


class FormulaEvaluator:
    """Evaluates arithmetic formulas without allowing arbitrary code."""

    def parse(self, formula: str) -> ast.Expression:
        """Parse and validate a formula, returning its AST."""
        if not formula or not formula.strip():
            raise CalculationError("Formula is empty")
        try:
            tree = ast.parse(formula.strip(), mode="eval")
        except SyntaxError as exc:
            raise CalculationError(f"Invalid formula syntax: {exc.msg}", details={"formula": formula}) from exc
        self._validate_node(tree.body)
        return tree

    def variables(self, formula: str) -> set[str]:
        """Names referenced by a formula (function names excluded)."""
        tree = self.parse(formula)
        called = {
            node.func.id
            for node in ast.walk(tree)
            if isinstance(node, ast.Call) and isinstance(node.func, ast.Name)
        }
        return {
            node.id
            for node in ast.walk(tree)
            if isinstance(node, ast.Name) and node.id not in called
        }

    def evaluate(self, formula: str, context: Mapping[str, Any]) -> float:
        """
        Evaluate a formula against a variable context.

        Raises:
            CalculationError: on invalid syntax, unknown variables, missing
                values or arithmetic errors such as division by zero.
        """
        tree = self.parse(formula)
        try:
            result = self._eval_node(tree.body, context)
        except ZeroDivisionError as exc:
            raise CalculationError("Division by zero in formula", details={"formula": formula}) from exc
        except (OverflowError, ValueError, TypeError) as exc:
            raise CalculationError(f"Formula evaluation failed: {exc}", details={"formula": formula}) from exc

        if isinstance(result, complex) or not math.isfinite(result):
            raise CalculationError("Formula did not produce a finite number", details={"formula": formula})
        return float(result)

    def _validate_node(self, node: ast.AST) -> None:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
                raise CalculationError(f"Unsupported literal: {node.value!r}")
        elif isinstance(node, ast.Name):
            return
        elif isinstance(node, ast.BinOp):
            if type(node.op) not in _BINARY_OPERATORS:
                raise CalculationError(f"Unsupported operator: {type(node.op).__name__}")
            self._validate_node(node.left)
            self._validate_node(node.right)
        elif isinstance(node, ast.UnaryOp):
            if type(node.op) not in _UNARY_OPERATORS:
                raise CalculationError(f"Unsupported operator: {type(node.op).__name__}")
            self._validate_node(node.operand)
        elif isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.func.id not in _FUNCTIONS:
                raise CalculationError("Only min, max, abs and round may be called")
            if node.keywords:
                raise CalculationError("Keyword arguments are not supported")
            if not node.args:
                raise CalculationError(f"{node.func.id}() requires arguments")
            for arg in node.args:
                self._validate_node(arg)
        else:
            raise CalculationError(f"Unsupported expression element: {type(node).__name__}")

    def _check_power(self, base: float, exponent: float) -> None:
        if abs(exponent) > _MAX_EXPONENT:
            raise CalculationError(f"Exponent too large: {exponent}")
        if base != 0 and math.log10(abs(base)) * exponent > _MAX_MAGNITUDE:
            raise CalculationError(f"Power out of range: {base} ** {exponent}")

    def _eval_node(self, node: ast.AST, context: Mapping[str, Any]) -> float:
        if isinstance(node, ast.Constant):
            # Floats only: integer powers would otherwise grow without bound
            return float(node.value)
        if isinstance(node, ast.Name):
            if node.id not in context:
                raise CalculationError(f"Unknown variable: {node.id}")
            value = context[node.id]
            if value is None:
                raise CalculationError(f"No value available for variable: {node.id}")
            return float(value)
        if isinstance(node, ast.UnaryOp):
            return _UNARY_OPERATORS[type(node.op)](self._eval_node(node.operand, context))
        if isinstance(node, ast.BinOp):
            left = self._eval_node(node.left, context)
            right = self._eval_node(node.right, context)
            if isinstance(node.op, ast.Pow):
                self._check_power(left, right)
            return _BINARY_OPERATORS[type(node.op)](left, right)
        if isinstance(node, ast.Call):
            args = [self._eval_node(arg, context) for arg in node.args]
            return float(_FUNCTIONS[node.func.id](*args))
        raise CalculationError(f"Unsupported expression element: {type(node).__name__}")


formula_evaluator = FormulaEvaluator()
