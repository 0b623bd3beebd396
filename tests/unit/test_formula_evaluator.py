"""
Unit tests for the restricted KPI formula evaluator.
"""

import time

import pytest

from workpulse.core.exceptions import CalculationError
from workpulse.utils.formula_evaluator import FormulaEvaluator


@pytest.fixture
def evaluator():
    return FormulaEvaluator()


class TestEvaluate:
    def test_arithmetic_over_variables(self, evaluator):
        context = {"completed_action_count": 3, "action_count": 4}
        assert evaluator.evaluate("completed_action_count / action_count * 100", context) == 75.0

    def test_operator_precedence_and_parentheses(self, evaluator):
        assert evaluator.evaluate("2 + 3 * 4", {}) == 14.0
        assert evaluator.evaluate("(2 + 3) * 4", {}) == 20.0

    def test_unary_minus_and_power(self, evaluator):
        assert evaluator.evaluate("-x ** 2", {"x": 3}) == -9.0

    def test_allowed_functions(self, evaluator):
        context = {"a": 7.456, "b": -2}
        assert evaluator.evaluate("max(a, 10)", context) == 10.0
        assert evaluator.evaluate("min(a, 10)", context) == pytest.approx(7.456)
        assert evaluator.evaluate("abs(b)", context) == 2.0
        assert evaluator.evaluate("round(a, 1)", context) == pytest.approx(7.5)

    def test_result_is_float(self, evaluator):
        result = evaluator.evaluate("1 + 1", {})
        assert isinstance(result, float)


class TestRejections:
    def test_empty_formula(self, evaluator):
        with pytest.raises(CalculationError):
            evaluator.evaluate("   ", {})

    def test_syntax_error(self, evaluator):
        with pytest.raises(CalculationError, match="Invalid formula syntax"):
            evaluator.evaluate("1 +", {})

    def test_unknown_variable(self, evaluator):
        with pytest.raises(CalculationError, match="Unknown variable: velocity"):
            evaluator.evaluate("velocity * 2", {"progress": 10})

    def test_missing_value(self, evaluator):
        with pytest.raises(CalculationError, match="No value available"):
            evaluator.evaluate("budget_utilization", {"budget_utilization": None})

    def test_division_by_zero(self, evaluator):
        with pytest.raises(CalculationError, match="Division by zero"):
            evaluator.evaluate("completed_action_count / action_count", {"completed_action_count": 1, "action_count": 0})

    @pytest.mark.parametrize(
        "formula",
        [
            "__import__('os').system('true')",
            "progress.real",
            "[1, 2]",
            "progress if progress else 0",
            "lambda: 1",
            "'text'",
            "open('x')",
            "max(progress, key=abs)",
            "progress > 1",
        ],
    )
    def test_disallowed_syntax(self, evaluator, formula):
        with pytest.raises(CalculationError):
            evaluator.evaluate(formula, {"progress": 1})

    def test_huge_exponent_rejected(self, evaluator):
        with pytest.raises(CalculationError, match="Exponent too large"):
            evaluator.evaluate("10 ** 10 ** 10", {})

    @pytest.mark.parametrize(
        "formula",
        [
            "(((9 ** 100) ** 100) ** 100) ** 20 % 3",
            "(10 ** 100) ** 50",
            "0.001 ** -200",
        ],
    )
    def test_chained_powers_fail_fast(self, evaluator, formula):
        started = time.monotonic()
        with pytest.raises(CalculationError):
            evaluator.evaluate(formula, {})
        assert time.monotonic() - started < 1.0

    def test_large_but_representable_power(self, evaluator):
        assert evaluator.evaluate("(10 ** 10) ** 30", {}) == pytest.approx(1e300)
        assert evaluator.evaluate("0.001 ** 100", {}) == pytest.approx(1e-300)

    def test_integer_literals_evaluate_as_floats(self, evaluator):
        assert evaluator.evaluate("7 // 2", {}) == 3.0
        assert isinstance(evaluator.evaluate("2 ** 3", {}), float)

    def test_complex_result_rejected(self, evaluator):
        with pytest.raises(CalculationError):
            evaluator.evaluate("(-8) ** 0.5", {})


class TestVariables:
    def test_lists_referenced_names_without_functions(self, evaluator):
        names = evaluator.variables("max(progress, budget_utilization) / action_count")
        assert names == {"progress", "budget_utilization", "action_count"}
