"""
Enum definitions for the application.
"""

from enum import Enum


class BreachSeverity(str, Enum):
    """Severity of a KPI threshold breach. CRITICAL takes precedence."""

    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class BuiltinKpiCode(str, Enum):
    """KPI codes computed by a built-in calculator."""

    COMPLETION_RATE = "COMPLETION_RATE"
    BUDGET_UTILIZATION = "BUDGET_UTILIZATION"
