"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class WorkpulseError(Exception):
    """Base exception for workpulse."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(WorkpulseError):
    """Resource not found."""

    pass


class InvalidArgumentError(WorkpulseError):
    """Caller supplied input that violates a domain rule."""

    pass


class DuplicateError(InvalidArgumentError):
    """Duplicate resource detected."""

    pass


class CalculationError(WorkpulseError):
    """A KPI value could not be computed."""

    pass


class InfrastructureError(WorkpulseError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass
