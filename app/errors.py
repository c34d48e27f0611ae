# app/errors.py

from dataclasses import dataclass


class PayrollError(Exception):
    """Base class for payroll calculation failures."""
    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(PayrollError):
    """Salary setup for an employee cannot be used (missing or inconsistent)."""


class ValidationError(PayrollError):
    """Numeric input to the engine is malformed or out of range."""


@dataclass(frozen=True)
class CalculationWarning:
    """Soft problem that was degraded to a safe value instead of raised."""
    stage: str
    message: str

    def to_dict(self):
        return {'stage': self.stage, 'message': self.message}
