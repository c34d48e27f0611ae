# app/payroll/bulk.py

import logging
from dataclasses import dataclass, field
from typing import Optional

from app.errors import PayrollError
from app.payroll.calculator import calculate_employee_payroll, working_days_in_period
from app.payroll.data import DatabasePayrollSource
from app.payroll.policy import current_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeFailure:
    employee_id: str
    error_type: str
    message: str

    def to_dict(self):
        return {'employeeId': self.employee_id, 'errorType': self.error_type, 'message': self.message}


@dataclass
class BulkPayrollOutcome:
    period: str
    working_days: int
    results: list = field(default_factory=list)
    failures: list = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed_ids(self):
        return [f.employee_id for f in self.failures]

    def to_dict(self):
        return {
            'period': self.period,
            'workingDays': self.working_days,
            'results': [r.to_dict() for r in self.results],
            'failures': [f.to_dict() for f in self.failures],
            'error': self.error,
        }


def run_bulk_payroll(employee_ids, period, start_date, end_date, source=None, policy=None, evaluators=None):
    """
    Calculates payroll for every employee, isolating failures.

    One employee's failure never stops the batch: it is logged and
    reported in ``failures`` while the others are still calculated.
    Results keep the order of employee_ids. A period that is not YYYY-MM
    fails every employee and is reported in ``error``.
    """
    policy = policy or current_policy()
    source = source or DatabasePayrollSource()
    try:
        working_days = working_days_in_period(period, policy)
    except PayrollError as e:
        logger.error('Bulk payroll %s not run: %s', period, e.message)
        return BulkPayrollOutcome(
            period=period, working_days=0, error=e.message,
            failures=[EmployeeFailure(employee_id, type(e).__name__, e.message) for employee_id in employee_ids],
        )
    outcome = BulkPayrollOutcome(period=period, working_days=working_days)

    for employee_id in employee_ids:
        try:
            result = calculate_employee_payroll(
                employee_id, period, start_date, end_date, working_days,
                source=source, policy=policy, evaluators=evaluators
            )
        except PayrollError as e:
            logger.error('Payroll for employee %s (%s) failed: %s', employee_id, period, e.message)
            outcome.failures.append(EmployeeFailure(employee_id, type(e).__name__, e.message))
            continue
        except Exception as e:
            logger.exception('Unexpected error calculating payroll for employee %s (%s)', employee_id, period)
            outcome.failures.append(EmployeeFailure(employee_id, type(e).__name__, str(e)))
            continue
        outcome.results.append(result)

    logger.info(
        'Bulk payroll %s: %d calculated, %d failed',
        period, len(outcome.results), len(outcome.failures)
    )
    return outcome


def calculate_bulk_payroll(employee_ids, period, start_date, end_date, source=None, policy=None, evaluators=None):
    """Successful results only; use run_bulk_payroll to see which employees failed."""
    return run_bulk_payroll(
        employee_ids, period, start_date, end_date,
        source=source, policy=policy, evaluators=evaluators
    ).results
