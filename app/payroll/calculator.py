# app/payroll/calculator.py

import calendar
import logging
import re
from datetime import date, timedelta
from decimal import Decimal

from app.attendance.calculator import aggregate_attendance, validate_working_days
from app.errors import CalculationWarning, ValidationError
from app.payroll.components import calculate_components, find_basic
from app.payroll.data import DatabasePayrollSource
from app.payroll.policy import current_policy
from app.payroll.records import ComponentType, PayrollCalculationResult, ZERO, quantize
from app.payroll.statutory import apply_statutory_deductions
from app.payroll.structure import resolve_salary_structure

logger = logging.getLogger(__name__)

PERIOD_PATTERN = re.compile(r'^(\d{4})-(0[1-9]|1[0-2])$')


# =======================================================
# HELPER: WORKING DAYS (5-day week, weekends from policy)
# =======================================================
def count_working_days(start_date, end_date, weekend_days=(5, 6)):
    total_days = 0
    current = start_date
    while current <= end_date:
        if current.weekday() not in weekend_days:
            total_days += 1
        current += timedelta(days=1)
    return total_days


def period_bounds(period):
    """First and last day of a YYYY-MM period."""
    match = PERIOD_PATTERN.match(period or '')
    if not match:
        raise ValidationError(f'Period must be in YYYY-MM format, got {period!r}')
    year, month = int(match.group(1)), int(match.group(2))
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def days_in_period(period):
    """Calendar days in a YYYY-MM period, or None when period is not in that form."""
    if not PERIOD_PATTERN.match(period or ''):
        return None
    start, end = period_bounds(period)
    return (end - start).days + 1


def working_days_in_period(period, policy=None):
    policy = policy or current_policy()
    start, end = period_bounds(period)
    return count_working_days(start, end, policy.weekend_days)


# --- LOP & OVERTIME ---
def calculate_lop_amount(basic_salary, working_days, lop_days):
    if lop_days <= 0 or working_days <= 0:
        return ZERO
    return quantize(basic_salary / Decimal(working_days) * lop_days)


def calculate_overtime_amount(basic_salary, working_days, overtime_hours, policy, warnings):
    if overtime_hours <= 0:
        return ZERO
    standard_hours = Decimal(working_days) * policy.standard_hours_per_day
    hourly_rate = basic_salary / standard_hours if standard_hours > 0 else None
    if hourly_rate is None or not hourly_rate.is_finite() or hourly_rate <= 0:
        message = f'Hourly rate is not positive (basic {basic_salary}, {working_days} days); overtime set to 0'
        logger.warning(message)
        warnings.append(CalculationWarning(stage='overtime', message=message))
        return ZERO
    return quantize(hourly_rate * policy.overtime_multiplier * overtime_hours)


# --- RESULT ASSEMBLY ---
def assemble_result(employee_id, period, working_days, metrics, components, statutory, policy, warnings):
    """Totals the valued components and builds the final result."""
    basic_result = find_basic(components)
    basic_salary = basic_result.calculated_value if basic_result else ZERO

    total_earnings = sum((c.calculated_value for c in components if c.type == ComponentType.EARNING), ZERO)
    total_deductions = sum((c.calculated_value for c in components if c.type == ComponentType.DEDUCTION), ZERO)
    net_salary = total_earnings - total_deductions

    return PayrollCalculationResult(
        employee_id=employee_id,
        period=period,
        basic_salary=basic_salary,
        gross_salary=total_earnings,
        total_earnings=total_earnings,
        total_deductions=total_deductions,
        net_salary=net_salary,
        working_days=working_days,
        present_days=metrics.present_days,
        absent_days=metrics.absent_days,
        lop_days=metrics.lop_days,
        lop_amount=calculate_lop_amount(basic_salary, working_days, metrics.lop_days),
        overtime_hours=metrics.overtime_hours,
        overtime_amount=calculate_overtime_amount(
            basic_salary, working_days, metrics.overtime_hours, policy, warnings
        ),
        components=components,
        statutory_deductions=statutory,
        policy_version=policy.version,
        warnings=warnings,
    )


def calculate_payroll(employee_id, period, assignment, attendance, working_days, policy, evaluators=None):
    """
    Runs the pure part of the pipeline on already-fetched records.

    Args:
        assignment (SalaryAssignment): The resolved active assignment.
        attendance (list): The period's attendance entries.
        working_days (int): Working days in the period.

    Returns:
        PayrollCalculationResult
    """
    metrics = aggregate_attendance(attendance, working_days, policy)
    warnings = list(metrics.warnings)

    components = calculate_components(
        assignment, metrics, working_days, evaluators, warnings, days_in_month=days_in_period(period)
    )
    basic_result = find_basic(components)
    basic_salary = basic_result.calculated_value if basic_result else ZERO
    statutory = apply_statutory_deductions(components, basic_salary, policy, warnings)

    return assemble_result(employee_id, period, working_days, metrics, components, statutory, policy, warnings)


# --- MAIN PAYROLL CALCULATOR ---
def calculate_employee_payroll(employee_id, period, start_date, end_date, working_days,
                               source=None, policy=None, evaluators=None):
    """
    Calculates one employee's payroll for a period.

    Raises:
        ConfigurationError: no salary assignment is active on start_date.
        ValidationError: attendance or working days are malformed.
    """
    validate_working_days(working_days)
    policy = policy or current_policy()
    source = source or DatabasePayrollSource()

    assignment = resolve_salary_structure(employee_id, start_date, source)
    attendance = source.attendance(employee_id, start_date, end_date)

    result = calculate_payroll(employee_id, period, assignment, attendance, working_days, policy, evaluators)
    logger.debug(
        'Payroll for %s (%s): gross %s, deductions %s, net %s',
        employee_id, period, result.gross_salary, result.total_deductions, result.net_salary
    )
    return result
