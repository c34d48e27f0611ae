# app/attendance/calculator.py

import logging
from collections.abc import Mapping
from decimal import Decimal

from app.errors import CalculationWarning, ValidationError
from app.payroll.policy import DEFAULT_POLICY, UnknownStatusPolicy
from app.payroll.records import (
    AttendanceEntry, AttendanceMetrics, AttendanceStatus, ZERO, quantize, to_decimal
)

logger = logging.getLogger(__name__)

MIN_WORKING_DAYS = 1
MAX_WORKING_DAYS = 31

# Statuses paid as a full day of presence
PAID_PRESENCE = {
    AttendanceStatus.PRESENT.value,
    AttendanceStatus.ON_LEAVE.value,
    AttendanceStatus.WORK_FROM_HOME.value,
}


def validate_working_days(working_days):
    if isinstance(working_days, bool) or not isinstance(working_days, int):
        raise ValidationError(f'workingDays must be an integer, got {working_days!r}')
    if not MIN_WORKING_DAYS <= working_days <= MAX_WORKING_DAYS:
        raise ValidationError(
            f'workingDays must be between {MIN_WORKING_DAYS} and {MAX_WORKING_DAYS}, got {working_days}'
        )
    return working_days


def _unpack(record, index):
    """Returns (status, overtime) for an AttendanceEntry or a mapping."""
    if isinstance(record, AttendanceEntry):
        status, overtime = record.status, record.overtime
    elif isinstance(record, Mapping) and 'status' in record:
        status, overtime = record['status'], record.get('overtime')
    else:
        raise ValidationError(f'Attendance record #{index} is malformed: {record!r}')
    if isinstance(status, AttendanceStatus):
        status = status.value
    if not isinstance(status, str):
        raise ValidationError(f'Attendance record #{index} has a non-string status: {status!r}')
    return status.strip().upper(), overtime


def _valid_overtime(raw, max_hours):
    hours = to_decimal(raw)
    if hours is None or not hours.is_finite():
        return None
    if hours <= 0 or hours > max_hours:
        return None
    return hours


def aggregate_attendance(records, working_days, policy=DEFAULT_POLICY):
    """
    Reduces one employee's attendance records for a period to payroll metrics.

    Args:
        records (list): AttendanceEntry objects or mappings with 'status'
            and an optional 'overtime'.
        working_days (int): Working days in the period, 1..31.
        policy (PayrollPolicy): Supplies the overtime cap and what to do with
            unknown statuses.

    Returns:
        AttendanceMetrics with every figure rounded to 2 decimals.
    """
    validate_working_days(working_days)
    if not isinstance(records, (list, tuple)):
        raise ValidationError(f'Attendance records must be a list, got {type(records).__name__}')

    present = ZERO
    absent = ZERO
    half = ZERO
    overtime = ZERO
    warnings = []

    for index, record in enumerate(records):
        status, raw_overtime = _unpack(record, index)

        if status in PAID_PRESENCE:
            present += 1
        elif status == AttendanceStatus.HALF_DAY.value:
            present += Decimal('0.5')
            half += 1
        elif status == AttendanceStatus.ABSENT.value:
            absent += 1
        elif policy.unknown_status_policy == UnknownStatusPolicy.REJECT:
            raise ValidationError(f'Attendance record #{index} has unknown status {status!r}')
        else:
            absent += 1
            message = f'Unknown attendance status {status!r} in record #{index} counted as absent'
            logger.warning(message)
            warnings.append(CalculationWarning(stage='attendance', message=message))

        hours = _valid_overtime(raw_overtime, policy.max_overtime_hours_per_day)
        if hours is not None:
            overtime += hours

    days = Decimal(working_days)
    present = min(present, days)
    lop = max(ZERO, days - present)

    metrics = AttendanceMetrics(
        present_days=quantize(present),
        absent_days=quantize(absent),
        half_days=quantize(half),
        lop_days=quantize(lop),
        overtime_hours=quantize(overtime),
        warnings=warnings,
    )

    for name in ('present_days', 'absent_days', 'half_days', 'lop_days', 'overtime_hours'):
        if getattr(metrics, name) < 0:
            raise ValidationError(f'Attendance metric {name} is negative: {getattr(metrics, name)}')

    return metrics


def attendance_ratio(metrics, working_days):
    """Fraction of the period paid as present, within [0, 1]."""
    validate_working_days(working_days)
    return min(Decimal(1), metrics.present_days / Decimal(working_days))
