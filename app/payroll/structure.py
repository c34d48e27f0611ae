# app/payroll/structure.py

import logging

from app.errors import ConfigurationError

logger = logging.getLogger(__name__)


def is_effective_on(assignment, on_date):
    if assignment.effective_from > on_date:
        return False
    return assignment.effective_to is None or assignment.effective_to >= on_date


def select_active_assignment(assignments, on_date):
    """
    Picks the assignment whose effective window contains on_date.

    Overlapping windows are never merged: the most recent effective_from wins.
    Returns None when nothing qualifies.
    """
    candidates = [a for a in assignments if is_effective_on(a, on_date)]
    if not candidates:
        return None
    if len(candidates) > 1:
        logger.info(
            'Employee %s has %d overlapping salary assignments on %s; using the latest',
            candidates[0].employee_id, len(candidates), on_date
        )
    return max(candidates, key=lambda a: a.effective_from)


def resolve_salary_structure(employee_id, on_date, source):
    assignment = select_active_assignment(source.salary_assignments(employee_id), on_date)
    if assignment is None:
        raise ConfigurationError(
            f'No active salary structure found for employee {employee_id} on {on_date}',
            details={'employee_id': employee_id, 'date': on_date.isoformat()}
        )
    return assignment
