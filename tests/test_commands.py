# tests/test_commands.py

import json
from datetime import date
from decimal import Decimal

from app import db
from app.models.payroll import EmployeeSalaryAssignment
from tests.factories import seed_attendance, seed_structure


def test_calculate_prints_bulk_outcome(app):
    structure, _ = seed_structure()
    db.session.add(EmployeeSalaryAssignment(employee_id='E1', structure_id=structure.id, ctc=Decimal('60000'),
                                            effective_from=date(2024, 4, 1)))
    seed_attendance('E1', 23)
    db.session.commit()

    result = app.test_cli_runner().invoke(args=['payroll', 'calculate', '2025-01', 'E1'])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data['workingDays'] == 23
    assert data['failures'] == []
    assert data['results'][0]['netSalary'] == '52800.00'


def test_calculate_reports_failed_employees(app):
    result = app.test_cli_runner().invoke(args=['payroll', 'calculate', '2025-01', 'NOPE'])
    assert result.exit_code == 0
    assert 'NOPE' in result.output
    assert 'ConfigurationError' in result.output


def test_calculate_rejects_bad_period(app):
    result = app.test_cli_runner().invoke(args=['payroll', 'calculate', '2025-13', 'E1'])
    assert result.exit_code != 0
    assert 'YYYY-MM' in result.output


def test_calculate_rejects_inverted_window(app):
    result = app.test_cli_runner().invoke(
        args=['payroll', 'calculate', '2025-01', 'E1', '--start', '2025-01-20', '--end', '2025-01-10']
    )
    assert result.exit_code != 0
