# app/payroll/commands.py

import json

import click
from flask.cli import AppGroup

from app.errors import PayrollError
from app.payroll.bulk import run_bulk_payroll
from app.payroll.calculator import period_bounds

payroll_cli = AppGroup('payroll', help='Payroll calculation commands.')


@payroll_cli.command('calculate')
@click.argument('period')
@click.argument('employee_ids', nargs=-1, required=True)
@click.option('--start', 'start_date', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Attendance window start (defaults to the first day of PERIOD).')
@click.option('--end', 'end_date', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Attendance window end (defaults to the last day of PERIOD).')
def calculate(period, employee_ids, start_date, end_date):
    """Calculates PERIOD (YYYY-MM) payroll for EMPLOYEE_IDS and prints JSON."""
    try:
        first_day, last_day = period_bounds(period)
    except PayrollError as e:
        raise click.BadParameter(e.message, param_hint='PERIOD')

    start = start_date.date() if start_date else first_day
    end = end_date.date() if end_date else last_day
    if end < start:
        raise click.BadParameter('--end must be on or after --start')

    outcome = run_bulk_payroll(list(employee_ids), period, start, end)
    click.echo(json.dumps(outcome.to_dict(), indent=2))
    if outcome.failures:
        click.echo(f'{len(outcome.failures)} employee(s) failed: {", ".join(outcome.failed_ids)}', err=True)
