# tests/test_calculator.py

import json
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from app.errors import ConfigurationError, ValidationError
from app.payroll.calculator import (
    calculate_employee_payroll, calculate_overtime_amount, count_working_days, days_in_period,
    period_bounds, working_days_in_period
)
from app.payroll.policy import PayrollPolicy
from app.payroll.records import ProrationRule, StructureComponent
from tests.factories import (
    ESI, HRA, PERIOD_END, PERIOD_START, TDS, InMemorySource, make_assignment, make_attendance
)

POLICY = PayrollPolicy(version='test')


def payroll(assignment=None, attendance=None, working_days=22, employee_id='E1'):
    source = InMemorySource(
        assignments={employee_id: [assignment or make_assignment(employee_id)]},
        attendance={employee_id: attendance if attendance is not None else make_attendance(employee_id)},
    )
    return calculate_employee_payroll(
        employee_id, '2025-01', PERIOD_START, PERIOD_END, working_days, source=source, policy=POLICY
    )


def test_full_attendance_net_salary():
    result = payroll()

    assert result.basic_salary == Decimal('27000.00')
    assert result.total_earnings == Decimal('54800.00')
    assert result.gross_salary == result.total_earnings
    assert result.statutory_deductions.pf == Decimal('1800.00')
    assert result.statutory_deductions.esi == Decimal('0.00')
    assert result.statutory_deductions.pt == Decimal('200.00')
    assert result.total_deductions == Decimal('2000.00')
    assert result.net_salary == Decimal('52800.00')
    assert result.lop_days == Decimal('0.00')
    assert result.lop_amount == Decimal('0.00')
    assert result.policy_version == 'test'


def test_partial_attendance_prorates_and_reports_lop():
    result = payroll(attendance=make_attendance(present=20))

    assert result.basic_salary == Decimal('27000.00')
    assert result.total_earnings == Decimal('52272.72')
    assert result.statutory_deductions.pf == Decimal('1800.00')
    assert result.present_days == Decimal('20.00')
    assert result.lop_days == Decimal('2.00')
    assert result.lop_amount == Decimal('2454.55')
    assert result.net_salary == Decimal('50272.72')


def test_overtime_amount():
    result = payroll(attendance=make_attendance(overtime=(2, 3)))
    assert result.overtime_hours == Decimal('5.00')
    assert result.overtime_amount == Decimal('1150.57')


def test_override_survives_partial_attendance():
    assignment = make_assignment(overrides={HRA.id: Decimal('5000')})
    result = payroll(assignment=assignment, attendance=make_attendance(present=18))
    hra = next(c for c in result.components if c.code == 'HRA')
    assert hra.calculated_value == Decimal('5000.00')
    assert hra.is_prorated is False


def test_esi_and_tds_from_gross():
    components = make_assignment().components + (StructureComponent(ESI, 7), StructureComponent(TDS, 8))
    result = payroll(assignment=make_assignment(components=components))
    assert result.statutory_deductions.esi == Decimal('0.00')
    assert result.statutory_deductions.tds == Decimal('1698.33')
    assert result.total_deductions == Decimal('3698.33')
    assert result.net_salary == Decimal('51101.67')


@pytest.mark.parametrize('ctc,present,working_days', [
    ('60000', 22, 22), ('60000', 20, 22), ('33333.33', 7, 21), ('18000', 0, 23), ('123456.78', 13, 19),
])
def test_earnings_minus_deductions_reconciles(ctc, present, working_days):
    components = make_assignment().components + (StructureComponent(ESI, 7), StructureComponent(TDS, 8))
    result = payroll(assignment=make_assignment(ctc=ctc, components=components),
                     attendance=make_attendance(present=present), working_days=working_days)
    earnings = sum(c.calculated_value for c in result.components if c.type == 'EARNING')
    deductions = sum(c.calculated_value for c in result.components if c.type == 'DEDUCTION')

    assert result.total_earnings == earnings
    assert result.total_deductions == deductions
    assert result.total_earnings - result.total_deductions == result.net_salary
    assert result.statutory_deductions.pf <= Decimal('1800')
    if result.gross_salary > Decimal('25000'):
        assert result.statutory_deductions.esi == 0


def test_same_input_gives_identical_output():
    first = json.dumps(payroll(attendance=make_attendance(present=19, overtime=(1.5,))).to_dict())
    second = json.dumps(payroll(attendance=make_attendance(present=19, overtime=(1.5,))).to_dict())
    assert first == second


def test_missing_assignment_raises():
    source = InMemorySource()
    with pytest.raises(ConfigurationError):
        calculate_employee_payroll('E9', '2025-01', PERIOD_START, PERIOD_END, 22, source=source, policy=POLICY)


def test_invalid_working_days_raises():
    with pytest.raises(ValidationError):
        payroll(working_days=0)


def test_malformed_attendance_raises():
    class BrokenSource(InMemorySource):
        def attendance(self, employee_id, start_date, end_date):
            return [{'overtime': 3}]

    source = BrokenSource(assignments={'E1': [make_assignment()]})
    with pytest.raises(ValidationError):
        calculate_employee_payroll('E1', '2025-01', PERIOD_START, PERIOD_END, 22, source=source, policy=POLICY)


def test_overtime_with_zero_basic_degrades_to_zero():
    warnings = []
    amount = calculate_overtime_amount(Decimal('0'), 22, Decimal('4'), POLICY, warnings)
    assert amount == Decimal('0')
    assert warnings[0].stage == 'overtime'

    zero_hours = PayrollPolicy(standard_hours_per_day=Decimal('0'))
    assert calculate_overtime_amount(Decimal('27000'), 22, Decimal('4'), zero_hours, warnings) == Decimal('0')


def test_result_is_json_serialisable():
    data = json.loads(json.dumps(payroll().to_dict()))
    assert data['netSalary'] == '52800.00'
    assert data['statutoryDeductions'] == {'pf': '1800.00', 'esi': '0.00', 'tds': '0.00', 'pt': '200.00'}
    assert [c['code'] for c in data['components']] == ['BASIC', 'HRA', 'TRANSPORT', 'SPECIAL', 'PF', 'PT']


@pytest.mark.parametrize('period,expected', [('2025-01', 23), ('2024-02', 21), ('2025-06', 21)])
def test_working_days_in_period(period, expected):
    assert working_days_in_period(period, POLICY) == expected


def test_working_days_respect_policy_weekend():
    six_day_week = PayrollPolicy(weekend_days=(6,))
    assert working_days_in_period('2025-01', six_day_week) == 27
    assert count_working_days(date(2025, 1, 4), date(2025, 1, 5)) == 0


@pytest.mark.parametrize('period', ['2025-13', '2025-1', '25-01', '', None, '2025/01'])
def test_bad_period(period):
    with pytest.raises(ValidationError):
        period_bounds(period)


@pytest.mark.parametrize('period, days', [('2025-01', 31), ('2024-02', 29), ('2025-06', 30), ('Q1', None)])
def test_days_in_period(period, days):
    assert days_in_period(period) == days


def test_monthly_proration_uses_days_of_the_period():
    monthly_hra = replace(HRA, proration_rule=ProrationRule.MONTHLY)
    components = tuple(
        replace(sc, component=monthly_hra) if sc.component.code == 'HRA' else sc
        for sc in make_assignment().components
    )
    result = payroll(make_assignment(components=components), attendance=make_attendance(present=20))
    hra = next(c for c in result.components if c.code == 'HRA')
    assert hra.calculated_value == Decimal('6967.74')
    assert result.total_earnings - result.total_deductions == result.net_salary
