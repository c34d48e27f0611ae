# tests/test_policy.py

from decimal import Decimal

import pytest

from app import create_app
from app.errors import ConfigurationError
from app.payroll.policy import DEFAULT_POLICY, PayrollPolicy, UnknownStatusPolicy, current_policy


def test_defaults():
    assert DEFAULT_POLICY.pf_rate == Decimal('0.12')
    assert DEFAULT_POLICY.pf_ceiling == Decimal('1800')
    assert DEFAULT_POLICY.esi_gross_threshold == Decimal('25000')
    assert DEFAULT_POLICY.weekend_days == (5, 6)
    assert DEFAULT_POLICY.unknown_status_policy == UnknownStatusPolicy.TREAT_AS_ABSENT


def test_from_config_reads_payroll_keys():
    policy = PayrollPolicy.from_config({
        'PAYROLL_POLICY_VERSION': 'KA-2025',
        'PAYROLL_PT_AMOUNT': '250',
        'PAYROLL_OVERTIME_MULTIPLIER': 2,
        'PAYROLL_WEEKEND_DAYS': '6',
        'PAYROLL_UNKNOWN_STATUS_POLICY': 'reject',
    })
    assert policy.version == 'KA-2025'
    assert policy.pt_amount == Decimal('250')
    assert policy.overtime_multiplier == Decimal('2')
    assert policy.weekend_days == (6,)
    assert policy.unknown_status_policy == UnknownStatusPolicy.REJECT
    assert policy.pf_rate == DEFAULT_POLICY.pf_rate


def test_empty_config_gives_defaults():
    assert PayrollPolicy.from_config({}) == DEFAULT_POLICY


@pytest.mark.parametrize('config', [
    {'PAYROLL_PF_RATE': 'twelve'},
    {'PAYROLL_PF_CEILING': '-1'},
    {'PAYROLL_ESI_RATE': 'NaN'},
    {'PAYROLL_WEEKEND_DAYS': 'sat,sun'},
    {'PAYROLL_WEEKEND_DAYS': '7'},
    {'PAYROLL_UNKNOWN_STATUS_POLICY': 'ignore'},
])
def test_bad_config_values(config):
    with pytest.raises(ConfigurationError):
        PayrollPolicy.from_config(config)


def test_current_policy_uses_app_config(app):
    assert current_policy().version == 'test'


def test_current_policy_outside_app_context():
    assert current_policy() is DEFAULT_POLICY


def test_app_refuses_bad_policy(monkeypatch):
    from config import TestingConfig
    monkeypatch.setattr(TestingConfig, 'PAYROLL_PF_RATE', 'abc')
    with pytest.raises(ConfigurationError):
        create_app('testing')
