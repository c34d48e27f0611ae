# app/payroll/policy.py

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from app.errors import ConfigurationError
from app.payroll.records import to_decimal


class UnknownStatusPolicy(str, Enum):
    TREAT_AS_ABSENT = 'TREAT_AS_ABSENT'
    REJECT = 'REJECT'


@dataclass(frozen=True)
class PayrollPolicy:
    """
    Statutory rates and payroll rules applied to a calculation.

    Results are tagged with ``version`` so a historical run can be
    reproduced with the policy that produced it.
    """
    version: str = 'default'

    # Provident Fund: 12% of basic, capped
    pf_rate: Decimal = Decimal('0.12')
    pf_ceiling: Decimal = Decimal('1800')

    # Employee State Insurance: only below the gross threshold
    esi_rate: Decimal = Decimal('0.0075')
    esi_gross_threshold: Decimal = Decimal('25000')

    # Professional Tax: flat monthly amount
    pt_amount: Decimal = Decimal('200')

    # Simplified TDS on annualised gross
    tds_rate: Decimal = Decimal('0.05')
    tds_annual_exemption: Decimal = Decimal('250000')

    standard_hours_per_day: Decimal = Decimal('8')
    overtime_multiplier: Decimal = Decimal('1.5')
    max_overtime_hours_per_day: Decimal = Decimal('12')

    # date.weekday() numbers excluded from working days
    weekend_days: tuple = (5, 6)
    unknown_status_policy: UnknownStatusPolicy = UnknownStatusPolicy.TREAT_AS_ABSENT

    @classmethod
    def from_config(cls, config):
        """Builds a policy from a Flask config (or any mapping of PAYROLL_* keys)."""
        defaults = cls()
        values = {}
        for name in ('pf_rate', 'pf_ceiling', 'esi_rate', 'esi_gross_threshold',
                     'pt_amount', 'tds_rate', 'tds_annual_exemption',
                     'standard_hours_per_day', 'overtime_multiplier',
                     'max_overtime_hours_per_day'):
            key = 'PAYROLL_' + name.upper()
            raw = config.get(key)
            if raw is None:
                continue
            value = to_decimal(raw)
            if value is None or not value.is_finite() or value < 0:
                raise ConfigurationError(f'{key} must be a non-negative number, got {raw!r}')
            values[name] = value

        if config.get('PAYROLL_POLICY_VERSION'):
            values['version'] = str(config['PAYROLL_POLICY_VERSION'])

        weekend = config.get('PAYROLL_WEEKEND_DAYS')
        if weekend is not None:
            if isinstance(weekend, str):
                weekend = [part for part in weekend.split(',') if part.strip()]
            try:
                values['weekend_days'] = tuple(sorted({int(day) for day in weekend}))
            except (TypeError, ValueError):
                raise ConfigurationError(f'PAYROLL_WEEKEND_DAYS is not a list of weekday numbers: {weekend!r}')
            if any(day < 0 or day > 6 for day in values['weekend_days']):
                raise ConfigurationError('PAYROLL_WEEKEND_DAYS values must be between 0 and 6')

        status_policy = config.get('PAYROLL_UNKNOWN_STATUS_POLICY')
        if status_policy:
            try:
                values['unknown_status_policy'] = UnknownStatusPolicy(str(status_policy).upper())
            except ValueError:
                raise ConfigurationError(f'Unknown PAYROLL_UNKNOWN_STATUS_POLICY: {status_policy!r}')

        return replace(defaults, **values)


DEFAULT_POLICY = PayrollPolicy()


def current_policy():
    """Policy of the active Flask app, or the defaults outside an app context."""
    from flask import current_app, has_app_context
    if has_app_context():
        return PayrollPolicy.from_config(current_app.config)
    return DEFAULT_POLICY
