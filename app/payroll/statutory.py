# app/payroll/statutory.py

import logging

from app.errors import CalculationWarning
from app.payroll.policy import DEFAULT_POLICY
from app.payroll.records import ComponentType, StatutoryBreakdown, ZERO, quantize

logger = logging.getLogger(__name__)

PF_CODE = 'PF'
ESI_CODE = 'ESI'
PT_CODE = 'PT'
TDS_CODE = 'TDS'

MONTHS_PER_YEAR = 12


# --- PROVIDENT FUND ---
def calculate_pf(basic_salary, policy=DEFAULT_POLICY):
    """Employee PF share: a rate of Basic, never above the ceiling."""
    if basic_salary <= 0:
        return ZERO
    return quantize(min(basic_salary * policy.pf_rate, policy.pf_ceiling))


# --- EMPLOYEE STATE INSURANCE ---
def calculate_esi(gross_salary, policy=DEFAULT_POLICY):
    if gross_salary <= 0 or gross_salary > policy.esi_gross_threshold:
        return ZERO
    return quantize(gross_salary * policy.esi_rate)


# --- PROFESSIONAL TAX ---
def calculate_pt(policy=DEFAULT_POLICY):
    return quantize(policy.pt_amount)


# --- TDS (flat rate over the exemption; not a slab calculation) ---
def calculate_tds(gross_salary, policy=DEFAULT_POLICY):
    if gross_salary <= 0:
        return ZERO
    annual_gross = gross_salary * MONTHS_PER_YEAR
    if annual_gross <= policy.tds_annual_exemption:
        return ZERO
    tds = (annual_gross - policy.tds_annual_exemption) * policy.tds_rate / MONTHS_PER_YEAR
    return quantize(max(ZERO, tds))


def gross_of(results):
    return sum((r.calculated_value for r in results if r.type == ComponentType.EARNING), ZERO)


def _warn(warnings, message):
    logger.warning(message)
    warnings.append(CalculationWarning(stage='statutory', message=message))


def apply_statutory_deductions(results, basic_salary, policy=DEFAULT_POLICY, warnings=None):
    """
    Sets the PF, ESI, PT and TDS components of a valued structure.

    Only components present in the structure are touched, and an employee
    override keeps its value. Runs after both component passes so that
    Basic and gross are final.

    Returns:
        StatutoryBreakdown read back from the components.
    """
    if warnings is None:
        warnings = []
    by_code = {r.code: r for r in results if r.type == ComponentType.DEDUCTION}
    gross_salary = gross_of(results)

    if PF_CODE in by_code and basic_salary <= 0:
        _warn(warnings, f'Basic salary is {basic_salary}; PF set to 0')
    if (ESI_CODE in by_code or TDS_CODE in by_code) and gross_salary <= 0:
        _warn(warnings, f'Gross salary is {gross_salary}; ESI and TDS set to 0')

    computed = {
        PF_CODE: (basic_salary, lambda: calculate_pf(basic_salary, policy)),
        ESI_CODE: (gross_salary, lambda: calculate_esi(gross_salary, policy)),
        PT_CODE: (policy.pt_amount, lambda: calculate_pt(policy)),
        TDS_CODE: (gross_salary, lambda: calculate_tds(gross_salary, policy)),
    }
    for code, (base, calculate) in computed.items():
        result = by_code.get(code)
        if result is None or result.is_override:
            continue
        result.base_value = quantize(base)
        result.calculated_value = calculate()
        result.is_prorated = False
        result.calculation_details = {
            'statutory_rule': code, 'base_amount': result.base_value, 'policy_version': policy.version,
        }

    def value(code):
        result = by_code.get(code)
        return result.calculated_value if result else ZERO

    return StatutoryBreakdown(pf=value(PF_CODE), esi=value(ESI_CODE), tds=value(TDS_CODE), pt=value(PT_CODE))
