# app/payroll/components.py

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from app.attendance.calculator import attendance_ratio
from app.errors import CalculationWarning, ConfigurationError
from app.payroll.records import (
    AttendanceMetrics, BaseComponent, CalculationType, ComponentCalculationResult,
    ComponentCategory, ComponentType, ProrationRule, ZERO, quantize, to_decimal
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')


@dataclass(frozen=True)
class EvaluationContext:
    """What a pluggable evaluator may look at when valuing a component."""
    employee_id: str
    ctc: Decimal
    attendance_ratio: Decimal
    working_days: int
    metrics: AttendanceMetrics
    days_in_month: Optional[int] = None


def zero_evaluator(structure_component, context):
    return ZERO


# FORMULA and ATTENDANCE_BASED have no built-in valuation; callers register
# their own evaluator per calculation type.
DEFAULT_EVALUATORS = {
    CalculationType.FORMULA: zero_evaluator,
    CalculationType.ATTENDANCE_BASED: zero_evaluator,
}


def clamp(value, min_value=None, max_value=None):
    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value
    return value


def percentage_of(base_amount, structure_component, details=None):
    """
    Applies the component's percentage to base_amount, then its min/max.

    When a details dict is given, the rate, the base and any bound that
    was hit are recorded in it.
    """
    percentage = structure_component.percentage or ZERO
    raw = base_amount * percentage / HUNDRED
    value = clamp(raw, structure_component.min_value, structure_component.max_value)
    if details is not None:
        details['applied_rate'] = percentage
        details['base_component'] = structure_component.base_component or BaseComponent.CTC
        details['base_amount'] = quantize(base_amount)
        if value > raw:
            details['clamped'] = 'MIN'
        elif value < raw:
            details['clamped'] = 'MAX'
    return value


def depends_on_basic(structure_component):
    return (structure_component.component.calculation_type == CalculationType.PERCENTAGE
            and structure_component.base_component == BaseComponent.BASIC)


def should_prorate(component, ratio):
    """Earnings other than Basic follow attendance unless their rule says NONE; deductions never do."""
    return (component.type == ComponentType.EARNING
            and component.category != ComponentCategory.BASIC
            and component.proration_rule != ProrationRule.NONE
            and ratio < 1)


def check_structure(assignment):
    for sc in assignment.components:
        if sc.component.category == ComponentCategory.BASIC and depends_on_basic(sc):
            raise ConfigurationError(
                f'Component {sc.component.code} is the Basic component but is defined as a percentage of Basic',
                details={'structure_id': assignment.structure_id, 'component': sc.component.code}
            )


def find_basic(results):
    """The first result in the BASIC category, which every percentage of Basic is taken from."""
    for result in results:
        if result.category == ComponentCategory.BASIC:
            return result
    return None


def _warn(warnings, message):
    logger.warning(message)
    warnings.append(CalculationWarning(stage='components', message=message))


def _result(sc, base_value, calculated_value, is_prorated, is_override=False, details=None):
    component = sc.component
    return ComponentCalculationResult(
        component_id=component.id,
        code=component.code,
        name=component.name,
        type=component.type,
        category=component.category,
        calculation_type=component.calculation_type,
        base_value=quantize(base_value),
        calculated_value=quantize(calculated_value),
        is_prorated=is_prorated,
        is_statutory=component.is_statutory,
        is_taxable=component.is_taxable,
        is_override=is_override,
        calculation_details=details or {},
    )


def _override_for(assignment, sc):
    raw = assignment.overrides.get(sc.component.id)
    if raw is None:
        return None
    value = to_decimal(raw)
    if value is None or not value.is_finite():
        raise ConfigurationError(
            f'Override for {sc.component.code} is not a number: {raw!r}',
            details={'employee_id': assignment.employee_id, 'component': sc.component.code}
        )
    return value


def _evaluate(sc, context, evaluators, warnings):
    evaluator = evaluators.get(sc.component.calculation_type, zero_evaluator)
    value = to_decimal(evaluator(sc, context))
    if value is None or not value.is_finite():
        _warn(warnings, f'Evaluator for {sc.component.code} returned a non-numeric value; using 0')
        return ZERO
    return value


def _base_value(sc, ctc, context, evaluators, warnings, details):
    calc_type = sc.component.calculation_type
    if calc_type == CalculationType.FIXED:
        return sc.value or ZERO
    if calc_type == CalculationType.PERCENTAGE:
        if depends_on_basic(sc):
            return ZERO  # valued in the second pass
        return percentage_of(ctc, sc, details)
    return _evaluate(sc, context, evaluators, warnings)


def _prorate(component, amount, context, warnings):
    if component.proration_rule == ProrationRule.MONTHLY:
        if context.days_in_month:
            return amount * context.metrics.present_days / Decimal(context.days_in_month)
        _warn(warnings, f'No calendar month known for {component.code}; prorating by working days')
    return amount * context.attendance_ratio


def _valued(sc, base_value, context, warnings, details):
    """Prorates and rounds a component whose structure value is known."""
    component = sc.component
    value = base_value
    prorated = should_prorate(component, context.attendance_ratio)
    if prorated:
        value = _prorate(component, base_value, context, warnings)
        details['proration_rule'] = component.proration_rule
    details['proration_applied'] = prorated

    if component.rounding_rule is not None:
        rounded = component.rounding_rule.apply(value)
        details['rounding_applied'] = rounded != value
        value = rounded
    return _result(sc, base_value, value, prorated, details=details)


def calculate_components(assignment, metrics, working_days, evaluators=None, warnings=None, days_in_month=None):
    """
    Values every component of the assignment's structure for one period.

    Pass 1 values overrides, fixed amounts, CTC percentages and pluggable
    types in ascending order. Pass 2 values the percentages of Basic once
    the Basic component is final. Earnings other than Basic are prorated
    when the attendance ratio is below 1: by present_days / working_days
    (DAILY), by present_days / days_in_month (MONTHLY), or not at all
    (NONE). A component's rounding rule is applied after proration.

    Each result carries ``calculation_details`` recording the rate and
    base used, any min/max bound hit, and whether proration and rounding
    changed the value.

    Returns:
        list of ComponentCalculationResult in structure order.
    """
    check_structure(assignment)
    if warnings is None:
        warnings = []
    registry = dict(DEFAULT_EVALUATORS)
    if evaluators:
        registry.update(evaluators)

    ratio = attendance_ratio(metrics, working_days)
    ctc = assignment.ctc or ZERO
    context = EvaluationContext(
        employee_id=assignment.employee_id,
        ctc=ctc,
        attendance_ratio=ratio,
        working_days=working_days,
        metrics=metrics,
        days_in_month=days_in_month,
    )
    ordered = assignment.ordered_components()

    # --- PASS 1 ---
    results = []
    for sc in ordered:
        override = _override_for(assignment, sc)
        if override is not None:
            results.append(_result(sc, override, override, False, is_override=True,
                                   details={'proration_applied': False}))
            continue

        details = {}
        base_value = _base_value(sc, ctc, context, registry, warnings, details)
        results.append(_valued(sc, base_value, context, warnings, details))

    # --- PASS 2 ---
    basic_result = find_basic(results)
    basic = basic_result.calculated_value if basic_result else ZERO
    if basic_result is None and any(depends_on_basic(sc) for sc in ordered):
        _warn(warnings, f'Structure {assignment.structure_id} has percentage-of-Basic components but no Basic component')
    elif basic_result is not None and basic_result.type != ComponentType.EARNING:
        _warn(warnings, f'Basic component {basic_result.code} is a {basic_result.type.value}, not an earning')

    for index, sc in enumerate(ordered):
        if not depends_on_basic(sc) or results[index].is_override:
            continue
        details = {}
        base_value = percentage_of(basic, sc, details)
        results[index] = _valued(sc, base_value, context, warnings, details)

    return results
