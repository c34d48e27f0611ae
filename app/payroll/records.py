# app/payroll/records.py

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, InvalidOperation
from enum import Enum
from typing import Dict, List, Optional

from app.errors import ConfigurationError

CENTS = Decimal('0.01')
UNITS = Decimal('1')
ZERO = Decimal('0.00')


def to_decimal(value, default=None):
    """Converts numbers and numeric strings to Decimal, returning default on anything else."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def quantize(value):
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _amount(record, name):
    """Coerces a numeric field of a frozen record to Decimal in place."""
    raw = getattr(record, name)
    if raw is None:
        return
    value = to_decimal(raw)
    if value is None or not value.is_finite():
        raise ConfigurationError(
            f'{type(record).__name__}.{name} is not a number: {raw!r}',
            details={'field': name}
        )
    object.__setattr__(record, name, value)


def _plain(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


def _camel(name):
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


# --- ENUMS ---

class ComponentType(str, Enum):
    EARNING = 'EARNING'
    DEDUCTION = 'DEDUCTION'


class ComponentCategory(str, Enum):
    BASIC = 'BASIC'
    ALLOWANCE = 'ALLOWANCE'
    BONUS = 'BONUS'
    OVERTIME = 'OVERTIME'
    STATUTORY_DEDUCTION = 'STATUTORY_DEDUCTION'
    OTHER_DEDUCTION = 'OTHER_DEDUCTION'


class CalculationType(str, Enum):
    FIXED = 'FIXED'
    PERCENTAGE = 'PERCENTAGE'
    FORMULA = 'FORMULA'
    ATTENDANCE_BASED = 'ATTENDANCE_BASED'


class BaseComponent(str, Enum):
    CTC = 'CTC'
    BASIC = 'BASIC'


class ProrationRule(str, Enum):
    """How an earning follows attendance: by working days, by calendar days, or not at all."""
    DAILY = 'DAILY'
    MONTHLY = 'MONTHLY'
    NONE = 'NONE'


class RoundingRule(str, Enum):
    ROUND_UP = 'ROUND_UP'
    ROUND_DOWN = 'ROUND_DOWN'
    ROUND_NEAREST = 'ROUND_NEAREST'

    def apply(self, value):
        """Rounds to whole currency units."""
        rounding = {
            RoundingRule.ROUND_UP: ROUND_CEILING,
            RoundingRule.ROUND_DOWN: ROUND_FLOOR,
            RoundingRule.ROUND_NEAREST: ROUND_HALF_UP,
        }[self]
        return value.quantize(UNITS, rounding=rounding)


class AttendanceStatus(str, Enum):
    PRESENT = 'PRESENT'
    ABSENT = 'ABSENT'
    HALF_DAY = 'HALF_DAY'
    ON_LEAVE = 'ON_LEAVE'
    WORK_FROM_HOME = 'WORK_FROM_HOME'


# --- INPUT RECORDS (supplied by the data source) ---

@dataclass(frozen=True)
class PayComponent:
    id: str
    code: str
    name: str
    type: ComponentType
    category: ComponentCategory
    calculation_type: CalculationType
    is_statutory: bool = False
    is_taxable: bool = True
    proration_rule: ProrationRule = ProrationRule.DAILY
    rounding_rule: Optional[RoundingRule] = None


@dataclass(frozen=True)
class StructureComponent:
    """A pay component bound into a salary structure."""
    component: PayComponent
    order: int
    value: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    base_component: Optional[BaseComponent] = None
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None

    def __post_init__(self):
        for name in ('value', 'percentage', 'min_value', 'max_value'):
            _amount(self, name)


@dataclass(frozen=True)
class SalaryAssignment:
    employee_id: str
    structure_id: str
    ctc: Decimal
    effective_from: date
    effective_to: Optional[date] = None
    components: tuple = ()
    overrides: Dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self):
        _amount(self, 'ctc')

    def ordered_components(self):
        return sorted(self.components, key=lambda sc: sc.order)


@dataclass(frozen=True)
class AttendanceEntry:
    employee_id: str
    date: date
    status: str
    overtime: Optional[object] = None


# --- DERIVED RECORDS ---

@dataclass
class AttendanceMetrics:
    present_days: Decimal
    absent_days: Decimal
    half_days: Decimal
    lop_days: Decimal
    overtime_hours: Decimal
    warnings: list = field(default_factory=list)


@dataclass
class ComponentCalculationResult:
    component_id: str
    code: str
    name: str
    type: ComponentType
    category: ComponentCategory
    calculation_type: CalculationType
    base_value: Decimal
    calculated_value: Decimal
    is_prorated: bool
    is_statutory: bool
    is_taxable: bool
    is_override: bool = False
    calculation_details: dict = field(default_factory=dict)

    def to_dict(self):
        return {
            'componentId': self.component_id,
            'code': self.code,
            'name': self.name,
            'type': _plain(self.type),
            'category': _plain(self.category),
            'calculationType': _plain(self.calculation_type),
            'baseValue': _plain(self.base_value),
            'calculatedValue': _plain(self.calculated_value),
            'isProrated': self.is_prorated,
            'isStatutory': self.is_statutory,
            'isTaxable': self.is_taxable,
            'isOverride': self.is_override,
            'calculationDetails': {_camel(k): _plain(v) for k, v in self.calculation_details.items()},
        }


@dataclass
class StatutoryBreakdown:
    pf: Decimal = ZERO
    esi: Decimal = ZERO
    tds: Decimal = ZERO
    pt: Decimal = ZERO

    def to_dict(self):
        return {k: _plain(getattr(self, k)) for k in ('pf', 'esi', 'tds', 'pt')}


@dataclass
class PayrollCalculationResult:
    employee_id: str
    period: str
    basic_salary: Decimal
    gross_salary: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    working_days: int
    present_days: Decimal
    absent_days: Decimal
    lop_days: Decimal
    lop_amount: Decimal
    overtime_hours: Decimal
    overtime_amount: Decimal
    components: List[ComponentCalculationResult]
    statutory_deductions: StatutoryBreakdown
    policy_version: str = ''
    warnings: list = field(default_factory=list)

    def to_dict(self):
        return {
            'employeeId': self.employee_id,
            'period': self.period,
            'basicSalary': _plain(self.basic_salary),
            'grossSalary': _plain(self.gross_salary),
            'totalEarnings': _plain(self.total_earnings),
            'totalDeductions': _plain(self.total_deductions),
            'netSalary': _plain(self.net_salary),
            'workingDays': self.working_days,
            'presentDays': _plain(self.present_days),
            'absentDays': _plain(self.absent_days),
            'lopDays': _plain(self.lop_days),
            'lopAmount': _plain(self.lop_amount),
            'overtimeHours': _plain(self.overtime_hours),
            'overtimeAmount': _plain(self.overtime_amount),
            'components': [c.to_dict() for c in self.components],
            'statutoryDeductions': self.statutory_deductions.to_dict(),
            'policyVersion': self.policy_version,
            'warnings': [w.to_dict() for w in self.warnings],
        }
