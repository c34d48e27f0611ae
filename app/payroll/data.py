# app/payroll/data.py

from app.errors import ConfigurationError
from app.payroll.records import (
    AttendanceEntry, BaseComponent, CalculationType, ComponentCategory, ComponentType,
    PayComponent, ProrationRule, RoundingRule, SalaryAssignment, StructureComponent, to_decimal
)


class PayrollDataSource:
    """
    Supplies the records a payroll calculation consumes.

    Fetching happens before any calculation starts; the engine itself
    never touches storage.
    """

    def salary_assignments(self, employee_id):
        """Every candidate salary assignment for the employee."""
        raise NotImplementedError

    def attendance(self, employee_id, start_date, end_date):
        """Attendance entries dated within [start_date, end_date]."""
        raise NotImplementedError


def _enum(enum_cls, raw, what):
    try:
        return enum_cls(raw)
    except ValueError:
        raise ConfigurationError(f'Unknown {what} {raw!r}')


def _to_pay_component(row):
    return PayComponent(
        id=str(row.id),
        code=row.code,
        name=row.name,
        type=_enum(ComponentType, row.type, 'component type'),
        category=_enum(ComponentCategory, row.category, 'component category'),
        calculation_type=_enum(CalculationType, row.calculation_type, 'calculation type'),
        is_statutory=bool(row.is_statutory),
        is_taxable=bool(row.is_taxable),
        proration_rule=_enum(ProrationRule, row.proration_rule or 'DAILY', 'proration rule'),
        rounding_rule=_enum(RoundingRule, row.rounding_rule, 'rounding rule') if row.rounding_rule else None,
    )


def _to_structure_component(row):
    base = None
    if row.base_component:
        base = _enum(BaseComponent, row.base_component, 'base component')
    return StructureComponent(
        component=_to_pay_component(row.component),
        order=row.order or 0,
        value=to_decimal(row.value),
        percentage=to_decimal(row.percentage),
        base_component=base,
        min_value=to_decimal(row.min_value),
        max_value=to_decimal(row.max_value),
    )


def to_salary_assignment(row):
    """Converts an EmployeeSalaryAssignment row into the engine's record."""
    components = tuple(
        _to_structure_component(sc) for sc in row.structure.components
        if sc.component.is_active
    )
    return SalaryAssignment(
        employee_id=row.employee_id,
        structure_id=str(row.structure_id),
        ctc=to_decimal(row.ctc),
        effective_from=row.effective_from,
        effective_to=row.effective_to,
        components=components,
        overrides={str(o.component_id): to_decimal(o.value) for o in row.overrides},
    )


class DatabasePayrollSource(PayrollDataSource):
    """Reads assignments and attendance through the Flask-SQLAlchemy models."""

    def salary_assignments(self, employee_id):
        from app.models.payroll import EmployeeSalaryAssignment

        rows = EmployeeSalaryAssignment.query.filter_by(
            employee_id=employee_id, is_active=True
        ).all()
        return [to_salary_assignment(row) for row in rows]

    def attendance(self, employee_id, start_date, end_date):
        from app.models.payroll import AttendanceRecord

        rows = AttendanceRecord.query.filter(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.date >= start_date,
            AttendanceRecord.date <= end_date
        ).order_by(AttendanceRecord.date.asc()).all()
        return [
            AttendanceEntry(employee_id=r.employee_id, date=r.date, status=r.status, overtime=r.overtime)
            for r in rows
        ]
