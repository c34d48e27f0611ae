# app/models/payroll.py

from app import db
from datetime import datetime


class PayComponent(db.Model):
    __tablename__ = 'pay_component'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), index=True, unique=True, nullable=False)
    name = db.Column(db.String(64), nullable=False)
    type = db.Column(db.String(20), nullable=False)
    category = db.Column(db.String(30), nullable=False)
    calculation_type = db.Column(db.String(20), nullable=False, default='FIXED')
    is_statutory = db.Column(db.Boolean, nullable=False, default=False)
    is_taxable = db.Column(db.Boolean, nullable=False, default=True)
    proration_rule = db.Column(db.String(10), nullable=False, default='DAILY')
    rounding_rule = db.Column(db.String(15))
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def __repr__(self):
        return f'<PayComponent {self.code}>'


class SalaryStructure(db.Model):
    __tablename__ = 'salary_structure'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    code = db.Column(db.String(20), index=True, unique=True, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    components = db.relationship(
        'SalaryStructureComponent', back_populates='structure',
        order_by='SalaryStructureComponent.order', lazy='select'
    )

    def __repr__(self):
        return f'<SalaryStructure {self.code}>'


class SalaryStructureComponent(db.Model):
    __tablename__ = 'salary_structure_component'
    id = db.Column(db.Integer, primary_key=True)
    structure_id = db.Column(db.Integer, db.ForeignKey('salary_structure.id'), nullable=False)
    component_id = db.Column(db.Integer, db.ForeignKey('pay_component.id'), nullable=False)
    order = db.Column(db.Integer, nullable=False, default=0)
    value = db.Column(db.Numeric(12, 2))
    percentage = db.Column(db.Numeric(7, 4))
    base_component = db.Column(db.String(10))
    min_value = db.Column(db.Numeric(12, 2))
    max_value = db.Column(db.Numeric(12, 2))

    structure = db.relationship('SalaryStructure', back_populates='components')
    component = db.relationship('PayComponent')

    __table_args__ = (db.UniqueConstraint('structure_id', 'component_id', name='_structure_component_uc'),)

    def __repr__(self):
        return f'<StructureComponent {self.component_id} in {self.structure_id}>'


class EmployeeSalaryAssignment(db.Model):
    __tablename__ = 'employee_salary_assignment'
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(36), index=True, nullable=False)
    structure_id = db.Column(db.Integer, db.ForeignKey('salary_structure.id'), nullable=False)
    ctc = db.Column(db.Numeric(12, 2), nullable=False)
    effective_from = db.Column(db.Date, nullable=False)
    effective_to = db.Column(db.Date, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_on = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    structure = db.relationship('SalaryStructure')
    overrides = db.relationship('EmployeeComponentOverride', back_populates='assignment', lazy='select')

    def __repr__(self):
        return f'<SalaryAssignment {self.employee_id} from {self.effective_from}>'


class EmployeeComponentOverride(db.Model):
    __tablename__ = 'employee_component_override'
    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey('employee_salary_assignment.id'), nullable=False)
    component_id = db.Column(db.Integer, db.ForeignKey('pay_component.id'), nullable=False)
    value = db.Column(db.Numeric(12, 2), nullable=False)

    assignment = db.relationship('EmployeeSalaryAssignment', back_populates='overrides')

    __table_args__ = (db.UniqueConstraint('assignment_id', 'component_id', name='_assignment_component_uc'),)


class AttendanceRecord(db.Model):
    __tablename__ = 'attendance_record'
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(36), index=True, nullable=False)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False)
    overtime = db.Column(db.Numeric(5, 2), nullable=True)

    __table_args__ = (db.UniqueConstraint('employee_id', 'date', name='_employee_date_uc'),)

    def __repr__(self):
        return f'<Attendance {self.status} on {self.date} for {self.employee_id}>'
