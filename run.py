# run.py

import os
from app import create_app, db
from app.models.payroll import (
    PayComponent, SalaryStructure, SalaryStructureComponent,
    EmployeeSalaryAssignment, EmployeeComponentOverride, AttendanceRecord
)


app = create_app(os.environ.get('FLASK_ENV', 'default'))

@app.shell_context_processor
def make_shell_context():
    """Adds database instance and models to the Flask shell."""
    return dict(
        db=db, PayComponent=PayComponent, SalaryStructure=SalaryStructure,
        SalaryStructureComponent=SalaryStructureComponent,
        EmployeeSalaryAssignment=EmployeeSalaryAssignment,
        EmployeeComponentOverride=EmployeeComponentOverride,
        AttendanceRecord=AttendanceRecord
    )
