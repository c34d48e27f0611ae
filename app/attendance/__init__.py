# app/attendance/__init__.py
# Attendance aggregation for payroll periods.
