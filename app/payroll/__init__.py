# app/payroll/__init__.py
# Payroll calculation engine. Entry points live in app.payroll.calculator
# (single employee) and app.payroll.bulk (batches).
