"""HRMS backend package.

Organized by feature modules (users, employees, attendance, leaves, payroll)
with a thin Flask JSON controller layer over service/repository layers.
"""
