"""HR Attendance package.

This package is organized by feature modules (employees, attendance, reports,
leaves) with a thin Flask controller layer and service/repository layers.
"""
