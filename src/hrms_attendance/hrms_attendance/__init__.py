"""HRMS attendance engine.

Organized by feature modules (attendance, finalization, shifts, work_calendar,
requests, ...) with a thin Flask controller layer over service/repository layers.
"""
