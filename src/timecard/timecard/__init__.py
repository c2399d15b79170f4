"""Timecard package.

Punch reconciliation and time aggregation for a multi-tenant
time-and-attendance portal. Organized by feature modules (punches, jobs,
leave, reports, ...) with a thin Flask controller layer over service and
repository layers.
"""
