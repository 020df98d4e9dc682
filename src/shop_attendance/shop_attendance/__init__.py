"""Shop attendance package.

This package is organized by feature modules (attendance, approvals, security, ...)
with a thin Flask controller layer and service/repository layers underneath.
The attendance toggle, its admission policies and the remote review queue are
the core; payroll and notifications consume what the core records.
"""
