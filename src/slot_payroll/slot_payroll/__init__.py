"""Slot Payroll package.

Feature modules (slots, attendance, approvals, payroll, ...) each expose a
model, a repository interface, a MySQL repository and a service; Flask
controllers stay a thin JSON layer over the services.
"""
