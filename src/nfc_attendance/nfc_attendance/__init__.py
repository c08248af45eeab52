"""NFC Attendance package.

Feature modules (employees, tags, attendance, sync) each own a domain model,
a repository protocol with its MySQL implementation, a service and a thin
Flask controller.
"""
