"""School Office package.

Organized by feature modules (students, attendance, sequences, ...) with a
thin Flask controller layer over service and repository layers.
"""
