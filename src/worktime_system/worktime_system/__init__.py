"""Worktime System package.

Organized by feature modules (worktime, status, merge, consolidation, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
