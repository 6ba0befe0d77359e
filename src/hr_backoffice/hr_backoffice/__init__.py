"""HR Back-Office package.

This package is organized by feature modules (employees, departments, projects, ...)
with a thin Flask controller layer and service/repository layers. Every service
operation is gated by the role/permission model in ``auth``.
"""
