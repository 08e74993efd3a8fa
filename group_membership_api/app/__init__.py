"""
Application package initializer.

Each domain (users, groups) exposes a router defined in
``api/v1/endpoints``, a service in ``services`` and Pydantic schemas in
``schemas``.  All SQL goes through the generic ``dao.EntityStore``.
"""

from .main import app  # noqa: F401
