"""
Data access layer.

``EntityStore`` is the single generic data access object; the tables it
can be bound to are declared in ``tables``.
"""

from .base import Column, Entity, EntityStore, Table  # noqa: F401
from .tables import GROUPS, GROUPS_USERS, TAGS, USERS  # noqa: F401
