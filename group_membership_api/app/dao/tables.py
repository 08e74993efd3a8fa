"""
Table definitions.

Each table mirrors one ``CREATE TABLE`` of ``core.db.MIGRATIONS``; the
column order here is the order rows are read back in.
"""

from .base import Column, Table


USERS = Table(
    "users",
    (
        Column("user_id", int, primary_key=True, auto_increment=True),
        Column("username", str),
        Column("name", str),
        Column("email", str),
        Column("password", str),
    ),
)

GROUPS = Table(
    "groups",
    (
        Column("group_id", int, primary_key=True, auto_increment=True),
        Column("owner_id", int),
        Column("name", str),
        Column("description", str),
    ),
)

# Membership is the (group_id, user_id) pair itself
GROUPS_USERS = Table(
    "groups_users",
    (
        Column("group_id", int, primary_key=True),
        Column("user_id", int, primary_key=True),
    ),
)

TAGS = Table(
    "tags",
    (
        Column("tag_id", int, primary_key=True, auto_increment=True),
        Column("name", str),
    ),
)
