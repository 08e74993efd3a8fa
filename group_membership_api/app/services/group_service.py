"""
Service layer for groups and group membership.

A group belongs to the user who created it.  Only the owner may add or
remove members or see who is in the group; membership is nothing more
than a row in ``groups_users``.  Every operation receives the id of the
already authenticated user.
"""

import logging
import sqlite3
from typing import Any, Dict, Optional

from ..core.errors import ForbiddenError, ParameterError, database_operation
from ..core.validators import require_non_empty_string, require_number
from ..dao import GROUPS, GROUPS_USERS, Entity, EntityStore
from ..schemas.group import GroupRecord
from .user_service import UserService


logger = logging.getLogger(__name__)


def is_group_owner(user_id: int, group: Entity) -> bool:
    return group["owner_id"] == user_id


class GroupService:
    """Group lifecycle and membership under owner authorization.

    Parameters
    ----------
    conn : sqlite3.Connection
        Connection of the current request.
    users : Optional[UserService]
        Directory used to resolve usernames and build member profiles.
        Defaults to a ``UserService`` on the same connection.
    """

    def __init__(self, conn: sqlite3.Connection, users: Optional[UserService] = None):
        self.groups = EntityStore(conn, GROUPS)
        self.members = EntityStore(conn, GROUPS_USERS)
        self.users = users or UserService(conn)

    async def create_group(
        self, current_user_id: int, name: Any, description: Any = None
    ) -> Dict[str, Any]:
        """Create a group owned by the current user."""
        require_non_empty_string(name, "name")
        require_non_empty_string(description, "description", required=False)

        group = {"owner_id": current_user_id, "name": name, "description": description}
        with database_operation("creating group"):
            self.groups.save(group)
        logger.info("User %s created group %s '%s'", current_user_id, group["group_id"], name)
        return {"status": "ok"}

    async def _validate_group(self, current_user_id: int, group_id: Any) -> Entity:
        """Return the group if it exists and the current user owns it."""
        group_id = require_number(group_id, "group_id")
        with database_operation("loading group"):
            group = self.groups.get_by_pk(group_id)
        if group is None:
            raise ParameterError("parameterNotFound", "Group")
        if not is_group_owner(current_user_id, group):
            logger.warning("User %s is not the owner of group %s", current_user_id, group_id)
            raise ForbiddenError()
        return group

    async def _resolve_target_user(self, username: Any) -> Entity:
        require_non_empty_string(username, "username")
        with database_operation("resolving user"):
            user = await self.users.resolve_user(username)
        if user is None:
            raise ParameterError("parameterNotFound", "User")
        return user

    async def add_member(self, current_user_id: int, group_id: Any, username: Any) -> Dict[str, Any]:
        """Add a user to a group.

        Adding a user who is already a member succeeds without changing
        anything.
        """
        group = await self._validate_group(current_user_id, group_id)
        user = await self._resolve_target_user(username)

        membership = {"group_id": group["group_id"], "user_id": user["user_id"]}
        with database_operation("adding group member"):
            affected = self.members.save(membership)
        if affected:
            logger.info("Added user %s to group %s", user["user_id"], group["group_id"])
        else:
            logger.info("User %s already in group %s", user["user_id"], group["group_id"])
        return {"status": "ok"}

    async def remove_member(self, current_user_id: int, group_id: Any, username: Any) -> Dict[str, Any]:
        """Remove a user from a group.

        Raises ``ParameterError`` for ``User`` if the user is not a
        member of the group.
        """
        group = await self._validate_group(current_user_id, group_id)
        user = await self._resolve_target_user(username)

        key = {"group_id": group["group_id"], "user_id": user["user_id"]}
        with database_operation("removing group member"):
            if not self.members.search(key):
                raise ParameterError("parameterNotFound", "User")
            self.members.delete(key)
        logger.info("Removed user %s from group %s", user["user_id"], group["group_id"])
        return {"status": "ok"}

    async def list_groups(self, current_user_id: int) -> Dict[str, Any]:
        """List the groups owned by the current user."""
        with database_operation("listing groups"):
            groups = self.groups.search({"owner_id": current_user_id}, order_by="group_id")
        return {
            "status": "ok",
            "groups": [GroupRecord(**group).model_dump() for group in groups],
        }

    async def get_group_details(self, current_user_id: int, group_id: Any) -> Dict[str, Any]:
        """Return a group together with the profile of each member."""
        group = await self._validate_group(current_user_id, group_id)

        users = []
        with database_operation("loading group members"):
            memberships = self.members.search({"group_id": group["group_id"]}, order_by="user_id")
            for membership in memberships:
                users.append(await self.users.get_profile(membership["user_id"]))
        return {
            "status": "ok",
            "group": GroupRecord(**group).model_dump(),
            "users": users,
        }
