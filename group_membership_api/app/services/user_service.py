"""
Business logic for users.

``UserService`` registers and authenticates users and acts as the user
directory for other services: it resolves a username to a user row and
projects a user into the profile record shown to group owners.
"""

import logging
import sqlite3
from typing import Any, Dict, Optional

from ..core.errors import ParameterError
from ..core.security import hash_password, verify_password
from ..core.validators import require_non_empty_string
from ..dao import USERS, EntityStore
from ..schemas.user import UserCreate, UserProfile


class UserService:
    """Service for user registration, lookup and profiles."""

    def __init__(self, conn: sqlite3.Connection):
        self.users = EntityStore(conn, USERS)

    async def create_user(self, data: UserCreate) -> UserProfile:
        """Register a new user and return its profile.

        The password is stored as a PBKDF2 hash.  A username or e-mail
        already in use is reported as ``ParameterError``.
        """
        logger = logging.getLogger(__name__)
        username = require_non_empty_string(data.username, "username")
        require_non_empty_string(data.password, "password")
        require_non_empty_string(data.email, "email", required=False)

        if self.users.search({"username": username}):
            raise ParameterError("usernameInUse", "username")
        if data.email is not None and self.users.search({"email": data.email}):
            raise ParameterError("emailInUse", "email")

        user = {
            "username": username,
            "name": data.name,
            "email": data.email,
            "password": hash_password(data.password),
        }
        self.users.save(user)
        logger.info("Registered user %s (id %s)", username, user["user_id"])
        return self._profile(user)

    async def authenticate(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        """Return the user row if the credentials match, otherwise ``None``."""
        user = await self.resolve_user(username)
        if user is None or not verify_password(password, user["password"]):
            return None
        return user

    async def resolve_user(self, username: Optional[str]) -> Optional[Dict[str, Any]]:
        """Look a user up by username; ``None`` if there is no such user."""
        if not username:
            return None
        matches = self.users.search({"username": username}, limit=1)
        return matches[0] if matches else None

    async def get_profile(self, user_id: int) -> Dict[str, Any]:
        """Return the profile record of ``user_id``."""
        user = self.users.get_by_pk(user_id)
        if user is None:
            raise ParameterError("parameterNotFound", "User")
        return self._profile(user).model_dump()

    @staticmethod
    def _profile(user: Dict[str, Any]) -> UserProfile:
        return UserProfile(
            user_id=user["user_id"],
            username=user["username"],
            name=user["name"],
        )
