"""
User endpoints for API v1.

Provide registration and login.  The token returned by ``/login`` is
sent back as ``Authorization: Bearer <token>`` on the group endpoints.
"""

import sqlite3

from fastapi import APIRouter, Depends, status

from group_membership_api.app.core.db import get_db
from group_membership_api.app.core.errors import UnauthorizedError
from group_membership_api.app.core.security import create_access_token
from group_membership_api.app.schemas.user import UserCreate, UserLogin, UserProfile
from group_membership_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def register_user(user: UserCreate, conn: sqlite3.Connection = Depends(get_db)) -> UserProfile:
    """Register a new user and return its profile."""
    return await UserService(conn).create_user(user)


@router.post("/login")
async def login_user(credentials: UserLogin, conn: sqlite3.Connection = Depends(get_db)) -> dict:
    """Check the credentials and return a bearer token."""
    db_user = await UserService(conn).authenticate(credentials.username, credentials.password)
    if not db_user:
        raise UnauthorizedError("Invalid credentials")
    token = create_access_token({"sub": db_user["username"]})
    return {"access_token": token, "token_type": "bearer"}
