"""
Group endpoints for API v1.

Every route requires an authenticated user.  Ownership checks and
parameter validation live in ``GroupService``; errors raised there are
turned into HTTP responses by the application's ``ApiError`` handler.
"""

import sqlite3
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from group_membership_api.app.core.db import get_db
from group_membership_api.app.core.security import get_current_user
from group_membership_api.app.schemas.group import (
    GroupCreate,
    GroupDetailsResponse,
    GroupListResponse,
    GroupMemberAdd,
    StatusResponse,
)
from group_membership_api.app.services.group_service import GroupService


router = APIRouter()


def get_group_service(conn: sqlite3.Connection = Depends(get_db)) -> GroupService:
    return GroupService(conn)


@router.post("/", response_model=StatusResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    body: GroupCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Create a group owned by the current user.

    ``name`` is required; ``description`` is optional.
    """
    return await service.create_group(current_user["user_id"], body.name, body.description)


@router.get("/", response_model=GroupListResponse)
async def list_groups(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """List the groups owned by the current user."""
    return await service.list_groups(current_user["user_id"])


@router.get("/{group_id}", response_model=GroupDetailsResponse)
async def group_details(
    group_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Return a group and the profiles of its members.  Owner only."""
    return await service.get_group_details(current_user["user_id"], group_id)


@router.post("/{group_id}/members", response_model=StatusResponse)
async def add_member(
    group_id: str,
    body: GroupMemberAdd,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Add the user named in the body to the group.  Owner only."""
    return await service.add_member(current_user["user_id"], group_id, body.username)


@router.delete("/{group_id}/members/{username}", response_model=StatusResponse)
async def remove_member(
    group_id: str,
    username: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Remove a user from the group.  Owner only."""
    return await service.remove_member(current_user["user_id"], group_id, username)
