"""
Pydantic models for group data.

Request bodies keep every field optional so that presence and
emptiness checks happen in the service, which reports them with the
offending parameter name.  Response models describe the
``{"status": "ok", ...}`` envelopes returned by the group endpoints.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .user import UserProfile


class GroupCreate(BaseModel):
    """Schema for creating a group."""

    name: Optional[str] = Field(None, example="Contest Prep")
    description: Optional[str] = Field(None, example="Weekly practice for the regional")


class GroupMemberAdd(BaseModel):
    """Schema for adding a member; the user is identified by username."""

    username: Optional[str] = Field(None, example="omegaup")


class GroupRecord(BaseModel):
    group_id: int
    owner_id: int
    name: str
    description: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class StatusResponse(BaseModel):
    status: str = "ok"


class GroupListResponse(StatusResponse):
    groups: List[GroupRecord] = []


class GroupDetailsResponse(StatusResponse):
    group: GroupRecord
    users: List[UserProfile] = []
