"""
Pydantic models for user data.

Defines schemas for registering users, logging in and the public
profile shown to group owners.  Passwords are never returned.
"""

from typing import Optional

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Schema for registering a user."""

    username: str = Field(..., example="omegaup")
    password: str = Field(..., example="strongpassword")
    name: Optional[str] = Field(None, example="Ana López")
    email: Optional[str] = Field(None, example="ana@example.com")


class UserLogin(BaseModel):
    username: str = Field(..., example="omegaup")
    password: str = Field(..., example="strongpassword")


class UserProfile(BaseModel):
    """Profile record of a user, as listed in group details."""

    user_id: int
    username: str
    name: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }
