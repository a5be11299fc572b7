"""
Pydantic models for user data.

``UserCreate`` is the request contract for registering a user,
``UserCreated`` the short confirmation returned by the create call,
and ``UserRead`` the full record returned when listing users.
"""

from typing import List

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Schema for registering a user."""

    username: str = Field(..., min_length=1, examples=["fcc_test"])

    model_config = {
        "str_strip_whitespace": True,
    }


class UserCreated(BaseModel):
    username: str
    id: str


class UserRead(BaseModel):
    """Schema for reading a user, including its exercise identifiers."""

    id: str
    username: str
    exercises: List[str] = Field(default_factory=list)

    model_config = {
        "from_attributes": True,
    }
