# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the admin endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# -- Requests --------------------------------------------------------------


class CreateUserRequest(BaseModel):
    username: str
    password: str
    role: str = "user"  # "admin" or "user"


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(alias="newPassword")


class ChangeRoleRequest(BaseModel):
    role: str  # "admin" or "user"


class ChangeUsernameRequest(BaseModel):
    username: str


# -- Responses -------------------------------------------------------------


class UserRow(BaseModel):
    id: int
    username: str
    role: str
    is_active: bool
    is_approved: bool
    created_at: datetime

    model_config = {"from_attributes": True}
