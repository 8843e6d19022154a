# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime

from pydantic import BaseModel


# -- Requests --------------------------------------------------------------


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str
    password: str


# -- Responses -------------------------------------------------------------


class UserInfoResponse(BaseModel):
    id: int
    username: str
    role: str
    is_active: bool
    is_approved: bool
    created_at: datetime

    model_config = {"from_attributes": True}
