"""
User Schemas.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from orderflow.backend.schemas.base import CamelModel

UserRole = Literal["client", "courier", "admin", "shop_owner", "operator"]
UserStatus = Literal["active", "inactive", "suspended"]


class UserCreate(CamelModel):
    telegram_id: str | None = Field(default=None, max_length=64)
    username: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    role: UserRole = "client"
    status: UserStatus = "active"


class UserResponse(CamelModel):
    id: str = Field(alias="_id")
    telegram_id: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str
    status: str
    created_at: datetime
