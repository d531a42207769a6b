"""
Shop and Telegram group schemas.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from orderflow.backend.schemas.base import CamelModel


class ShopCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    owner_id: str = Field(..., min_length=1)
    orders_chat_id: str | None = Field(default=None, max_length=64)


class ShopResponse(CamelModel):
    id: str = Field(alias="_id")
    name: str
    owner_id: str
    orders_chat_id: str | None = None
    status: str
    created_at: datetime


class TelegramGroupCreate(CamelModel):
    chat_id: str = Field(..., min_length=1, max_length=64)
    title: str | None = Field(default=None, max_length=255)
    type: Literal["group", "supergroup"] = "group"
    shop_id: str | None = None


class TelegramGroupResponse(CamelModel):
    id: str = Field(alias="_id")
    chat_id: str
    title: str | None = None
    type: str
    shop_id: str | None = None
