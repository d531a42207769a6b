"""
Setting Schemas.

A setting's value has to agree with its flag type; the check lives in
`check_setting_value` so the service can re-run it on partial updates.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from orderflow.backend.schemas.base import CamelModel

FlagType = Literal["bool", "text", "select"]


def check_setting_value(flag_type: str, value: Any, options: list[str] | None) -> None:
    """Raise ValueError when value does not fit flag_type."""
    if flag_type == "bool":
        if not isinstance(value, bool):
            raise ValueError("value must be a boolean for bool flags")
    elif flag_type == "text":
        if not isinstance(value, str):
            raise ValueError("value must be a string for text flags")
    elif flag_type == "select":
        if not options:
            raise ValueError("select flags need a non-empty options list")
        if value not in options:
            raise ValueError(f"value must be one of {options}")


class SettingCreate(CamelModel):
    """Schema for creating a setting."""

    key: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9_.]+$",
        examples=["order_flow.telegram_enabled"],
    )
    flag_type: FlagType = Field(default="bool", alias="type")
    value: Any = False
    options: list[str] | None = None
    description: str | None = Field(default=None, max_length=1000)
    is_active: bool = True

    @model_validator(mode="after")
    def value_matches_type(self) -> "SettingCreate":
        check_setting_value(self.flag_type, self.value, self.options)
        return self


class SettingUpdate(CamelModel):
    """Partial update; the merged result is validated by the service."""

    flag_type: FlagType | None = Field(default=None, alias="type")
    value: Any = None
    options: list[str] | None = None
    description: str | None = Field(default=None, max_length=1000)
    is_active: bool | None = None

    @field_validator("flag_type", "is_active")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class SettingResponse(CamelModel):
    id: str = Field(alias="_id")
    key: str
    flag_type: str = Field(alias="type")
    value: Any = None
    options: list[str] | None = None
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
