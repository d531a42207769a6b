"""
Order Flow Schemas.

Pydantic schemas for order flows, their steps and forwarding destinations.
Step documents are stored in the database in the same camelCase shape
they have on the wire.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator, model_validator

from orderflow.backend.core.config import get_app_config
from orderflow.backend.schemas.base import CamelModel

DestinationType = Literal["telegram_user", "telegram_group", "telegram_channel"]


class ForwardingDestination(CamelModel):
    """Where a notification is sent when an order reaches a step."""

    type: DestinationType = Field(description="Destination kind")
    identifier: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Telegram ID, username, or a {{ placeholder }}",
        examples=["{{shop.orders_chat_id}}"],
    )
    name: str | None = Field(default=None, max_length=255)
    is_active: bool = True


class OrderFlowStep(CamelModel):
    """One status of a flow."""

    status: str = Field(..., max_length=50, examples=["created"])
    name: str = Field(..., max_length=255, examples=["Order Created"])
    description: str | None = Field(default=None, max_length=1000)
    forwarding_destinations: list[ForwardingDestination] = Field(default_factory=list)
    authorized_roles: list[str] = Field(default_factory=list, description="Flow roles from order_flow.yaml")
    next_statuses: list[str] = Field(default_factory=list)
    is_active: bool = True
    order: int = Field(default=0, ge=0)

    @field_validator("status", "name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("authorized_roles")
    @classmethod
    def known_roles(cls, roles: list[str]) -> list[str]:
        unknown = sorted(set(roles) - set(get_app_config().order_flow.roles))
        if unknown:
            raise ValueError(f"unknown flow roles: {', '.join(unknown)}")
        return roles


def _check_unique_statuses(steps: list[OrderFlowStep] | None) -> None:
    if not steps:
        return
    seen: set[str] = set()
    for step in steps:
        if step.status in seen:
            raise ValueError(f"Duplicate step status: {step.status}")
        seen.add(step.status)


class OrderFlowCreate(CamelModel):
    """Schema for creating a flow."""

    shop_id: str | None = Field(default=None, description="Owning shop; omit for the default flow")
    name: str = Field(..., min_length=1, max_length=255, examples=["Default Order Flow"])
    description: str | None = Field(default=None, max_length=1000)
    steps: list[OrderFlowStep] = Field(..., min_length=1)
    is_active: bool = True
    is_default: bool = False

    @model_validator(mode="after")
    def unique_statuses(self) -> "OrderFlowCreate":
        _check_unique_statuses(self.steps)
        return self


class OrderFlowUpdate(CamelModel):
    """Schema for updating a flow. Provided fields replace stored ones."""

    shop_id: str | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    steps: list[OrderFlowStep] | None = Field(default=None, min_length=1)
    is_active: bool | None = None
    is_default: bool | None = None

    # Omitting a field keeps the stored value; an explicit null is an error.
    @field_validator("name", "steps", "is_active", "is_default")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    @model_validator(mode="after")
    def unique_statuses(self) -> "OrderFlowUpdate":
        _check_unique_statuses(self.steps)
        return self


class OrderFlowResponse(CamelModel):
    """Schema for a flow in API responses."""

    id: str = Field(alias="_id")
    shop_id: str | None = None
    name: str
    description: str | None = None
    steps: list[OrderFlowStep]
    is_active: bool
    is_default: bool
    created_at: datetime
    updated_at: datetime


class ShopFlowCustomize(CamelModel):
    """
    Body of "Customize Flow".

    Without steps the shop's current flow is copied as is.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    steps: list[OrderFlowStep] | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def unique_statuses(self) -> "ShopFlowCustomize":
        _check_unique_statuses(self.steps)
        return self


class FlowVocabulary(CamelModel):
    """Roles and statuses from order_flow.yaml that flow editors build steps from."""

    roles: list[str]
    common_statuses: list[str]
    status_buttons: dict[str, str]


class CanChangeStatusRequest(CamelModel):
    current_status: str = Field(..., min_length=1)
    new_status: str = Field(..., min_length=1)
    user_role: str = Field(..., min_length=1, examples=["Operator"])
    shop_id: str | None = None


class CanChangeStatusResponse(CamelModel):
    can_change: bool
