"""
Response envelope and the camelCase base for domain schemas.

Every endpoint answers with

    {"success": ..., "data": ..., "error": ..., "metadata": {"timestamp", "request_id"}}

and list endpoints add a `pagination` block.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from orderflow.backend.core.utils import utc_now

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; requests may use either."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ResponseMetadata(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
    request_id: str | None = None


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class PaginationInfo(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool = False


class _Envelope(BaseModel):
    success: bool = True
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class ApiResponse(_Envelope, Generic[DataT]):
    data: DataT | None = None
    error: ErrorDetail | None = None

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(_Envelope):
    success: bool = False
    data: None = None
    error: ErrorDetail


class PaginatedResponse(_Envelope, Generic[DataT]):
    data: list[DataT]
    error: None = None
    pagination: PaginationInfo
