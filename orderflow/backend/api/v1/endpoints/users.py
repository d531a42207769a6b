"""
User and Telegram group API endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from orderflow.backend.core.dependencies import AdminUser, CurrentUser, DbSession, RequestId
from orderflow.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from orderflow.backend.schemas.base import ApiResponse
from orderflow.backend.schemas.shop import TelegramGroupCreate, TelegramGroupResponse
from orderflow.backend.schemas.user import UserCreate, UserResponse, UserRole
from orderflow.backend.services.directory import DirectoryService

router = APIRouter()
groups_router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=201,
    summary="Create a user",
)
async def create_user(
    data: UserCreate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[UserResponse]:
    service = DirectoryService(db)
    user = await service.create_user(data)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.get(
    "",
    summary="List users (paginated)",
    description="Search matches telegram ID, username, first or last name.",
)
async def list_users(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    pagination: PaginationParams = Depends(get_pagination_params),
    role: UserRole | None = Query(default=None, description="Filter by role"),
) -> dict[str, Any]:
    service = DirectoryService(db)
    users, total = await service.list_users_paginated(
        limit=pagination.limit,
        offset=pagination.offset,
        search=pagination.search,
        role=role,
    )
    return create_paginated_response(
        items=users,
        item_schema=UserResponse,
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
        request_id=request_id,
    )


@groups_router.post(
    "",
    response_model=ApiResponse[TelegramGroupResponse],
    status_code=201,
    summary="Register a Telegram group",
)
async def create_group(
    data: TelegramGroupCreate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[TelegramGroupResponse]:
    service = DirectoryService(db)
    group = await service.create_group(data)
    return ApiResponse(data=TelegramGroupResponse.model_validate(group))
