"""
Settings API Endpoints.

Feature-flag settings managed from the admin dashboard.
"""

from typing import Any

from fastapi import APIRouter, Depends

from orderflow.backend.core.dependencies import AdminUser, CurrentUser, DbSession, RequestId
from orderflow.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from orderflow.backend.schemas.base import ApiResponse
from orderflow.backend.schemas.setting import SettingCreate, SettingResponse, SettingUpdate
from orderflow.backend.services.setting import SettingService

router = APIRouter()


@router.get(
    "",
    summary="List settings (paginated)",
    description="Settings ordered by key; search matches key and description.",
)
async def list_settings(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    pagination: PaginationParams = Depends(get_pagination_params),
) -> dict[str, Any]:
    service = SettingService(db)
    settings, total = await service.list_settings_paginated(
        limit=pagination.limit,
        offset=pagination.offset,
        search=pagination.search,
    )
    return create_paginated_response(
        items=settings,
        item_schema=SettingResponse,
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
        request_id=request_id,
    )


@router.post(
    "",
    response_model=ApiResponse[SettingResponse],
    status_code=201,
    summary="Create a setting",
)
async def create_setting(
    data: SettingCreate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[SettingResponse]:
    service = SettingService(db)
    setting = await service.create_setting(data)
    return ApiResponse(data=SettingResponse.model_validate(setting))


@router.get(
    "/{setting_id}",
    response_model=ApiResponse[SettingResponse],
    summary="Get a setting",
)
async def get_setting(
    setting_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[SettingResponse]:
    service = SettingService(db)
    setting = await service.get_setting(setting_id)
    return ApiResponse(data=SettingResponse.model_validate(setting))


@router.put(
    "/{setting_id}",
    response_model=ApiResponse[SettingResponse],
    summary="Update a setting",
)
async def update_setting(
    setting_id: str,
    data: SettingUpdate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[SettingResponse]:
    service = SettingService(db)
    setting = await service.update_setting(setting_id, data)
    return ApiResponse(data=SettingResponse.model_validate(setting))


@router.delete(
    "/{setting_id}",
    status_code=204,
    summary="Delete a setting",
)
async def delete_setting(
    setting_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> None:
    service = SettingService(db)
    await service.delete_setting(setting_id)
