"""
Shop API Endpoints.

Shops, their order flow customization, and the Telegram groups that can
be linked to them.
"""

from fastapi import APIRouter

from orderflow.backend.core.dependencies import AdminUser, CurrentUser, DbSession, RequestId
from orderflow.backend.schemas.base import ApiResponse
from orderflow.backend.schemas.order_flow import OrderFlowResponse, ShopFlowCustomize
from orderflow.backend.schemas.shop import ShopCreate, ShopResponse, TelegramGroupResponse
from orderflow.backend.services.directory import DirectoryService
from orderflow.backend.services.order_flow import OrderFlowService

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[ShopResponse],
    status_code=201,
    summary="Create a shop",
)
async def create_shop(
    data: ShopCreate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[ShopResponse]:
    service = DirectoryService(db)
    shop = await service.create_shop(data)
    return ApiResponse(data=ShopResponse.model_validate(shop))


@router.get(
    "/groups/unassigned",
    response_model=ApiResponse[list[TelegramGroupResponse]],
    summary="List unassigned Telegram groups",
)
async def list_unassigned_groups(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[list[TelegramGroupResponse]]:
    service = DirectoryService(db)
    groups = await service.list_unassigned_groups()
    return ApiResponse(data=[TelegramGroupResponse.model_validate(g) for g in groups])


@router.get(
    "/{shop_id}",
    response_model=ApiResponse[ShopResponse],
    summary="Get a shop",
)
async def get_shop(
    shop_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[ShopResponse]:
    service = DirectoryService(db)
    shop = await service.get_shop(shop_id)
    return ApiResponse(data=ShopResponse.model_validate(shop))


@router.post(
    "/{shop_id}/order-flow/customize",
    response_model=ApiResponse[OrderFlowResponse],
    summary="Customize a shop's order flow",
    description=(
        "Save a custom flow for the shop. Without steps in the body the "
        "shop's current flow is copied."
    ),
)
async def customize_shop_flow(
    shop_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
    data: ShopFlowCustomize | None = None,
) -> ApiResponse[OrderFlowResponse]:
    service = OrderFlowService(db)
    flow = await service.customize_flow_for_shop(shop_id, data)
    return ApiResponse(data=OrderFlowResponse.model_validate(flow))


@router.delete(
    "/{shop_id}/order-flow",
    response_model=ApiResponse[OrderFlowResponse],
    summary="Reset a shop to the default flow",
    description="Delete the shop's custom flow and return the flow that now applies.",
)
async def reset_shop_flow(
    shop_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[OrderFlowResponse]:
    service = OrderFlowService(db)
    flow = await service.reset_shop_to_default(shop_id)
    return ApiResponse(data=OrderFlowResponse.model_validate(flow))
