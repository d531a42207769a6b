"""
Order Flow API Endpoints.

REST API for order flows: CRUD, the default flag, and the per-shop
questions the order lifecycle asks (which step, which next statuses,
may this role make this change, who gets notified).
"""

from typing import Any

from fastapi import APIRouter, Query

from orderflow.backend.core.config import get_app_config
from orderflow.backend.core.dependencies import AdminUser, CurrentUser, DbSession, RequestId
from orderflow.backend.core.exceptions import NotFoundError
from orderflow.backend.schemas.base import ApiResponse
from orderflow.backend.schemas.order_flow import (
    CanChangeStatusRequest,
    CanChangeStatusResponse,
    FlowVocabulary,
    ForwardingDestination,
    OrderFlowCreate,
    OrderFlowResponse,
    OrderFlowStep,
    OrderFlowUpdate,
)
from orderflow.backend.services.order_flow import OrderFlowService

router = APIRouter()

ShopIdQuery = Query(default=None, alias="shopId", description="Shop whose flow applies")


@router.get(
    "",
    response_model=ApiResponse[list[OrderFlowResponse]],
    summary="List order flows",
    description="All order flows, newest first.",
)
async def list_flows(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[list[OrderFlowResponse]]:
    service = OrderFlowService(db)
    flows = await service.get_all_flows()
    return ApiResponse(data=[OrderFlowResponse.model_validate(flow) for flow in flows])


@router.post(
    "",
    response_model=ApiResponse[OrderFlowResponse],
    status_code=201,
    summary="Create an order flow",
    description="Create a flow. Step order is renumbered to the array index.",
)
async def create_flow(
    data: OrderFlowCreate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[OrderFlowResponse]:
    service = OrderFlowService(db)
    flow = await service.create_flow(data)
    return ApiResponse(data=OrderFlowResponse.model_validate(flow))


@router.get(
    "/vocabulary",
    response_model=ApiResponse[FlowVocabulary],
    summary="Get the flow vocabulary",
    description="Flow roles and common statuses configured in order_flow.yaml.",
)
async def get_vocabulary(
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[FlowVocabulary]:
    config = get_app_config().order_flow
    return ApiResponse(
        data=FlowVocabulary(
            roles=config.roles,
            common_statuses=config.common_statuses,
            status_buttons=config.status_buttons,
        )
    )


@router.get(
    "/shop/{shop_id}",
    response_model=ApiResponse[OrderFlowResponse],
    summary="Get the flow for a shop",
    description="The shop's custom flow, or the default flow when it has none.",
)
async def get_flow_for_shop(
    shop_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[OrderFlowResponse]:
    service = OrderFlowService(db)
    flow = await service.get_flow_for_shop(shop_id)
    return ApiResponse(data=OrderFlowResponse.model_validate(flow))


@router.get(
    "/step/{status}",
    response_model=ApiResponse[OrderFlowStep],
    summary="Get a flow step by status",
)
async def get_step_by_status(
    status: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    shop_id: str | None = ShopIdQuery,
) -> ApiResponse[OrderFlowStep]:
    """Active step for status in the shop's flow; 404 when there is none."""
    service = OrderFlowService(db)
    step = await service.get_step_by_status(status, shop_id)
    if step is None:
        raise NotFoundError(f"No active step for status '{status}'")
    return ApiResponse(data=OrderFlowStep.model_validate(step))


@router.get(
    "/next-statuses/{status}",
    response_model=ApiResponse[list[str]],
    summary="Get next statuses",
)
async def get_next_statuses(
    status: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    shop_id: str | None = ShopIdQuery,
) -> ApiResponse[list[str]]:
    service = OrderFlowService(db)
    return ApiResponse(data=await service.get_next_statuses(status, shop_id))


@router.post(
    "/can-change-status",
    response_model=ApiResponse[CanChangeStatusResponse],
    summary="Check a status change",
    description="Whether a role may move an order between two statuses.",
)
async def can_change_status(
    data: CanChangeStatusRequest,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[CanChangeStatusResponse]:
    service = OrderFlowService(db)
    allowed = await service.can_change_status(
        data.current_status,
        data.new_status,
        data.user_role,
        data.shop_id,
    )
    return ApiResponse(data=CanChangeStatusResponse(can_change=allowed))


@router.get(
    "/forwarding-destinations/{status}",
    response_model=ApiResponse[list[ForwardingDestination]],
    summary="Get forwarding destinations",
    description="Destinations of the step for status, placeholders unresolved.",
)
async def get_forwarding_destinations(
    status: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    shop_id: str | None = ShopIdQuery,
) -> ApiResponse[list[ForwardingDestination]]:
    service = OrderFlowService(db)
    destinations = await service.get_forwarding_destinations(status, shop_id)
    return ApiResponse(
        data=[ForwardingDestination.model_validate(d) for d in destinations]
    )


@router.get(
    "/{flow_id}",
    response_model=ApiResponse[OrderFlowResponse],
    summary="Get an order flow",
)
async def get_flow(
    flow_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[OrderFlowResponse]:
    service = OrderFlowService(db)
    flow = await service.get_flow_by_id(flow_id)
    return ApiResponse(data=OrderFlowResponse.model_validate(flow))


@router.put(
    "/{flow_id}",
    response_model=ApiResponse[OrderFlowResponse],
    summary="Update an order flow",
    description="Replace the provided fields. Last write wins.",
)
async def update_flow(
    flow_id: str,
    data: OrderFlowUpdate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[OrderFlowResponse]:
    service = OrderFlowService(db)
    flow = await service.update_flow(flow_id, data)
    return ApiResponse(data=OrderFlowResponse.model_validate(flow))


@router.delete(
    "/{flow_id}",
    response_model=ApiResponse[dict[str, Any]],
    summary="Delete an order flow",
)
async def delete_flow(
    flow_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[dict[str, Any]]:
    service = OrderFlowService(db)
    await service.delete_flow(flow_id)
    return ApiResponse(data={"deleted": True, "id": flow_id})


@router.post(
    "/{flow_id}/set-default",
    response_model=ApiResponse[OrderFlowResponse],
    summary="Make a flow the default",
    description="Unsets every other default flow.",
)
async def set_default_flow(
    flow_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[OrderFlowResponse]:
    service = OrderFlowService(db)
    flow = await service.set_default_flow(flow_id)
    return ApiResponse(data=OrderFlowResponse.model_validate(flow))
