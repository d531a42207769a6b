"""
Order API Endpoints.

Placing orders and moving them through the shop's order flow. Every
status change is committed, then forwarded to the flow step's Telegram
destinations.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from orderflow.backend.core.dependencies import CurrentUser, DbSession, RequestId
from orderflow.backend.schemas.base import ApiResponse
from orderflow.backend.schemas.order import OrderCreate, OrderResponse, OrderStatusUpdate
from orderflow.backend.services.order import INITIAL_STATUS, OrderService
from orderflow.telegram.services.notifications import (
    NotificationService,
    get_notification_service,
)

router = APIRouter()

Notifier = Annotated[NotificationService, Depends(get_notification_service)]


@router.post(
    "",
    response_model=ApiResponse[OrderResponse],
    status_code=201,
    summary="Place an order",
    description="Creates the order in the `created` status and notifies the first step.",
)
async def create_order(
    data: OrderCreate,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    notifier: Notifier,
) -> ApiResponse[OrderResponse]:
    service = OrderService(db)
    order = await service.create_order(data, created_by=user.user_id)
    await db.commit()
    await notifier.handle_order_status_change(db, order, INITIAL_STATUS, updated_by=user.user_id)
    return ApiResponse(data=OrderResponse.model_validate(order))


@router.get(
    "/{order_id}",
    response_model=ApiResponse[OrderResponse],
    summary="Get an order",
)
async def get_order(
    order_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[OrderResponse]:
    service = OrderService(db)
    order = await service.get_order(order_id)
    return ApiResponse(data=OrderResponse.model_validate(order))


@router.patch(
    "/{order_id}/status",
    response_model=ApiResponse[OrderResponse],
    summary="Change an order's status",
    description=(
        "The shop's flow must allow the change for the caller's role. "
        "For `rejected`, notes are stored as the rejection reason."
    ),
)
async def change_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    notifier: Notifier,
) -> ApiResponse[OrderResponse]:
    service = OrderService(db)
    order = await service.change_status(
        order_id,
        data.status,
        user.role,
        updated_by=user.user_id,
        notes=data.notes,
    )
    # Recipients only hear about changes that are already stored.
    await db.commit()
    await notifier.handle_order_status_change(
        db,
        order,
        data.status,
        updated_by=user.user_id,
        reason=data.notes,
    )
    return ApiResponse(data=OrderResponse.model_validate(order))
