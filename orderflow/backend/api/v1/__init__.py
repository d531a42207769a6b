"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from orderflow.backend.api.v1.endpoints import (
    order_flows,
    orders,
    settings,
    shops,
    suggestions,
    users,
)

router = APIRouter()

router.include_router(order_flows.router, prefix="/order-flows", tags=["order-flows"])
router.include_router(shops.router, prefix="/shops", tags=["shops"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(users.groups_router, prefix="/groups", tags=["groups"])
router.include_router(settings.router, prefix="/settings", tags=["settings"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])
router.include_router(suggestions.router, prefix="/suggestions", tags=["suggestions"])
