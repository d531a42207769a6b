"""
Suggestion API Endpoints.

Autocomplete for forwarding destination identifiers in the flow editor.
"""

from typing import Literal

from fastapi import APIRouter, Query

from orderflow.backend.core.config import get_app_config
from orderflow.backend.core.dependencies import CurrentUser, DbSession, RequestId
from orderflow.backend.schemas.base import ApiResponse
from orderflow.backend.schemas.suggestion import DestinationSuggestion
from orderflow.backend.services.suggestions import SuggestionService

router = APIRouter()


@router.get(
    "/destinations",
    response_model=ApiResponse[list[DestinationSuggestion]],
    summary="Suggest destination identifiers",
    description=(
        "Users match on telegram ID, username or full name; groups on chat "
        "ID or title. Channels have no suggestions."
    ),
)
async def suggest_destinations(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    type: Literal["telegram_user", "telegram_group", "telegram_channel"] = Query(
        ...,
        description="Destination type",
    ),
    q: str = Query(default="", max_length=100, description="Typed text"),
) -> ApiResponse[list[DestinationSuggestion]]:
    service = SuggestionService(db)
    suggestions = await service.suggest_destinations(
        type,
        q,
        limit=get_app_config().order_flow.suggestion_limit,
    )
    return ApiResponse(data=suggestions)
