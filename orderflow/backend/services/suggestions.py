"""
Destination suggestions.

Backs the identifier autocomplete of the flow editor: users for
`telegram_user` destinations, groups for `telegram_group` ones.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.repositories.shop import TelegramGroupRepository
from orderflow.backend.repositories.user import UserRepository
from orderflow.backend.schemas.shop import TelegramGroupResponse
from orderflow.backend.schemas.suggestion import DestinationSuggestion
from orderflow.backend.schemas.user import UserResponse
from orderflow.backend.services import flow_editor
from orderflow.backend.services.base import BaseService


class SuggestionService(BaseService):
    """Matches destination identifiers against known users and groups."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UserRepository(session)
        self.groups = TelegramGroupRepository(session)

    async def suggest_destinations(
        self,
        destination_type: str,
        query: str,
        limit: int = 20,
    ) -> list[DestinationSuggestion]:
        """
        Suggestions for a destination of destination_type.

        Channels are not tracked, so `telegram_channel` yields nothing.
        """
        self._log_debug("Suggesting destinations", type=destination_type, query=query)

        if destination_type == "telegram_user":
            users = [
                UserResponse.model_validate(user).model_dump(by_alias=True)
                for user in await self.users.list_with_telegram()
            ]
            matches = [
                {**flow_editor.user_destination(user), "type": destination_type}
                for user in flow_editor.filter_user_suggestions(users, query)
            ]
        elif destination_type == "telegram_group":
            groups = [
                TelegramGroupResponse.model_validate(group).model_dump(by_alias=True)
                for group in await self.groups.list_all()
            ]
            matches = [
                {**flow_editor.group_destination(group), "type": destination_type}
                for group in flow_editor.filter_group_suggestions(groups, query)
            ]
        else:
            matches = []

        return [DestinationSuggestion(**match) for match in matches[:limit]]
