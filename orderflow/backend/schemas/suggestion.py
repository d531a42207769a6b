"""
Destination suggestion schemas.
"""

from pydantic import Field

from orderflow.backend.schemas.base import CamelModel


class DestinationSuggestion(CamelModel):
    """A candidate identifier for a forwarding destination."""

    identifier: str = Field(description="Telegram ID or chat ID to store")
    name: str = Field(description="Label shown in the editor")
    type: str
