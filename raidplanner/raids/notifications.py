"""Platform-neutral message payloads and the notification boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Protocol, Tuple


COLOR_INFO = "blue"
COLOR_REMINDER = "gold"
COLOR_URGENT = "red"
COLOR_SUCCESS = "green"


@dataclass(frozen=True)
class MessageField:
    name: str
    value: str
    inline: bool = False


@dataclass
class RaidMessage:
    """Semantic content of an outbound message; adapters decide the markup."""

    title: str
    description: Optional[str] = None
    fields: List[MessageField] = field(default_factory=list)
    color: str = COLOR_INFO
    footer: Optional[str] = None
    timestamp: Optional[datetime] = None
    content: Optional[str] = None
    reactions: Tuple[str, ...] = ()

    def add_field(self, name: str, value: str, inline: bool = False) -> "RaidMessage":
        self.fields.append(MessageField(name=name, value=value, inline=inline))
        return self


class NotificationHub(Protocol):
    """Outbound message operations the raid engine relies on."""

    async def send(self, channel_id: int, message: RaidMessage) -> int:
        """Post a message and return its handle; raise ExternalUnavailableError on failure."""
        ...

    async def update(self, channel_id: int, message_id: int, message: RaidMessage) -> bool:
        """Edit an existing message; False if it no longer exists or the edit failed."""
        ...

    async def delete(self, channel_id: int, message_id: int) -> bool:
        """Best-effort removal; never raises."""
        ...
