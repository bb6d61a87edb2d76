"""In-process fan-out of "raid changed" notifications."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List


logger = logging.getLogger("raidplanner.signals")

RaidChangedHandler = Callable[[int], Awaitable[None]]


class RaidSignalBus:
    """
    Single-topic publish/subscribe channel keyed by raid id.

    Trackers publish after committing a change; the lifecycle subscribes to
    re-render. A failing subscriber is logged and never propagates back to
    the publisher, so re-render problems cannot fail the triggering command.
    """

    def __init__(self) -> None:
        self._subscribers: List[RaidChangedHandler] = []

    def subscribe(self, handler: RaidChangedHandler) -> None:
        if handler not in self._subscribers:
            self._subscribers.append(handler)

    def unsubscribe(self, handler: RaidChangedHandler) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, raid_id: int) -> None:
        for handler in list(self._subscribers):
            try:
                await handler(raid_id)
            except Exception:
                logger.warning(
                    "Raid change handler failed for raid %s", raid_id, exc_info=True
                )
