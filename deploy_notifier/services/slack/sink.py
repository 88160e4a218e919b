"""Notification sinks that render the notification state somewhere visible."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from common.exception.exceptions import NotificationError
from deploy_notifier.models.types import NotificationState
from deploy_notifier.services.slack.client import SlackAPIClient
from deploy_notifier.services.slack.formatting import SlackMessageFormatter

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """A single external message that is created once and then edited."""

    async def create(self, state: NotificationState) -> None:
        ...

    async def update(self, state: NotificationState) -> None:
        ...


class SlackNotificationSink:
    """Posts the state to a Slack channel and keeps editing the same message."""

    def __init__(
        self,
        client: SlackAPIClient,
        channel: str,
        formatter: Optional[SlackMessageFormatter] = None,
    ):
        self.client = client
        self.channel = channel
        self.formatter = formatter or SlackMessageFormatter()
        self.ts: Optional[str] = None

    async def create(self, state: NotificationState) -> None:
        self.ts = await self.client.post_message(self.channel, self.formatter.format(state))
        logger.info(f"[slack] message created in {self.channel} (ts={self.ts})")

    async def update(self, state: NotificationState) -> None:
        if self.ts is None:
            raise NotificationError("Slack message must be created before it can be updated")
        await self.client.update_message(self.channel, self.ts, self.formatter.format(state))


class LogNotificationSink:
    """Fallback sink used when no Slack credentials are configured."""

    async def create(self, state: NotificationState) -> None:
        logger.info(
            f"Slack not configured, progress for {state.pipeline_name} is only written to the log"
        )

    async def update(self, state: NotificationState) -> None:
        logger.debug(f"Notification state now has {len(state.events)} events (color={state.color})")
