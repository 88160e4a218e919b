"""Render the notification state as a Slack message."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from common.config.config import (
    AWS_REGION,
    CODEPIPELINE_CONSOLE_URL,
    DISPLAY_TIMEZONE,
    GITHUB_EVENT_PATH,
)
from deploy_notifier.models.types import NotificationState, ProgressEvent

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M:%S"


def load_github_event(event_path: Optional[str]) -> Optional[Dict[str, Any]]:
    """Load the GitHub event payload that triggered the workflow.

    Returns:
        Event dict, or None when no readable event file is available
    """
    if not event_path:
        return None

    try:
        return json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read GitHub event from {event_path}: {e}")
        return None


class SlackMessageFormatter:
    """Builds Slack blocks and attachments for a NotificationState."""

    def __init__(
        self,
        event_path: Optional[str] = GITHUB_EVENT_PATH,
        region: str = AWS_REGION,
        display_timezone: str = DISPLAY_TIMEZONE,
    ):
        self.event = load_github_event(event_path)
        self.region = region
        self.timezone = ZoneInfo(display_timezone)

    def format(self, state: NotificationState) -> Dict[str, Any]:
        blocks = self._event_blocks()
        blocks.append(self._deployment_button(state))
        blocks.append(_section("*Log entries*"))

        return {
            "blocks": blocks,
            "attachments": [
                {
                    "color": state.color,
                    "blocks": [self._event_line(event) for event in state.events],
                }
            ],
        }

    def console_url(self, state: NotificationState) -> str:
        return CODEPIPELINE_CONSOLE_URL.format(
            region=self.region,
            pipeline_name=state.pipeline_name,
            execution_id=state.execution_id,
        )

    def _event_blocks(self) -> List[Dict[str, Any]]:
        """Author and commit blocks, empty outside a GitHub workflow run."""
        if not self.event:
            return []

        sender = self.event.get("sender") or {}
        repository = self.event.get("repository") or {}
        head_commit = self.event.get("head_commit") or {}

        return [
            {
                "type": "context",
                "elements": [
                    {
                        "type": "image",
                        "image_url": f"{sender.get('avatar_url', '')}",
                        "alt_text": "",
                    },
                    {
                        "type": "plain_text",
                        "text": f"Author: {sender.get('login', 'unknown')}",
                        "emoji": True,
                    },
                ],
            },
            _section(
                f"*New deploy* for <{repository.get('url', '')}|{repository.get('name', '')}> "
                f"with <{self.event.get('compare', '')}|{head_commit.get('id', '')}>"
            ),
            _section("*Commit Message:*\n"),
            {
                "type": "section",
                "text": {"type": "plain_text", "text": f"{head_commit.get('message', '')}"},
            },
        ]

    def _deployment_button(self, state: NotificationState) -> Dict[str, Any]:
        return {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "emoji": True, "text": "Go to deployment"},
                    "style": "primary",
                    "url": self.console_url(state),
                    "value": "codepipeline",
                }
            ],
        }

    def _event_line(self, event: ProgressEvent) -> Dict[str, Any]:
        local_time = event.timestamp.astimezone(self.timezone).strftime(TIME_FORMAT)
        return _section(f"{local_time}: {event.message}")


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}
