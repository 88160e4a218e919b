"""
Slack Service Package

Main Components:
- SlackAPIClient: Slack Web API calls over httpx
- SlackMessageFormatter: renders the notification state as blocks
- SlackNotificationSink / LogNotificationSink: create-once, update-often sinks
"""

from deploy_notifier.services.slack.client import SlackAPIClient
from deploy_notifier.services.slack.formatting import SlackMessageFormatter
from deploy_notifier.services.slack.sink import (
    LogNotificationSink,
    NotificationSink,
    SlackNotificationSink,
)

__all__ = [
    "LogNotificationSink",
    "NotificationSink",
    "SlackAPIClient",
    "SlackMessageFormatter",
    "SlackNotificationSink",
]
