"""
Deploy notifier services package.

Contains the pipeline monitoring and Slack notification services.
"""

from deploy_notifier.services.orchestrator import DeploymentOrchestrator, DeploymentReport
from deploy_notifier.services.pipeline import CodePipelineClient, ExecutionMonitor
from deploy_notifier.services.slack import (
    LogNotificationSink,
    SlackAPIClient,
    SlackNotificationSink,
)

__all__ = [
    "CodePipelineClient",
    "DeploymentOrchestrator",
    "DeploymentReport",
    "ExecutionMonitor",
    "LogNotificationSink",
    "SlackAPIClient",
    "SlackNotificationSink",
]
