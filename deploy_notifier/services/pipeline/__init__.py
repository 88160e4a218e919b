"""
Pipeline Service Package

Starts CodePipeline executions and follows them to a terminal state.

Main Components:
- CodePipelineClient: async wrapper over the boto3 CodePipeline API
- resolve_newest_execution: finds the most recent execution of a pipeline
- classify_status: maps a polled status onto a monitor decision
- ExecutionMonitor: the polling loop
"""

from deploy_notifier.services.pipeline.client import CodePipelineClient
from deploy_notifier.services.pipeline.monitor import EventCallback, ExecutionMonitor
from deploy_notifier.services.pipeline.resolver import resolve_newest_execution
from deploy_notifier.services.pipeline.status_checks import (
    MonitorAction,
    StatusDecision,
    classify_status,
)

__all__ = [
    "CodePipelineClient",
    "EventCallback",
    "ExecutionMonitor",
    "MonitorAction",
    "StatusDecision",
    "classify_status",
    "resolve_newest_execution",
]
