from deploy_notifier.models.types import (
    EventLevel,
    ExecutionStatus,
    MonitorOutcome,
    MonitorResult,
    NotificationState,
    PipelineExecutionInfo,
    ProgressEvent,
)

__all__ = [
    "EventLevel",
    "ExecutionStatus",
    "MonitorOutcome",
    "MonitorResult",
    "NotificationState",
    "PipelineExecutionInfo",
    "ProgressEvent",
]
