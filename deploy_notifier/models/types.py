"""
Shared types and models for pipeline monitoring and notifications.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.constants import COLOR_INFO


class ExecutionStatus(str, Enum):
    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    SUPERSEDED = "Superseded"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, raw_status: str) -> "ExecutionStatus":
        """Map a raw CodePipeline status onto the enum, UNKNOWN when unrecognised."""
        try:
            return cls(raw_status)
        except ValueError:
            return cls.UNKNOWN


class EventLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class MonitorOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    SUPERSEDED = "superseded"
    FAILED = "failed"
    STOPPED = "stopped"
    UNKNOWN_STATUS = "unknown_status"
    NO_STATUS = "no_status"
    TIMED_OUT = "timed_out"
    CANCELLED_BY_CALLER = "cancelled_by_caller"

    @property
    def is_success(self) -> bool:
        return self in (MonitorOutcome.SUCCEEDED, MonitorOutcome.SUPERSEDED)


@dataclass
class PipelineExecutionInfo:
    pipeline_name: str
    execution_id: str
    status: ExecutionStatus
    raw_status: str


@dataclass
class MonitorResult:
    """Final result of monitoring one pipeline run."""

    outcome: MonitorOutcome
    execution_id: str
    raw_status: Optional[str] = None
    checks: int = 0

    @property
    def success(self) -> bool:
        return self.outcome.is_success

    def __bool__(self) -> bool:
        return self.success


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressEvent(BaseModel):
    """A single progress line shown in the notification."""

    model_config = ConfigDict(frozen=True)

    message: str
    level: EventLevel = EventLevel.INFO
    timestamp: datetime = Field(default_factory=_utcnow)
    execution_id: Optional[str] = None


class NotificationState(BaseModel):
    """Aggregate rendered into the notification message.

    Owned by the orchestrator. The execution monitor never holds a reference
    to it and only produces ProgressEvents through a callback.
    """

    color: str = COLOR_INFO
    pipeline_name: Optional[str] = None
    execution_id: Optional[str] = None
    events: List[ProgressEvent] = Field(default_factory=list)

    def append(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def add_message(self, message: str, level: EventLevel = EventLevel.INFO) -> ProgressEvent:
        event = ProgressEvent(message=message, level=level)
        self.append(event)
        return event
