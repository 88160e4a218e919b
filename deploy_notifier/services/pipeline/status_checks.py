"""Status classification for pipeline execution monitoring."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from deploy_notifier.models.types import (
    EventLevel,
    ExecutionStatus,
    MonitorOutcome,
    PipelineExecutionInfo,
)

# Event message templates
RUNNING_TEMPLATE = "pipeline: running{dots}"
SUCCEEDED_MESSAGE = "pipeline: succeeded"
SUPERSEDED_MESSAGE = "pipeline: superseded. Skip rest of the execution"
FAILED_MESSAGE = "pipeline: failed"
STOPPED_MESSAGE = "pipeline: stopped"
CANCELLED_MESSAGE = "pipeline: canceled. Trying to get new execution ID."
SWITCH_TEMPLATE = "pipeline: waiting for new executionId: '{execution_id}'"
UNEXPECTED_TEMPLATE = "Unexpected pipeline status: {raw_status}"
NO_STATUS_MESSAGE = "pipeline: unable to fetch status"
FETCH_ERROR_TEMPLATE = (
    "An error occurred while getting the status of pipeline '{pipeline_name}' "
    "execution: '{execution_id}'."
)
TIMEOUT_TEMPLATE = "pipeline: monitoring stopped after {checks} checks, execution '{execution_id}' still running"
CALLER_CANCELLED_TEMPLATE = "pipeline: monitoring cancelled, execution '{execution_id}' is no longer followed"


class MonitorAction(str, Enum):
    CONTINUE = "continue"
    SWITCH = "switch"
    DONE = "done"


class StatusDecision(BaseModel):
    """What the monitor should do after observing one status."""

    model_config = ConfigDict(frozen=True)

    action: MonitorAction
    level: EventLevel
    message: str
    outcome: Optional[MonitorOutcome] = None


def _running_message(tick: int) -> str:
    """Build the in-progress message; the dots grow with each observation."""
    return RUNNING_TEMPLATE.format(dots="." * max(tick, 0))


def _done(level: EventLevel, message: str, outcome: MonitorOutcome) -> StatusDecision:
    return StatusDecision(action=MonitorAction.DONE, level=level, message=message, outcome=outcome)


def classify_status(execution: PipelineExecutionInfo, tick: int = 0) -> StatusDecision:
    """Classify a polled execution status.

    Pure function: the same execution and tick always produce the same decision.

    Args:
        execution: Execution info returned by the pipeline client
        tick: Number of consecutive in-progress observations so far

    Returns:
        StatusDecision for the monitor loop
    """
    status = execution.status

    if status == ExecutionStatus.IN_PROGRESS:
        return StatusDecision(
            action=MonitorAction.CONTINUE,
            level=EventLevel.INFO,
            message=_running_message(tick),
        )
    if status == ExecutionStatus.CANCELLED:
        return StatusDecision(
            action=MonitorAction.SWITCH,
            level=EventLevel.INFO,
            message=CANCELLED_MESSAGE,
        )
    if status == ExecutionStatus.SUCCEEDED:
        return _done(EventLevel.INFO, SUCCEEDED_MESSAGE, MonitorOutcome.SUCCEEDED)
    if status == ExecutionStatus.SUPERSEDED:
        return _done(EventLevel.WARNING, SUPERSEDED_MESSAGE, MonitorOutcome.SUPERSEDED)
    if status == ExecutionStatus.FAILED:
        return _done(EventLevel.ERROR, FAILED_MESSAGE, MonitorOutcome.FAILED)
    if status in (ExecutionStatus.STOPPING, ExecutionStatus.STOPPED):
        return _done(EventLevel.ERROR, STOPPED_MESSAGE, MonitorOutcome.STOPPED)

    return _done(
        EventLevel.ERROR,
        UNEXPECTED_TEMPLATE.format(raw_status=execution.raw_status),
        MonitorOutcome.UNKNOWN_STATUS,
    )
