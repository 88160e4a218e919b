"""Deployment orchestrator: trigger, monitor and report one pipeline run."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from common.constants import (
    COLOR_ERROR,
    COLOR_INFO,
    COLOR_SUCCESS,
    COLOR_WARNING,
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
)
from deploy_notifier.models.types import (
    EventLevel,
    MonitorResult,
    NotificationState,
    ProgressEvent,
)
from deploy_notifier.services.pipeline.client import CodePipelineClient
from deploy_notifier.services.pipeline.monitor import ExecutionMonitor
from deploy_notifier.services.slack.sink import NotificationSink

logger = logging.getLogger(__name__)

LEVEL_COLORS = {
    EventLevel.INFO: COLOR_INFO,
    EventLevel.WARNING: COLOR_WARNING,
    EventLevel.ERROR: COLOR_ERROR,
}

TRIGGERED_TEMPLATE = "pipeline: '{pipeline_name}' triggered, executionId: {execution_id}"


@dataclass
class DeploymentReport:
    """Result of a deployment run."""

    success: bool
    state: NotificationState
    execution_id: str
    result: Optional[MonitorResult] = None

    def to_output(self) -> dict:
        return {"state": {"slack": self.state.model_dump(mode="json")}}


class DeploymentOrchestrator:
    """Triggers a pipeline and, optionally, follows it to completion.

    The orchestrator owns the NotificationState. The monitor only hands
    events to ``_handle_event``, which appends them to the state, picks the
    attachment color and pushes the new state to the sink.
    """

    def __init__(
        self,
        client: CodePipelineClient,
        monitor: ExecutionMonitor,
        sink: NotificationSink,
        wait_completion: bool = True,
    ):
        self.client = client
        self.monitor = monitor
        self.sink = sink
        self.wait_completion = wait_completion
        self.state = NotificationState()

    async def run(self, pipeline_name: str, stop_event: Optional[asyncio.Event] = None) -> DeploymentReport:
        """Trigger ``pipeline_name`` and report its outcome.

        A failed deployment is reported through ``DeploymentReport.success``;
        only errors talking to AWS or Slack propagate.
        """
        execution_id = await self.client.start_execution(pipeline_name)
        logger.info(f"[pipeline] triggered with pipelineExecutionId: {execution_id}")
        self.state.add_message(
            TRIGGERED_TEMPLATE.format(pipeline_name=pipeline_name, execution_id=execution_id)
        )

        if not self.wait_completion:
            return DeploymentReport(success=True, state=self.state, execution_id=execution_id)

        self.state.pipeline_name = pipeline_name
        self.state.execution_id = execution_id
        await self.sink.create(self.state)

        result = await self.monitor.monitor(
            pipeline_name,
            execution_id,
            self._handle_event,
            stop_event=stop_event,
        )

        if result.success:
            self.state.color = COLOR_SUCCESS
            self.state.add_message(SUCCESS_MESSAGE)
        else:
            self.state.color = COLOR_ERROR
            self.state.add_message(FAILURE_MESSAGE, EventLevel.ERROR)
            logger.error(f"{FAILURE_MESSAGE} Outcome: {result.outcome.value}")
        await self.sink.update(self.state)

        return DeploymentReport(
            success=result.success,
            state=self.state,
            execution_id=result.execution_id,
            result=result,
        )

    async def _handle_event(self, event: ProgressEvent) -> None:
        self.state.append(event)
        self.state.color = LEVEL_COLORS[event.level]
        if event.execution_id:
            self.state.execution_id = event.execution_id

        if event.level == EventLevel.ERROR:
            logger.error(event.message)
        elif event.level == EventLevel.WARNING:
            logger.warning(event.message)
        else:
            logger.info(event.message)

        await self.sink.update(self.state)
