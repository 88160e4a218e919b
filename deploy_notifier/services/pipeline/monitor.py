"""Execution monitor: polls one pipeline execution until it reaches a terminal state."""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from typing import Awaitable, Callable, Iterable, Optional, Union

from common.config.config import (
    PIPELINE_MAX_CHECKS,
    PIPELINE_MONITOR_TIMEOUT,
    PIPELINE_POLL_INTERVAL,
)
from common.exception.exceptions import NotFoundError
from deploy_notifier.models.types import (
    EventLevel,
    MonitorOutcome,
    MonitorResult,
    ProgressEvent,
)
from deploy_notifier.services.pipeline.client import CodePipelineClient
from deploy_notifier.services.pipeline.resolver import resolve_newest_execution
from deploy_notifier.services.pipeline.status_checks import (
    CALLER_CANCELLED_TEMPLATE,
    FETCH_ERROR_TEMPLATE,
    NO_STATUS_MESSAGE,
    SWITCH_TEMPLATE,
    TIMEOUT_TEMPLATE,
    MonitorAction,
    classify_status,
)

logger = logging.getLogger(__name__)

EventCallback = Callable[[ProgressEvent], Union[None, Awaitable[None]]]


class ExecutionMonitor:
    """Follows a pipeline execution and reports progress through a callback.

    The monitor keeps only the active execution ID and the in-progress tick.
    It never touches the notification state; every observation is handed to
    ``on_event`` and awaited before the next poll, so the sink sees events in
    the order they were produced.
    """

    def __init__(
        self,
        client: CodePipelineClient,
        poll_interval: float = PIPELINE_POLL_INTERVAL,
        max_checks: Optional[int] = PIPELINE_MAX_CHECKS,
        timeout: Optional[float] = PIPELINE_MONITOR_TIMEOUT,
    ):
        """Initialize the monitor.

        Args:
            client: Pipeline client used for status polls and execution lookups
            poll_interval: Seconds to wait before every poll (default: 20)
            max_checks: Maximum number of polls, unbounded when None
            timeout: Overall monitoring deadline in seconds, none when None
        """
        self.client = client
        self.poll_interval = poll_interval
        self.max_checks = max_checks
        self.timeout = timeout

    async def monitor(
        self,
        pipeline_name: str,
        execution_id: str,
        on_event: EventCallback,
        stop_event: Optional[asyncio.Event] = None,
    ) -> MonitorResult:
        """Poll the execution until it succeeds, fails or is superseded.

        Args:
            pipeline_name: Pipeline name
            execution_id: Execution to follow first
            on_event: Sync or async callable receiving each ProgressEvent
            stop_event: Optional event; setting it stops the monitor before the next poll

        Returns:
            MonitorResult describing how monitoring ended

        Raises:
            TransportError: If polling the pipeline fails
            NotFoundError: If a cancelled run has no newer execution to follow
            DataIntegrityError: If the newest execution has no ID
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout if self.timeout is not None else None
        checks: Iterable[int] = itertools.count() if self.max_checks is None else range(self.max_checks)

        logger.info(f"Starting pipeline monitoring: pipeline={pipeline_name}, execution_id={execution_id}")

        tick = 0
        check_num = -1
        for check_num in checks:
            interrupted = await self._wait_before_poll(stop_event, deadline)
            if interrupted is not None:
                return await self._interrupt(interrupted, execution_id, check_num, on_event)

            try:
                execution = await self.client.get_execution(pipeline_name, execution_id)
            except Exception:
                await self._emit_fetch_error(pipeline_name, execution_id, on_event)
                raise

            if execution is None:
                await self._emit(on_event, EventLevel.ERROR, NO_STATUS_MESSAGE, execution_id)
                return MonitorResult(MonitorOutcome.NO_STATUS, execution_id, checks=check_num + 1)

            decision = classify_status(execution, tick)
            await self._emit(on_event, decision.level, decision.message, execution_id)

            if decision.action == MonitorAction.CONTINUE:
                tick += 1
                continue

            if decision.action == MonitorAction.SWITCH:
                newest_id = await resolve_newest_execution(self.client, pipeline_name)
                if newest_id == execution_id:
                    raise NotFoundError(
                        f"No execution of '{pipeline_name}' newer than cancelled '{execution_id}'"
                    )
                execution_id = newest_id
                await self._emit(
                    on_event,
                    EventLevel.INFO,
                    SWITCH_TEMPLATE.format(execution_id=execution_id),
                    execution_id,
                )
                tick = 0
                continue

            return MonitorResult(
                decision.outcome,
                execution_id,
                raw_status=execution.raw_status,
                checks=check_num + 1,
            )

        return await self._interrupt(MonitorOutcome.TIMED_OUT, execution_id, check_num + 1, on_event)

    async def _wait_before_poll(
        self, stop_event: Optional[asyncio.Event], deadline: Optional[float]
    ) -> Optional[MonitorOutcome]:
        """Wait the poll interval without blocking the event loop.

        Returns:
            None to go on polling, otherwise the outcome that ends monitoring
        """
        loop = asyncio.get_running_loop()
        delay = self.poll_interval
        if deadline is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return MonitorOutcome.TIMED_OUT
            delay = min(delay, remaining)

        if stop_event is None:
            await asyncio.sleep(delay)
        elif stop_event.is_set():
            return MonitorOutcome.CANCELLED_BY_CALLER
        else:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
                return MonitorOutcome.CANCELLED_BY_CALLER
            except asyncio.TimeoutError:
                pass

        if deadline is not None and loop.time() >= deadline:
            return MonitorOutcome.TIMED_OUT
        return None

    async def _interrupt(
        self,
        outcome: MonitorOutcome,
        execution_id: str,
        checks: int,
        on_event: EventCallback,
    ) -> MonitorResult:
        if outcome == MonitorOutcome.CANCELLED_BY_CALLER:
            message = CALLER_CANCELLED_TEMPLATE.format(execution_id=execution_id)
            await self._emit(on_event, EventLevel.WARNING, message, execution_id)
        else:
            message = TIMEOUT_TEMPLATE.format(checks=checks, execution_id=execution_id)
            await self._emit(on_event, EventLevel.ERROR, message, execution_id)
        return MonitorResult(outcome, execution_id, checks=checks)

    async def _emit_fetch_error(
        self, pipeline_name: str, execution_id: str, on_event: EventCallback
    ) -> None:
        """Report a failed status poll; the poll error itself is re-raised by the caller."""
        message = FETCH_ERROR_TEMPLATE.format(pipeline_name=pipeline_name, execution_id=execution_id)
        try:
            await self._emit(on_event, EventLevel.ERROR, message, execution_id)
        except Exception as e:
            logger.error(f"Failed to deliver fetch error event: {e}", exc_info=True)

    @staticmethod
    async def _emit(
        on_event: EventCallback,
        level: EventLevel,
        message: str,
        execution_id: str,
    ) -> ProgressEvent:
        event = ProgressEvent(message=message, level=level, execution_id=execution_id)
        logger.debug(f"[{execution_id}] {level.value}: {message}")

        result = on_event(event)
        if inspect.isawaitable(result):
            await result
        return event
