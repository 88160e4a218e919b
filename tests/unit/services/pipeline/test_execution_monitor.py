"""Tests for ExecutionMonitor."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from common.exception.exceptions import NotFoundError, TransportError
from deploy_notifier.models.types import (
    EventLevel,
    ExecutionStatus,
    MonitorOutcome,
    PipelineExecutionInfo,
)
from deploy_notifier.services.pipeline.monitor import ExecutionMonitor


def _execution(status: ExecutionStatus, execution_id: str = "exec-1", raw_status=None):
    return PipelineExecutionInfo(
        pipeline_name="deploy-prod",
        execution_id=execution_id,
        status=status,
        raw_status=raw_status or status.value,
    )


class TestExecutionMonitor:
    """Test ExecutionMonitor.monitor."""

    @pytest.fixture
    def mock_client(self):
        """Create mock pipeline client."""
        client = MagicMock()
        client.get_execution = AsyncMock()
        client.list_recent_executions = AsyncMock(return_value=[])
        return client

    @pytest.fixture
    def monitor(self, mock_client):
        """Create monitor without poll delay."""
        return ExecutionMonitor(mock_client, poll_interval=0)

    @pytest.fixture
    def events(self):
        """Collected progress events."""
        return []

    @pytest.mark.asyncio
    async def test_in_progress_then_succeeded(self, monitor, mock_client, events):
        """Test two in-progress polls followed by success."""
        mock_client.get_execution.side_effect = [
            _execution(ExecutionStatus.IN_PROGRESS),
            _execution(ExecutionStatus.IN_PROGRESS),
            _execution(ExecutionStatus.SUCCEEDED),
        ]

        result = await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert result.success is True
        assert result.outcome == MonitorOutcome.SUCCEEDED
        assert result.checks == 3
        assert [e.message for e in events] == [
            "pipeline: running",
            "pipeline: running.",
            "pipeline: succeeded",
        ]
        assert all(e.level == EventLevel.INFO for e in events)
        assert mock_client.get_execution.await_count == 3

    @pytest.mark.asyncio
    async def test_cancelled_switches_to_newest_execution(self, monitor, mock_client, events):
        """Test a cancelled run is replaced by the newest execution of the pipeline."""
        mock_client.get_execution.side_effect = [
            _execution(ExecutionStatus.CANCELLED),
            _execution(ExecutionStatus.SUCCEEDED, execution_id="exec-2"),
        ]
        mock_client.list_recent_executions.return_value = [{"pipelineExecutionId": "exec-2"}]

        result = await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert result.success is True
        assert result.execution_id == "exec-2"
        assert [e.message for e in events] == [
            "pipeline: canceled. Trying to get new execution ID.",
            "pipeline: waiting for new executionId: 'exec-2'",
            "pipeline: succeeded",
        ]
        mock_client.list_recent_executions.assert_awaited_once_with("deploy-prod", limit=1)
        assert mock_client.get_execution.await_args_list[1].args == ("deploy-prod", "exec-2")

    @pytest.mark.asyncio
    async def test_switch_event_precedes_next_poll(self, monitor, mock_client, events):
        """Test the switch event names the new ID and is emitted before it is polled."""
        polled_after_switch = []

        async def get_execution(pipeline_name, execution_id):
            if execution_id == "exec-2":
                polled_after_switch.append([e.message for e in events])
                return _execution(ExecutionStatus.SUCCEEDED, execution_id="exec-2")
            return _execution(ExecutionStatus.CANCELLED)

        mock_client.get_execution.side_effect = get_execution
        mock_client.list_recent_executions.return_value = [{"pipelineExecutionId": "exec-2"}]

        await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert polled_after_switch[0][-1] == "pipeline: waiting for new executionId: 'exec-2'"
        switch_events = [e for e in events if "waiting for new executionId" in e.message]
        assert len(switch_events) == 1
        assert switch_events[0].execution_id == "exec-2"
        assert events[0].execution_id == "exec-1"

    @pytest.mark.asyncio
    async def test_tick_resets_after_switch(self, monitor, mock_client, events):
        """Test the running indicator starts over for the new execution."""
        mock_client.get_execution.side_effect = [
            _execution(ExecutionStatus.IN_PROGRESS),
            _execution(ExecutionStatus.CANCELLED),
            _execution(ExecutionStatus.IN_PROGRESS, execution_id="exec-2"),
            _execution(ExecutionStatus.IN_PROGRESS, execution_id="exec-2"),
            _execution(ExecutionStatus.SUCCEEDED, execution_id="exec-2"),
        ]
        mock_client.list_recent_executions.return_value = [{"pipelineExecutionId": "exec-2"}]

        await monitor.monitor("deploy-prod", "exec-1", events.append)

        running = [e.message for e in events if e.message.startswith("pipeline: running")]
        assert running == ["pipeline: running", "pipeline: running", "pipeline: running."]

    @pytest.mark.asyncio
    async def test_cancelled_without_newer_execution(self, monitor, mock_client, events):
        """Test NotFoundError propagates and no further polls happen."""
        mock_client.get_execution.return_value = _execution(ExecutionStatus.CANCELLED)
        mock_client.list_recent_executions.return_value = []

        with pytest.raises(NotFoundError):
            await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert mock_client.get_execution.await_count == 1
        assert [e.message for e in events] == ["pipeline: canceled. Trying to get new execution ID."]

    @pytest.mark.asyncio
    async def test_cancelled_newest_is_same_execution(self, monitor, mock_client, events):
        """Test a cancelled execution that is still the newest is not polled again."""
        mock_client.get_execution.return_value = _execution(ExecutionStatus.CANCELLED)
        mock_client.list_recent_executions.return_value = [{"pipelineExecutionId": "exec-1"}]

        with pytest.raises(NotFoundError, match="exec-1"):
            await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert mock_client.get_execution.await_count == 1
        assert [e.message for e in events] == ["pipeline: canceled. Trying to get new execution ID."]

    @pytest.mark.asyncio
    async def test_missing_status_returns_failure(self, monitor, mock_client, events):
        """Test a response without status ends monitoring with one error event."""
        mock_client.get_execution.return_value = None

        result = await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert result.success is False
        assert result.outcome == MonitorOutcome.NO_STATUS
        assert len(events) == 1
        assert events[0].level == EventLevel.ERROR
        assert events[0].message == "pipeline: unable to fetch status"
        assert mock_client.get_execution.await_count == 1

    @pytest.mark.asyncio
    async def test_transport_error_is_reraised_after_error_event(self, monitor, mock_client, events):
        """Test a failing status call emits one error event and re-raises."""
        error = TransportError("connection reset")
        mock_client.get_execution.side_effect = error

        with pytest.raises(TransportError) as exc_info:
            await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert exc_info.value is error
        assert len(events) == 1
        assert events[0].level == EventLevel.ERROR
        assert events[0].message == (
            "An error occurred while getting the status of pipeline 'deploy-prod' "
            "execution: 'exec-1'."
        )

    @pytest.mark.asyncio
    async def test_transport_error_wins_over_failing_sink(self, monitor, mock_client):
        """Test the poll error is raised even if the error event cannot be delivered."""
        mock_client.get_execution.side_effect = TransportError("timeout")

        def on_event(event):
            raise RuntimeError("sink down")

        with pytest.raises(TransportError):
            await monitor.monitor("deploy-prod", "exec-1", on_event)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,outcome",
        [
            (ExecutionStatus.FAILED, MonitorOutcome.FAILED),
            (ExecutionStatus.STOPPED, MonitorOutcome.STOPPED),
            (ExecutionStatus.STOPPING, MonitorOutcome.STOPPED),
        ],
    )
    async def test_failure_statuses(self, monitor, mock_client, events, status, outcome):
        """Test failed and stopped runs end with an error event."""
        mock_client.get_execution.side_effect = [
            _execution(ExecutionStatus.IN_PROGRESS),
            _execution(status),
        ]

        result = await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert result.success is False
        assert result.outcome == outcome
        assert events[-1].level == EventLevel.ERROR

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,level",
        [
            (ExecutionStatus.SUCCEEDED, EventLevel.INFO),
            (ExecutionStatus.SUPERSEDED, EventLevel.WARNING),
        ],
    )
    async def test_success_statuses(self, monitor, mock_client, events, status, level):
        """Test succeeded and superseded runs never end with an error event."""
        mock_client.get_execution.return_value = _execution(status)

        result = await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert bool(result) is True
        assert events[-1].level == level

    @pytest.mark.asyncio
    async def test_unknown_status_reports_raw_value(self, monitor, mock_client, events):
        """Test an unrecognised status fails with the raw value in the message."""
        mock_client.get_execution.return_value = _execution(ExecutionStatus.UNKNOWN, raw_status="Paused")

        result = await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert result.outcome == MonitorOutcome.UNKNOWN_STATUS
        assert result.raw_status == "Paused"
        assert events[-1].message == "Unexpected pipeline status: Paused"
        assert events[-1].level == EventLevel.ERROR

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited_before_next_poll(self, monitor, mock_client):
        """Test an async sink finishes each event before the monitor polls again."""
        delivered = []
        polls = []

        async def on_event(event):
            await asyncio.sleep(0)
            delivered.append(event.message)

        async def get_execution(pipeline_name, execution_id):
            polls.append(len(delivered))
            if len(polls) < 3:
                return _execution(ExecutionStatus.IN_PROGRESS)
            return _execution(ExecutionStatus.SUCCEEDED)

        mock_client.get_execution.side_effect = get_execution

        await monitor.monitor("deploy-prod", "exec-1", on_event)

        assert polls == [0, 1, 2]
        assert delivered[-1] == "pipeline: succeeded"

    @pytest.mark.asyncio
    async def test_waits_before_every_poll(self, mock_client, events):
        """Test the poll interval is awaited before each poll, including the first."""
        mock_client.get_execution.side_effect = [
            _execution(ExecutionStatus.IN_PROGRESS),
            _execution(ExecutionStatus.SUCCEEDED),
        ]
        monitor = ExecutionMonitor(mock_client, poll_interval=20)

        with patch(
            "deploy_notifier.services.pipeline.monitor.asyncio.sleep", new_callable=AsyncMock
        ) as mock_sleep:
            await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(20)

    @pytest.mark.asyncio
    async def test_max_checks_times_out(self, mock_client, events):
        """Test monitoring gives up after max_checks polls."""
        mock_client.get_execution.return_value = _execution(ExecutionStatus.IN_PROGRESS)
        monitor = ExecutionMonitor(mock_client, poll_interval=0, max_checks=3)

        result = await monitor.monitor("deploy-prod", "exec-1", events.append)

        assert result.outcome == MonitorOutcome.TIMED_OUT
        assert result.success is False
        assert result.checks == 3
        assert mock_client.get_execution.await_count == 3
        assert events[-1].level == EventLevel.ERROR

    @pytest.mark.asyncio
    async def test_deadline_times_out(self, mock_client, events):
        """Test monitoring stops once the overall timeout has passed."""
        mock_client.get_execution.return_value = _execution(ExecutionStatus.IN_PROGRESS)
        monitor = ExecutionMonitor(mock_client, poll_interval=0.01, timeout=0.05)

        result = await asyncio.wait_for(
            monitor.monitor("deploy-prod", "exec-1", events.append), timeout=5
        )

        assert result.outcome == MonitorOutcome.TIMED_OUT
        assert events[-1].level == EventLevel.ERROR

    @pytest.mark.asyncio
    async def test_stop_event_cancels_monitoring(self, monitor, mock_client, events):
        """Test a set stop event ends monitoring with a distinguishable outcome."""
        stop_event = asyncio.Event()
        stop_event.set()

        result = await monitor.monitor("deploy-prod", "exec-1", events.append, stop_event=stop_event)

        assert result.outcome == MonitorOutcome.CANCELLED_BY_CALLER
        assert result.success is False
        mock_client.get_execution.assert_not_awaited()
        assert events[-1].level == EventLevel.WARNING

    @pytest.mark.asyncio
    async def test_stop_event_set_while_waiting(self, mock_client, events):
        """Test the stop event interrupts the pre-poll wait."""
        mock_client.get_execution.return_value = _execution(ExecutionStatus.IN_PROGRESS)
        monitor = ExecutionMonitor(mock_client, poll_interval=60)
        stop_event = asyncio.Event()

        task = asyncio.create_task(
            monitor.monitor("deploy-prod", "exec-1", events.append, stop_event=stop_event)
        )
        await asyncio.sleep(0.01)
        stop_event.set()
        result = await asyncio.wait_for(task, timeout=5)

        assert result.outcome == MonitorOutcome.CANCELLED_BY_CALLER
        mock_client.get_execution.assert_not_awaited()
