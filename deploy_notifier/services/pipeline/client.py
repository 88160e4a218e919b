"""
AWS CodePipeline client for starting and inspecting pipeline executions.
"""

import asyncio
import functools
import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from common.config.config import AWS_REGION
from common.exception.exceptions import DataIntegrityError, TransportError
from deploy_notifier.models.types import ExecutionStatus, PipelineExecutionInfo

logger = logging.getLogger(__name__)


class CodePipelineClient:
    """Async facade over the blocking boto3 CodePipeline client."""

    def __init__(self, client: Optional[Any] = None, region_name: Optional[str] = None):
        """Initialize CodePipeline client.

        Args:
            client: Pre-built boto3 ``codepipeline`` client (created if not provided)
            region_name: AWS region (defaults to config)
        """
        self.region_name = region_name or AWS_REGION
        self._client = client or boto3.client("codepipeline", region_name=self.region_name)

    async def _call(self, operation: str, **params: Any) -> Dict[str, Any]:
        """Run a boto3 operation in the default executor.

        Args:
            operation: boto3 method name (e.g. ``get_pipeline_execution``)
            **params: Operation parameters

        Returns:
            Response dictionary

        Raises:
            TransportError: If the AWS call fails
        """
        method = getattr(self._client, operation)
        loop = asyncio.get_running_loop()

        try:
            response = await loop.run_in_executor(None, functools.partial(method, **params))
        except (BotoCoreError, ClientError) as e:
            error_msg = f"CodePipeline {operation} request failed: {e}"
            logger.error(error_msg)
            raise TransportError(error_msg) from e

        logger.debug(f"CodePipeline {operation} request successful")
        return response or {}

    async def start_execution(self, pipeline_name: str) -> str:
        """Trigger a pipeline by name.

        Args:
            pipeline_name: Pipeline name

        Returns:
            Execution ID of the new run

        Raises:
            DataIntegrityError: If AWS does not return an execution ID
        """
        response = await self._call("start_pipeline_execution", name=pipeline_name)

        execution_id = response.get("pipelineExecutionId")
        if not execution_id:
            raise DataIntegrityError(f"No execution ID returned when starting pipeline '{pipeline_name}'")

        logger.info(f"Started pipeline {pipeline_name}: {execution_id}")
        return execution_id

    async def get_execution(
        self, pipeline_name: str, execution_id: str
    ) -> Optional[PipelineExecutionInfo]:
        """Get status of a pipeline execution.

        Args:
            pipeline_name: Pipeline name
            execution_id: Pipeline execution ID

        Returns:
            PipelineExecutionInfo, or None if the response carries no status
        """
        response = await self._call(
            "get_pipeline_execution",
            pipelineName=pipeline_name,
            pipelineExecutionId=execution_id,
        )

        execution = response.get("pipelineExecution")
        if not execution or not execution.get("status"):
            return None

        raw_status = execution["status"]
        return PipelineExecutionInfo(
            pipeline_name=pipeline_name,
            execution_id=execution.get("pipelineExecutionId") or execution_id,
            status=ExecutionStatus.parse(raw_status),
            raw_status=raw_status,
        )

    async def list_recent_executions(self, pipeline_name: str, limit: int = 1) -> List[Dict[str, Any]]:
        """List the most recent executions of a pipeline, newest first.

        Args:
            pipeline_name: Pipeline name
            limit: Maximum number of summaries to return

        Returns:
            List of execution summary dicts
        """
        response = await self._call(
            "list_pipeline_executions",
            pipelineName=pipeline_name,
            maxResults=limit,
        )
        return response.get("pipelineExecutionSummaries") or []
