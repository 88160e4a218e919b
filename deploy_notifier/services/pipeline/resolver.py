"""Resolve the newest execution of a pipeline."""

import logging

from common.exception.exceptions import DataIntegrityError, NotFoundError
from deploy_notifier.services.pipeline.client import CodePipelineClient

logger = logging.getLogger(__name__)


async def resolve_newest_execution(client: CodePipelineClient, pipeline_name: str) -> str:
    """Return the execution ID of the most recent run of ``pipeline_name``.

    No retries happen here; callers decide what to do on failure.

    Raises:
        NotFoundError: If the pipeline has no executions
        DataIntegrityError: If the newest summary has no execution ID
    """
    summaries = await client.list_recent_executions(pipeline_name, limit=1)

    if not summaries:
        raise NotFoundError(f"No pipeline executions found for '{pipeline_name}'")

    execution_id = summaries[0].get("pipelineExecutionId")
    if not execution_id:
        raise DataIntegrityError(f"Newest pipeline execution of '{pipeline_name}' has no ID")

    logger.info(f"Newest execution of {pipeline_name}: {execution_id}")
    return execution_id
