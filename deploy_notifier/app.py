"""
Entry point for the deploy notifier.

Run as a GitHub Actions step (inputs come from ``INPUT_*`` variables) or from
the command line:

    python -m deploy_notifier --pipeline my-pipeline --slack-token xoxb-... --slack-channel C123

Environment variables:
    LOG_LEVEL: Root log level (default: INFO)
    PIPELINE_POLL_INTERVAL: Seconds between status polls (default: 20)
    PIPELINE_MAX_CHECKS: Maximum number of status polls (default: unbounded)
    PIPELINE_MONITOR_TIMEOUT: Overall monitoring deadline in seconds (default: none)
"""

import argparse
import asyncio
import json
import logging
import sys
from contextlib import AsyncExitStack
from typing import List, Optional

from common.config.config import (
    GITHUB_ACTIONS,
    GITHUB_OUTPUT,
    LOG_LEVEL,
    ActionInputs,
    load_action_inputs,
)
from common.exception.exceptions import DeployNotifierError
from deploy_notifier.services.orchestrator import DeploymentOrchestrator, DeploymentReport
from deploy_notifier.services.pipeline.client import CodePipelineClient
from deploy_notifier.services.pipeline.monitor import ExecutionMonitor
from deploy_notifier.services.slack.client import SlackAPIClient
from deploy_notifier.services.slack.sink import LogNotificationSink, SlackNotificationSink

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class GitHubActionsFormatter(logging.Formatter):
    """Formats warnings and errors as GitHub workflow commands so they show up as annotations."""

    COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return message
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"::{command}::{escaped}"


def configure_logging(level: str = LOG_LEVEL, github_actions: bool = GITHUB_ACTIONS) -> None:
    handler = logging.StreamHandler(sys.stdout)
    if github_actions:
        handler.setFormatter(GitHubActionsFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.basicConfig(level=level, handlers=[handler], force=True)

    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def mask_secret(value: Optional[str]) -> str:
    if not value:
        return ""
    return f"{value[:4]}***" if len(value) > 8 else "***"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deploy-notifier",
        description="Trigger an AWS CodePipeline and stream its progress into Slack",
    )
    parser.add_argument("--pipeline", help="CodePipeline name (default: INPUT_PIPELINE)")
    parser.add_argument(
        "--no-wait",
        dest="wait_completion",
        action="store_const",
        const=False,
        default=None,
        help="Only trigger the pipeline, do not wait for completion",
    )
    parser.add_argument("--slack-token", help="Slack bot token (default: INPUT_SLACK_TOKEN)")
    parser.add_argument("--slack-channel", help="Slack channel (default: INPUT_SLACK_CHANNEL)")
    parser.add_argument("--poll-interval", type=float, help="Seconds between status polls")
    parser.add_argument("--max-checks", type=int, help="Maximum number of status polls")
    parser.add_argument("--timeout", type=float, help="Overall monitoring deadline in seconds")
    return parser


def write_output(report: DeploymentReport, output_path: Optional[str] = GITHUB_OUTPUT) -> None:
    """Expose the final notification state as the ``data`` step output."""
    data = json.dumps(report.to_output())
    logger.debug(f"Output data: {data}")
    if not output_path:
        return
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"data={data}\n")


async def run(inputs: ActionInputs) -> DeploymentReport:
    """Validate credentials, then trigger and monitor the pipeline."""
    async with AsyncExitStack() as stack:
        if inputs.slack_enabled:
            slack_client = await stack.enter_async_context(SlackAPIClient(inputs.slack_token))
            await slack_client.validate_credentials(inputs.slack_channel)
            logger.info("[slack] credentials are okay")
            sink = SlackNotificationSink(slack_client, inputs.slack_channel)
        else:
            sink = LogNotificationSink()

        client = CodePipelineClient()
        monitor = ExecutionMonitor(
            client,
            poll_interval=inputs.poll_interval,
            max_checks=inputs.max_checks,
            timeout=inputs.timeout,
        )
        orchestrator = DeploymentOrchestrator(
            client, monitor, sink, wait_completion=inputs.wait_completion
        )
        return await orchestrator.run(inputs.pipeline)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the notifier and return the process exit code."""
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        inputs = load_action_inputs(
            pipeline=args.pipeline,
            wait_completion=args.wait_completion,
            slack_token=args.slack_token,
            slack_channel=args.slack_channel,
            poll_interval=args.poll_interval,
            max_checks=args.max_checks,
            timeout=args.timeout,
        )
        if GITHUB_ACTIONS and inputs.slack_token:
            print(f"::add-mask::{inputs.slack_token}")
        logger.debug(f"pipeline: '{inputs.pipeline}'")
        logger.debug(f"wait_completion: '{inputs.wait_completion}'")
        logger.debug(f"slack_token: '{mask_secret(inputs.slack_token)}'")
        logger.debug(f"slack_channel: '{inputs.slack_channel or ''}'")

        report = asyncio.run(run(inputs))
        write_output(report)
    except DeployNotifierError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1

    if not report.success:
        return 1
    return 0
