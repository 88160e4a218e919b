"""
Configuration module.

Settings are read from the environment (optionally seeded from a .env file).
Action inputs follow the GitHub Actions convention of ``INPUT_<NAME>``
environment variables so the notifier can run as a workflow step.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, model_validator

from common.exception.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


def _float_setting(key: str, default: Optional[float] = None) -> Optional[float]:
    """Read a numeric setting, ``default`` when unset or empty."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got '{value}'")


def _int_setting(key: str, default: Optional[int] = None) -> Optional[int]:
    """Read a whole-number setting, ``default`` when unset or empty."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got '{value}'")


# Pipeline monitoring
PIPELINE_POLL_INTERVAL = _float_setting("PIPELINE_POLL_INTERVAL", 20.0)
PIPELINE_MAX_CHECKS = _int_setting("PIPELINE_MAX_CHECKS")
PIPELINE_MONITOR_TIMEOUT = _float_setting("PIPELINE_MONITOR_TIMEOUT")

# AWS
AWS_REGION = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "eu-central-1"
CODEPIPELINE_CONSOLE_URL = os.getenv(
    "CODEPIPELINE_CONSOLE_URL",
    "https://{region}.console.aws.amazon.com/codesuite/codepipeline/pipelines/"
    "{pipeline_name}/executions/{execution_id}/visualization?region={region}",
)

# Slack
SLACK_API_URL = os.getenv("SLACK_API_URL", "https://slack.com/api")
SLACK_TIMEOUT = _float_setting("SLACK_TIMEOUT", 30.0)

# Presentation
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Europe/Amsterdam")

# GitHub Actions runtime
GITHUB_EVENT_PATH = os.getenv("GITHUB_EVENT_PATH")
GITHUB_OUTPUT = os.getenv("GITHUB_OUTPUT")
GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS", "false").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def get_input(name: str, required: bool = False) -> str:
    """Read an action input from its ``INPUT_<NAME>`` environment variable.

    Args:
        name: Input name as declared by the action (e.g. ``slack_token``)
        required: Raise when the input is missing or empty

    Returns:
        The trimmed input value, or an empty string

    Raises:
        ConfigurationError: If a required input is not supplied
    """
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    value = os.getenv(key, "").strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def get_boolean_input(name: str, default: bool = False) -> bool:
    """Read a boolean action input.

    Accepts the YAML 1.2 core schema spellings (true/True/TRUE, false/False/FALSE).
    An empty input falls back to ``default``.

    Raises:
        ConfigurationError: If the value is not a recognised boolean
    """
    value = get_input(name)
    if not value:
        return default
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


class ActionInputs(BaseModel):
    """Validated inputs for one notifier run."""

    pipeline: str
    wait_completion: bool = True
    slack_token: Optional[str] = None
    slack_channel: Optional[str] = None
    poll_interval: float = PIPELINE_POLL_INTERVAL
    max_checks: Optional[int] = PIPELINE_MAX_CHECKS
    timeout: Optional[float] = PIPELINE_MONITOR_TIMEOUT

    @model_validator(mode="after")
    def _check_inputs(self) -> "ActionInputs":
        if not self.pipeline:
            raise ValueError("Input required and not supplied: pipeline")
        if self.slack_token and not self.slack_channel:
            raise ValueError("When slack_token is set, slack_channel should also exist.")
        if self.slack_channel and not self.slack_token:
            raise ValueError("When slack_channel is set, slack_token should also exist.")
        if self.poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        if self.max_checks is not None and self.max_checks < 1:
            raise ValueError("max_checks must be at least 1")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        return self

    @property
    def slack_enabled(self) -> bool:
        return bool(self.slack_token)


def load_action_inputs(**overrides) -> ActionInputs:
    """Build ActionInputs from ``INPUT_*`` variables, applying explicit overrides.

    Overrides whose value is None are ignored, so argparse defaults of None
    leave the environment value in place.

    Raises:
        ConfigurationError: If the inputs are missing or inconsistent
    """
    values = {
        "pipeline": get_input("pipeline"),
        "wait_completion": get_boolean_input("wait_completion", default=True),
        "slack_token": get_input("slack_token") or None,
        "slack_channel": get_input("slack_channel") or None,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ActionInputs(**values)
    except ValidationError as e:
        message = "; ".join(
            str(err["msg"]).removeprefix("Value error, ") for err in e.errors()
        )
        raise ConfigurationError(message) from e
