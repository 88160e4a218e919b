"""Trigger an AWS CodePipeline run and stream its progress into Slack."""

__version__ = "0.1.0"
