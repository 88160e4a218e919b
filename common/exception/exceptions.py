"""Exception types shared by the deploy notifier.

Only problems with the notifier itself raise. A deployment that ends in
Failed or Stopped is a normal monitor outcome, not an exception.
"""

from typing import Optional


class DeployNotifierError(Exception):
    """Base class for all deploy notifier errors."""

    pass


class ConfigurationError(DeployNotifierError):
    """Raised when inputs are missing or inconsistent."""

    pass


class AuthError(DeployNotifierError):
    """Raised when notification credentials or channel access are invalid."""

    pass


class TransportError(DeployNotifierError):
    """Raised when a call to the pipeline API or Slack API fails."""

    pass


class SlackAPIError(TransportError):
    """Raised when Slack answers a request with ``ok: false``."""

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason or "unknown error"
        super().__init__(self.reason)


class NotificationError(DeployNotifierError):
    """Raised when the notification sink is used out of order."""

    pass


class DataIntegrityError(DeployNotifierError):
    """Raised when an upstream response is missing required data."""

    pass


class NotFoundError(DeployNotifierError):
    """Raised when a pipeline has no executions to follow."""

    pass
