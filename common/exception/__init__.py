from common.exception.exceptions import (
    AuthError,
    ConfigurationError,
    DataIntegrityError,
    DeployNotifierError,
    NotFoundError,
    NotificationError,
    SlackAPIError,
    TransportError,
)

__all__ = [
    "AuthError",
    "ConfigurationError",
    "DataIntegrityError",
    "DeployNotifierError",
    "NotFoundError",
    "NotificationError",
    "SlackAPIError",
    "TransportError",
]
