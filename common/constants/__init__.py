"""Presentation and message constants."""

# ============================================================================
# Notification Colors
# ============================================================================

# Attachment color while the deployment is running normally
COLOR_INFO = "#c6c6c6"

# Attachment color after a warning event (e.g. superseded execution)
COLOR_WARNING = "#ffcc00"

# Attachment color after an error event or a failed deployment
COLOR_ERROR = "#cc3300"

# Attachment color once the deployment finished successfully
COLOR_SUCCESS = "#339900"

# ============================================================================
# Final Report Messages
# ============================================================================

SUCCESS_MESSAGE = "Successful"
FAILURE_MESSAGE = "Execution was unsuccessful."

__all__ = [
    'COLOR_INFO',
    'COLOR_WARNING',
    'COLOR_ERROR',
    'COLOR_SUCCESS',
    'SUCCESS_MESSAGE',
    'FAILURE_MESSAGE',
]
