"""Application error type rendered as the JSON error body.

Every handled failure in a controller raises ``ApiError``; the handler
registered in ``justone.main`` turns it into::

    {"success": false, "error": "<code>", "message": "<text>", ...extra}
"""

from typing import Any


class ApiError(Exception):
    """A failure with an HTTP status and a machine-readable error code."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        headers: dict[str, str] | None = None,
        **extra: Any,
    ):
        """Initialize the error.

        Args:
            status_code: HTTP status to respond with.
            error: Stable string code the client switches on.
            message: Human readable text, safe to show to users.
            headers: Extra response headers (e.g. ``Retry-After``).
            **extra: Additional fields merged into the JSON body.
        """
        self.status_code = status_code
        self.error = error
        self.message = message
        self.headers = headers or {}
        self.extra = extra
        super().__init__(f"{error}: {message}")

    def to_body(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": self.error,
            "message": self.message,
            **self.extra,
        }


class ConfigurationError(ApiError):
    """Raised when a required secret or setting is missing."""

    def __init__(self, error: str, message: str):
        super().__init__(500, error, message)


class MailDeliveryError(Exception):
    """Raised by the mail client when the provider rejects or fails a send."""

    pass
