"""Typed errors raised by the generation client.

Callers branch on the exception class, never on the message text. Raw
gateway bodies and model output are kept on the exception for logging only.
"""

from typing import Any

# Raw model output attached to a ParseError is cut to this many characters
RAW_CONTENT_PREVIEW = 500


class GenerationClientError(Exception):
    """Base class for all generation client failures."""


class ConfigurationError(GenerationClientError):
    """Raised when the client is constructed with unusable settings."""


class ValidationError(GenerationClientError):
    """Raised when caller input is out of bounds."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}


class GatewayError(GenerationClientError):
    """Raised when the LLM gateway call fails.

    ``status_code`` is ``None`` for network-level failures (timeouts,
    refused connections) where no HTTP response was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def retryable(self) -> bool:
        """Whether another attempt may succeed (5xx or network failure)."""
        return self.status_code is None or self.status_code >= 500


class ParseError(GenerationClientError):
    """Raised when the gateway answered 2xx but the content is unusable."""

    def __init__(self, message: str, raw_content: str | None = None):
        super().__init__(message)
        if raw_content is not None and len(raw_content) > RAW_CONTENT_PREVIEW:
            raw_content = raw_content[:RAW_CONTENT_PREVIEW] + "..."
        self.raw_content = raw_content
