"""Base gateway interface."""

from abc import ABC, abstractmethod
from typing import Any


class BaseGateway(ABC):
    """Abstract base class for chat-completion gateways."""

    @abstractmethod
    async def complete(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one chat-completion request.

        Implementations make exactly one attempt; retrying is the caller's
        job.

        Args:
            payload: Request body (model, messages, temperature, max_tokens,
                response_format)

        Returns:
            Decoded response body with a ``choices`` list

        Raises:
            GatewayError: On any HTTP or network failure
        """
        pass
