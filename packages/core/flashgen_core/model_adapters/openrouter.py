"""OpenRouter gateway adapter."""

import asyncio
from typing import Any

import openai

from flashgen_core.errors import GatewayError
from flashgen_core.model_adapters.base import BaseGateway
from flashgen_core.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_HTTP_REFERER = "https://10x-cards.app"
DEFAULT_APP_TITLE = "10x Cards"

# Default timeout for a single attempt (seconds)
DEFAULT_TIMEOUT = 30.0


def _error_message(exc: openai.APIStatusError) -> str:
    """Pick the human-readable message out of an error body, if any."""
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"OpenRouter API error: {exc.status_code}"


class OpenRouterGateway(BaseGateway):
    """Gateway for OpenRouter's OpenAI-compatible chat completions API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        http_referer: str = DEFAULT_HTTP_REFERER,
        app_title: str = DEFAULT_APP_TITLE,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the OpenRouter gateway.

        Args:
            api_key: OpenRouter API key, sent as a bearer token
            base_url: API base URL
            http_referer: Referer header used by OpenRouter for attribution
            app_title: X-Title header used by OpenRouter for attribution
            timeout: Per-attempt timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url
        self.http_referer = http_referer
        self.app_title = app_title
        self.timeout = timeout

        self._client: Any = None

    @property
    def client(self) -> Any:
        """Lazy-load the OpenAI-compatible client."""
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": self.http_referer,
                    "X-Title": self.app_title,
                },
            )
        return self._client

    async def complete(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one chat-completion request to OpenRouter."""
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(**payload),
                timeout=self.timeout,
            )
        except openai.APIStatusError as e:
            raise GatewayError(
                _error_message(e),
                status_code=e.status_code,
                body=e.response.text,
            ) from e
        except (openai.APITimeoutError, asyncio.TimeoutError) as e:
            raise GatewayError(
                f"OpenRouter request timed out after {self.timeout}s"
            ) from e
        except openai.APIConnectionError as e:
            raise GatewayError(f"OpenRouter connection failed: {e}") from e

        logger.debug(f"OpenRouter responded (model={payload.get('model')})")
        return response.model_dump()
