"""Gateway adapters for the LLM backend.

Supported providers:
- OpenRouter: any model routed through the OpenAI-compatible
  chat completions endpoint (default ``openai/gpt-4o-mini``)
"""

from flashgen_core.model_adapters.base import BaseGateway
from flashgen_core.model_adapters.openrouter import OpenRouterGateway

__all__ = ["BaseGateway", "OpenRouterGateway"]
