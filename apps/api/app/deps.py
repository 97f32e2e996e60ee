"""Shared FastAPI dependencies."""

from functools import lru_cache

from fastapi import Depends, Header
from flashgen_core.generation import GenerationClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.errors import ErrorCode, GenerationServiceError
from app.services.generation import GenerationService
from app.services.storage import SqlAlchemyGenerationStore
from app.settings import settings


class UnauthorizedError(GenerationServiceError):
    """No authenticated user was attached to the request."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401

    def __init__(self) -> None:
        super().__init__("Authentication required")


async def get_current_user_id(
    x_user_id: str | None = Header(default=None),
) -> str:
    """Return the authenticated user id set by the upstream auth layer."""
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError()
    return x_user_id.strip()


@lru_cache
def get_generation_client() -> GenerationClient:
    """Build the shared generation client from settings.

    Raises ``ConfigurationError`` (rendered as a 500) when the API key is
    missing; nothing is cached in that case.
    """
    return GenerationClient(
        settings.openrouter_api_key,
        model=settings.openrouter_model,
        base_url=settings.openrouter_base_url,
        http_referer=settings.openrouter_http_referer,
        app_title=settings.openrouter_app_title,
        temperature=settings.generation_temperature,
        max_tokens=settings.generation_max_tokens,
        timeout=settings.generation_timeout,
        max_attempts=settings.generation_max_attempts,
        backoff_jitter=settings.generation_backoff_jitter,
    )


def get_generation_service(
    db: AsyncSession = Depends(get_db),
    client: GenerationClient = Depends(get_generation_client),
) -> GenerationService:
    """Provide a generation service bound to the request's session."""
    return GenerationService(
        SqlAlchemyGenerationStore(db),
        client,
        daily_limit=settings.daily_card_limit,
    )
