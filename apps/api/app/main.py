"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.db.session import init_db
from app.exception_handlers import register_exception_handlers
from app.routers import generation, health
from app.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize services on startup and cleanup on shutdown."""
    await init_db()
    yield


def create_app(*, with_lifespan: bool = True) -> FastAPI:
    """Build the API application."""
    app = FastAPI(
        title="flashgen API",
        description="API for generating draft flashcards from study text",
        version="0.1.0",
        lifespan=lifespan if with_lifespan else None,
    )

    # CORS middleware - allow all origins in dev, restrict in production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.cors_allow_all else settings.cors_origins,
        allow_credentials=not settings.cors_allow_all,  # credentials require specific origins
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(generation.router, prefix="/api/v1", tags=["generation"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
