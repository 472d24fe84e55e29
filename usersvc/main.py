from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from usersvc.api.errors import validation_error_handler
from usersvc.api.profiles import router as profiles_router
from usersvc.api.users import router as users_router
from usersvc.config import Settings, get_settings
from usersvc.observability.logging import configure_logging
from usersvc.observability.middleware import ErrorHandlerMiddleware, RequestContextMiddleware
from usersvc.observability.tracing import TracingManager, TracingMiddleware
from usersvc.services.user_store import UserStore


def create_app(settings: Settings | None = None, tracing: TracingManager | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, diagnostic_level=settings.otel_diagnostic_log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.settings.tracing_enabled:
            app.state.tracing.setup()
        try:
            yield
        finally:
            app.state.tracing.shutdown()

    app = FastAPI(title="Users API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.user_store = UserStore.seeded()
    app.state.tracing = tracing or TracingManager(settings)

    app.include_router(users_router)
    app.include_router(profiles_router)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Last added runs first: tracing wraps request context, which wraps the catch-all.
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(TracingMiddleware, tracing=app.state.tracing)

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return "Welcome to the Python API!"

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
