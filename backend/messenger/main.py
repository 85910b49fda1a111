from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from messenger.api.routes.auth import router as auth_router
from messenger.api.routes.messages import router as messages_router
from messenger.api.routes.profile import router as profile_router
from messenger.core.config import Settings, settings as default_settings
from messenger.core.errors import APIError, InternalError, ValidationFailed
from messenger.core.logging import setup_logging
from messenger.db.init_db import init_db
from messenger.db.session import build_engine, build_session_factory
from messenger.middleware.request_log import RequestLogMiddleware
from messenger.schemas.message import validation_errors
from messenger.security.rate_limiter import RateLimiter
from messenger.services.message_service import MessageService
from messenger.services.message_store import SqlMessageStore


logger = logging.getLogger(__name__)


async def _api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationFailed(validation_errors(exc))
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Details stay in the server log; the client only sees a generic message
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = InternalError()
    request_id = getattr(request.state, "request_id", None)
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(status_code=err.status_code, content=err.to_dict(), headers=headers)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="Messenger", version="0.1.0")

    engine = build_engine(settings.database_url)
    session_factory = build_session_factory(engine)
    store = SqlMessageStore(session_factory, timeout=settings.STORE_TIMEOUT_SECONDS)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.message_service = MessageService(
        store,
        default_limit=settings.DEFAULT_PAGE_LIMIT,
        max_limit=settings.MAX_PAGE_LIMIT,
    )
    app.state.login_limiter = RateLimiter(
        settings.LOGIN_RATE_LIMIT, settings.LOGIN_RATE_WINDOW_SECONDS
    )
    app.state.message_limiter = RateLimiter(
        settings.MESSAGE_RATE_LIMIT, settings.MESSAGE_RATE_WINDOW_SECONDS
    )

    app.add_middleware(RequestLogMiddleware)

    app.add_exception_handler(APIError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(messages_router)

    @app.on_event("startup")
    def _startup() -> None:
        init_db(engine)

    @app.on_event("shutdown")
    def _shutdown() -> None:
        engine.dispose()

    @app.get("/ping", response_class=PlainTextResponse)
    def ping():
        return "Server alive"

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the default app with uvicorn."""
    import uvicorn

    setup_logging(default_settings.LOG_LEVEL, default_settings.LOG_FILE)
    logger.info("Server running on port %s", default_settings.PORT)
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
