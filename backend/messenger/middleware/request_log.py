"""
Request logging middleware for FastAPI.
Logs method, path, status and duration, and tags every response with an
X-Request-ID header (echoing the client's one when present).
"""
import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


logger = logging.getLogger("messenger.access")


class RequestLogMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            # The 500 itself is rendered further out, by the unhandled-error handler
            self._log(request, 500, started, request_id)
            raise

        self._log(request, response.status_code, started, request_id)
        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _log(request: Request, status_code: int, started: float, request_id: str) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms) id=%s",
            request.method,
            request.url.path,
            status_code,
            elapsed_ms,
            request_id,
        )
