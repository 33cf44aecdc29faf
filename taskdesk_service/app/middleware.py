"""Middleware configuration for FastAPI application."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from taskdesk_service.infra.logging import log_context

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request, and every log record it emits, with a request id."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        with log_context(request_id=request_id, user=request.headers.get("X-User-Name")):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def configure_middleware(app: FastAPI) -> None:
    app.add_middleware(RequestIDMiddleware)
