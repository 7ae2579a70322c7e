"""
Request context middleware for FastAPI

Assigns every request an id (taken from the incoming X-Request-ID header when
present), exposes it to log records through core.logging_config, echoes it
back on the response and writes one access log line per request.
"""

import logging
import time
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging_config import set_request_id

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware binding a request id to the logging context of each request."""

    def __init__(self, app, config: Optional[Dict[str, Any]] = None):
        super().__init__(app)
        self.config = config or {}

        # Header used to read and echo the request id
        self.header_name = self.config.get('header_name', 'X-Request-ID')

        # Endpoints that skip the access log line (the id is still assigned)
        self.exclude_paths = self.config.get('exclude_paths', [])

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.header_name) or str(uuid4())
        set_request_id(request_id)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[self.header_name] = request_id

        if not any(request.url.path.startswith(path) for path in self.exclude_paths):
            logger.info(
                f"Request: {request.method} {request.url.path} -> {response.status_code} ({duration_ms} ms)",
                extra={"path": request.url.path},
            )

        set_request_id(None)
        return response


def create_request_context_config() -> Dict[str, Any]:
    """Create default configuration for the request context middleware."""
    return {
        'header_name': 'X-Request-ID',
        'exclude_paths': [
            '/docs',  # API documentation
            '/openapi.json',  # OpenAPI schema
        ],
    }
