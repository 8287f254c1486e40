"""
Audit logging middleware.
Logs each request to the configured assessment endpoints with its response status.
"""
import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from .config import settings

logger = logging.getLogger(__name__)

ACTION_MAP = {
    "GET": "view",
    "POST": "evaluate",
}


class AuditMiddleware(BaseHTTPMiddleware):
    """Middleware that audit-logs access to assessment endpoints."""

    def __init__(self, app: ASGIApp, path_prefixes: Optional[Iterable[str]] = None):
        super().__init__(app)
        if path_prefixes is None:
            path_prefixes = settings.AUDIT_PATH_PREFIXES
        self.path_prefixes = tuple(path_prefixes)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not any(path.startswith(prefix) for prefix in self.path_prefixes):
            return await call_next(request)

        action = ACTION_MAP.get(request.method, request.method.lower())
        client = request.client.host if request.client else None

        try:
            response = await call_next(request)
        except Exception:
            logger.warning("Audit: %s %s (action=%s, client=%s) raised", request.method, path, action, client)
            raise

        logger.info(
            "Audit: %s %s (action=%s, client=%s) -> %d",
            request.method, path, action, client, response.status_code,
        )
        return response
