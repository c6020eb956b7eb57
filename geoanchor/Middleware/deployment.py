# geoanchor/Middleware/deployment.py
"""
Deployment Middleware
=====================
HTTP plumbing for running behind a load balancer or under a path prefix.

Environment:
    ROOT_PATH             - path prefix stripped from incoming requests ("/anchor")
    INSTANCE_ID           - echoed as X-Instance-ID on every response
    HTTP_ALLOWED_ORIGINS  - CORS origins for REST ("*" or comma-separated)
    WS_ALLOWED_ORIGINS    - origins accepted on the /logs WebSocket
"""

import os
from typing import List, Tuple

from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware


def normalize_root_path(raw: str) -> str:
    """'anchor/' → '/anchor'; empty stays empty."""
    value = (raw or "").strip().rstrip("/")
    if value and not value.startswith("/"):
        value = "/" + value
    return value


def parse_origins(csv_value: str) -> Tuple[bool, List[str]]:
    """
    Returns (allow_all, origins).

    Examples:
        "*" → (True, ["*"])
        "https://wallet.app, https://admin.app" → (False, ["https://wallet.app", "https://admin.app"])
        "" → (False, [])
    """
    value = (csv_value or "").strip()
    if value == "*":
        return True, ["*"]
    return False, [origin.strip() for origin in value.split(",") if origin.strip()]


class StripPrefixMiddleware(BaseHTTPMiddleware):
    """
    Routes are declared without ROOT_PATH; the prefix is removed here.

        /anchor/locations/update → /locations/update
        /anchor                  → 307 to /anchor/
    """

    def __init__(self, app, prefix: str):
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(self, request, call_next):
        path = request.url.path

        if self.prefix and path == self.prefix:
            return RedirectResponse(url=self.prefix + "/", status_code=307)
        if self.prefix and path.startswith(self.prefix + "/"):
            request.scope["path"] = path[len(self.prefix):]

        return await call_next(request)


class InstanceHeaderMiddleware(BaseHTTPMiddleware):
    """Tags responses with the replica that produced the anchor decision."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        instance_id = os.getenv("INSTANCE_ID")
        if instance_id:
            response.headers["X-Instance-ID"] = instance_id
        return response
