"""Access control for the Streamable HTTP transport.

Only used when ``server.transport`` is ``http``; stdio needs none of this.
Two checks run before a request reaches the MCP app:

- Bearer key, when ``server.api_key`` is configured.
- Browser origin, restricted to localhost to block DNS rebinding.

Written as plain ASGI so streamed responses pass through unbuffered.
"""

from __future__ import annotations

import re
import secrets
from typing import TYPE_CHECKING

import structlog
from starlette.datastructures import Headers
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

    from firstcommit.config import ServerSettings

log = structlog.get_logger()

_LOCALHOST_ORIGIN = re.compile(r"^https?://(localhost|127\.0\.0\.1|\[::1\])(:\d+)?$")
_LOOPBACK_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})


class HTTPAccessGuard:
    def __init__(self, app: ASGIApp, *, api_key: str | None = None) -> None:
        self.app = app
        self._api_key = api_key

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            headers = Headers(scope=scope)

            if self._api_key is not None and not self._authorized(headers.get("authorization", "")):
                await Response("Unauthorized", status_code=401)(scope, receive, send)
                return

            origin = headers.get("origin", "")
            if origin and not _LOCALHOST_ORIGIN.match(origin):
                log.warning("http_origin_rejected", origin=origin)
                await Response("Forbidden", status_code=403)(scope, receive, send)
                return

        await self.app(scope, receive, send)

    def _authorized(self, header: str) -> bool:
        scheme, _, supplied = header.partition(" ")
        if scheme != "Bearer" or not supplied:
            return False
        return secrets.compare_digest(supplied.encode(), self._api_key.encode())


def guard_http_app(app: ASGIApp, settings: ServerSettings) -> HTTPAccessGuard:
    """Wrap ``app`` with access checks, warning when it is reachable off-host without a key."""
    api_key = settings.api_key.get_secret_value() if settings.api_key is not None else None
    if not api_key:
        api_key = None
        if settings.host not in _LOOPBACK_HOSTS:
            log.warning(
                "http_server_unauthenticated",
                host=settings.host,
                message="Set FIRSTCOMMIT__SERVER__API_KEY to require a bearer key.",
            )
    return HTTPAccessGuard(app, api_key=api_key)
