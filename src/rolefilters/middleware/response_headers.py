"""Configured response header injection.

Each configured header is either set (replacing existing values) or, in
additive mode, appended. Timing follows the filter's mode:

- pre mode (default): headers behave as if applied before the endpoint ran,
  so a header the endpoint set itself takes precedence in both set and
  additive mode; ours is only added when the endpoint left it unset.
- post mode: headers are applied after the endpoint, so set mode overrides
  the endpoint's values and additive mode appends to them.

Typical use is cache policy for static resources:

    SetResponseHeaderFilter.static.Cache-Control = max-age=3600, public
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.rolefilters.config.settings import ResponseHeaderSettings

logger = logging.getLogger(__name__)


def apply_response_headers(response: Response, settings: ResponseHeaderSettings) -> Response:
    """Apply configured headers to ``response`` according to its mode."""
    headers = response.headers
    for name, value in settings.headers:
        if not settings.post_mode:
            headers.setdefault(name, value)
        elif settings.additive_mode:
            headers.append(name, value)
        else:
            headers[name] = value
    return response


class ResponseHeaderMiddleware(BaseHTTPMiddleware):
    """Sets or adds configured headers on every response."""

    def __init__(self, app: ASGIApp, settings: ResponseHeaderSettings) -> None:
        super().__init__(app)
        self.settings = settings
        logger.debug(
            "Response header filter configured",
            extra={
                "headers": [name for name, _ in settings.headers],
                "additive_mode": settings.additive_mode,
                "post_mode": settings.post_mode,
            },
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        return apply_response_headers(response, self.settings)
