"""Logout endpoint: drop the client session, then redirect.

GET clears the server-side session when a session middleware is installed,
always sends an expiring session cookie (so stale clients forget it even if
the server kept no session), and redirects to the configured location. With
no location configured the response is 204 No Content.
"""

from __future__ import annotations

import logging

from starlette.endpoints import HTTPEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from src.rolefilters.config.settings import SessionInvalidatorSettings
from src.rolefilters.utils.cookie_helpers import make_expired_cookie

logger = logging.getLogger(__name__)


def invalidate_session(request: Request) -> bool:
    """Clear the request's session if one is attached. Returns True if cleared."""
    if "session" not in request.scope:
        return False
    request.session.clear()
    return True


def build_invalidation_response(
    request: Request, settings: SessionInvalidatorSettings
) -> Response:
    """Response carrying the expired cookie and the configured redirect."""
    if settings.redirect_location is not None:
        response: Response = RedirectResponse(settings.redirect_location, status_code=302)
    else:
        response = Response(status_code=204)

    path = request.scope.get("root_path") or "/"
    response.headers.append(
        "set-cookie",
        make_expired_cookie(
            settings.cookie_name,
            path=path,
            secure=request.url.scheme == "https",
        ),
    )
    return response


class SessionInvalidatorEndpoint(HTTPEndpoint):
    """Starlette endpoint; settings are bound with ``for_settings()``."""

    settings = SessionInvalidatorSettings()

    @classmethod
    def for_settings(cls, settings: SessionInvalidatorSettings) -> type[SessionInvalidatorEndpoint]:
        """Subclass bound to ``settings``, suitable for ``Route(path, endpoint)``."""
        return type(cls.__name__, (cls,), {"settings": settings})

    async def get(self, request: Request) -> Response:
        cleared = invalidate_session(request)
        logger.info(
            "Session invalidated",
            extra={"session_cleared": cleared, "redirect": self.settings.redirect_location},
        )
        return build_invalidation_response(request, self.settings)
