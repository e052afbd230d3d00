"""Starlette middleware that builds and consumes the per-request role chain.

RoleAssignerMiddleware wraps one RoleAssigner. On each request it reads the
current role surface from the ASGI scope (building the base surface on first
use), lets the assigner decorate it, and stores the result back under
ROLE_SURFACE_SCOPE_KEY before calling the next layer. Surfaces are never
modified in place; the scope entry is replaced by a new outer layer.

RoleRedirectionMiddleware is a terminal consumer: it resolves the surface
with a RoleRedirector and either redirects, errors, or passes the request on.

Usage:
    app.add_middleware(RoleRedirectionMiddleware, redirector=RoleRedirector(settings))
    app.add_middleware(RoleAssignerMiddleware, assigner=KnownUnknownRoleAssigner())

Starlette runs the middleware added last first, so assigners are added after
the consumers that depend on them (create_app() handles the ordering).
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import HTTPConnection, Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response
from starlette.types import ASGIApp

from src.rolefilters.logging_utils import sanitize_for_log
from src.rolefilters.roles.assigners import RoleAssigner
from src.rolefilters.roles.redirector import RedirectAction, RoleRedirector
from src.rolefilters.roles.surface import (
    ROLE_SURFACE_SCOPE_KEY,
    RequestFacts,
    RequestRoleSurface,
    RoleSurface,
)
from src.rolefilters.utils.language_tags import parse_accept_language

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    401: "Authentication required",
    403: "Access denied",
}


def get_remote_user(connection: HTTPConnection) -> str | None:
    """Authenticated identity placed in scope["user"] by AuthenticationMiddleware."""
    user = connection.scope.get("user")
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "display_name", "") or None


def build_request_facts(connection: HTTPConnection) -> RequestFacts:
    """Snapshot the request facts role rules are evaluated against."""
    headers = connection.headers
    accept_language = headers.get("accept-language")
    client = connection.client
    return RequestFacts(
        remote_host=client.host if client is not None else "",
        headers=headers,
        locales=parse_accept_language(accept_language),
        remote_user=get_remote_user(connection),
        has_accept_language=accept_language is not None,
    )


def get_role_surface(connection: HTTPConnection) -> RoleSurface:
    """Return the request's current role surface, creating the base if needed.

    The base grants the scopes of scope["auth"] (Starlette AuthCredentials)
    when an authentication backend supplied them.
    """
    surface = connection.scope.get(ROLE_SURFACE_SCOPE_KEY)
    if surface is None:
        auth = connection.scope.get("auth")
        surface = RequestRoleSurface(
            facts=build_request_facts(connection),
            granted=frozenset(getattr(auth, "scopes", None) or ()),
        )
        connection.scope[ROLE_SURFACE_SCOPE_KEY] = surface
    return surface


class RoleAssignerMiddleware(BaseHTTPMiddleware):
    """Applies one role assigner to every request."""

    def __init__(self, app: ASGIApp, assigner: RoleAssigner) -> None:
        super().__init__(app)
        self.assigner = assigner

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        surface = get_role_surface(request)
        decorated = self.assigner.decorate(surface)
        if decorated is not surface:
            request.scope[ROLE_SURFACE_SCOPE_KEY] = decorated
        return await call_next(request)


class RoleRedirectionMiddleware(BaseHTTPMiddleware):
    """Redirects requests based on the roles assigned upstream."""

    def __init__(self, app: ASGIApp, redirector: RoleRedirector) -> None:
        super().__init__(app)
        self.redirector = redirector

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        decision = self.redirector.resolve(get_role_surface(request))

        if decision.action is RedirectAction.REDIRECT:
            logger.info(
                "Role redirect",
                extra={
                    "path": sanitize_for_log(request.url.path),
                    "reason": sanitize_for_log(decision.reason),
                    "location": decision.location,
                },
            )
            return RedirectResponse(decision.location, status_code=302)

        if decision.action is RedirectAction.ERROR:
            logger.debug(
                "Role redirect refused request",
                extra={"status_code": decision.status_code, "reason": decision.reason},
            )
            return PlainTextResponse(
                ERROR_MESSAGES.get(decision.status_code, "Error"),
                status_code=decision.status_code,
            )

        return await call_next(request)
