"""Application factory binding filter parameters to a middleware pipeline.

create_app() reads ``Pipeline.Filters`` from the parameters and installs one
middleware per entry, in request order: the first entry listed sees the
request first. Entries are ``kind`` or ``kind:name``:

    locale             LocaleRoleAssigner
    remote-host        RemoteHostRoleAssigner
    known-unknown      KnownUnknownRoleAssigner
    header:<name>      RequestHeaderRoleAssigner
    static:<name>      StaticRoleAssigner
    redirect:<name>    RoleRedirectionMiddleware
    response-headers:<name>  ResponseHeaderMiddleware
    xhtml              XHTMLAcceptMiddleware

Session invalidation endpoints are mounted for every instance name found
under ``SessionInvalidator.<name>.``, at ``SessionInvalidator.<name>.Path``
(default /logout).

Environment:
    ROLEFILTERS_CONFIG_FILE: JSON parameter file read when params is None
    ENVIRONMENT: Reported by /health (default: dev)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from fastapi import FastAPI, Request
from starlette.authentication import AuthenticationBackend
from starlette.middleware import Middleware
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.routing import BaseRoute, Route

from src.rolefilters.config.loader import (
    SESSION_INVALIDATOR,
    get_params,
    load_known_unknown_settings,
    load_locale_settings,
    load_redirection_settings,
    load_remote_host_settings,
    load_request_header_settings,
    load_response_header_settings,
    load_session_invalidator_settings,
    load_static_settings,
    parse_pipeline,
)
from src.rolefilters.endpoints.session_invalidator import SessionInvalidatorEndpoint
from src.rolefilters.errors import ConfigurationError, UnknownFilterError
from src.rolefilters.logging_utils import get_safe_error_info
from src.rolefilters.middleware.response_headers import ResponseHeaderMiddleware
from src.rolefilters.middleware.role_filters import (
    RoleAssignerMiddleware,
    RoleRedirectionMiddleware,
    get_role_surface,
)
from src.rolefilters.middleware.xhtml_accept import XHTMLAcceptMiddleware
from src.rolefilters.roles.assigners import (
    KnownUnknownRoleAssigner,
    LocaleRoleAssigner,
    RemoteHostRoleAssigner,
    RequestHeaderRoleAssigner,
    StaticRoleAssigner,
)
from src.rolefilters.roles.redirector import RoleRedirector
from src.rolefilters.roles.surface import granted_roles

logger = logging.getLogger(__name__)

ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

SESSION_PATH_OPTION = "Path"
DEFAULT_SESSION_PATH = "/logout"

FilterFactory = Callable[[Mapping[str, str], str], Middleware]

FILTER_FACTORIES: dict[str, FilterFactory] = {
    "locale": lambda params, name: Middleware(
        RoleAssignerMiddleware, assigner=LocaleRoleAssigner(load_locale_settings(params))
    ),
    "remote-host": lambda params, name: Middleware(
        RoleAssignerMiddleware,
        assigner=RemoteHostRoleAssigner(load_remote_host_settings(params)),
    ),
    "known-unknown": lambda params, name: Middleware(
        RoleAssignerMiddleware,
        assigner=KnownUnknownRoleAssigner(load_known_unknown_settings(params)),
    ),
    "header": lambda params, name: Middleware(
        RoleAssignerMiddleware,
        assigner=RequestHeaderRoleAssigner(load_request_header_settings(params, name)),
    ),
    "static": lambda params, name: Middleware(
        RoleAssignerMiddleware,
        assigner=StaticRoleAssigner(load_static_settings(params, name)),
    ),
    "redirect": lambda params, name: Middleware(
        RoleRedirectionMiddleware,
        redirector=RoleRedirector(load_redirection_settings(params, name)),
    ),
    "response-headers": lambda params, name: Middleware(
        ResponseHeaderMiddleware, settings=load_response_header_settings(params, name)
    ),
    "xhtml": lambda params, name: Middleware(XHTMLAcceptMiddleware),
}

VALID_FILTER_KINDS: frozenset[str] = frozenset(FILTER_FACTORIES)


def build_pipeline(params: Mapping[str, str]) -> list[Middleware]:
    """
    Build the configured middleware list in request order.

    All settings are validated here, before the application serves anything.

    Raises:
        UnknownFilterError: If Pipeline.Filters names an unknown kind
        ConfigurationError: If any filter's parameters are invalid
    """
    entries = parse_pipeline(params)
    middleware = []
    for kind, name in entries:
        factory = FILTER_FACTORIES.get(kind)
        if factory is None:
            raise UnknownFilterError(kind, VALID_FILTER_KINDS)
        try:
            middleware.append(factory(params, name))
        except ConfigurationError as e:
            logger.error(
                "Filter refused to initialize",
                extra={"filter": f"{kind}:{name}", "key": e.key, **get_safe_error_info(e)},
            )
            raise
    logger.info(
        "Filter pipeline built",
        extra={"filters": [f"{kind}:{name}" for kind, name in entries]},
    )
    return middleware


def session_instance_names(params: Mapping[str, str]) -> list[str]:
    """Distinct SessionInvalidator instance names, in parameter order."""
    prefix = SESSION_INVALIDATOR + "."
    names: dict[str, None] = {}
    for key in params:
        if key.startswith(prefix):
            name = key[len(prefix) :].split(".", 1)[0]
            if name:
                names.setdefault(name, None)
    return list(names)


def build_session_routes(params: Mapping[str, str]) -> list[BaseRoute]:
    routes: list[BaseRoute] = []
    for name in session_instance_names(params):
        settings = load_session_invalidator_settings(params, name)
        path_key = f"{SESSION_INVALIDATOR}.{name}.{SESSION_PATH_OPTION}"
        routes.append(
            Route(
                params.get(path_key, DEFAULT_SESSION_PATH),
                SessionInvalidatorEndpoint.for_settings(settings),
                name=f"session-{name}",
            )
        )
    return routes


def create_app(
    params: Mapping[str, str] | None = None,
    routes: Sequence[BaseRoute] = (),
    auth_backend: AuthenticationBackend | None = None,
) -> FastAPI:
    """
    Create the FastAPI application with the configured filter pipeline.

    Args:
        params: Filter parameters; read via get_params() when None
        routes: Extra application routes, served behind the filters
        auth_backend: Optional Starlette authentication backend, installed
            ahead of every filter so identity and base roles are available

    Returns:
        Configured FastAPI application
    """
    if params is None:
        params = get_params()

    middleware = build_pipeline(params)
    if auth_backend is not None:
        middleware.insert(0, Middleware(AuthenticationMiddleware, backend=auth_backend))

    app = FastAPI(
        title="Role Filters",
        description="Composable role assignment and role-based redirection",
        version="1.0.0",
        routes=[*build_session_routes(params), *routes],
        middleware=middleware,
    )

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "environment": ENVIRONMENT}

    @app.get("/roles/check/{role}")
    async def check_role(role: str, request: Request) -> dict[str, Any]:
        """Report whether the current request holds ``role``."""
        surface = get_role_surface(request)
        return {"role": role, "granted": surface.is_in_role(role)}

    if ENVIRONMENT != "prod":

        @app.get("/roles")
        async def list_roles(request: Request) -> dict[str, Any]:
            """Fixed roles visible in the chain (debugging aid, not in prod)."""
            surface = get_role_surface(request)
            return {
                "remote_user": surface.facts.remote_user,
                "roles": granted_roles(surface),
            }

    return app
