"""
Pytest Configuration and Shared Fixtures
=========================================

Common fixtures and builders used across all test modules.

For Developers:
    - Import fixtures by name in test files (pytest auto-discovers conftest.py)
    - Use make_facts() / make_surface() to build role surfaces without a
      running application
    - Use make_client() to run a Starlette app behind a filter pipeline
    - Use assert_warning_logged() to declare expected WARNING logs
"""

import logging
import os

import pytest
from starlette.applications import Starlette
from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    SimpleUser,
)
from starlette.datastructures import Headers
from starlette.middleware import Middleware
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from src.rolefilters.middleware.role_filters import get_role_surface
from src.rolefilters.roles.surface import RequestFacts, RequestRoleSurface
from src.rolefilters.utils.language_tags import parse_accept_language

os.environ.setdefault("ENVIRONMENT", "test")


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables after each test.

    Ensures tests don't pollute each other's environment.
    """
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


# =============================================================================
# Role surface builders
# =============================================================================


def make_facts(
    remote_host: str = "127.0.0.1",
    headers: dict[str, str] | None = None,
    remote_user: str | None = None,
) -> RequestFacts:
    """Build RequestFacts the way the middleware would from a request.

    Locales are parsed from the Accept-Language entry of ``headers``.
    """
    headers = Headers(headers=headers or {})
    accept_language = headers.get("accept-language")
    return RequestFacts(
        remote_host=remote_host,
        headers=headers,
        locales=parse_accept_language(accept_language),
        remote_user=remote_user,
        has_accept_language=accept_language is not None,
    )


def make_surface(
    granted: set[str] | frozenset[str] = frozenset(),
    **facts_kwargs,
) -> RequestRoleSurface:
    """Base role surface with platform-granted roles."""
    return RequestRoleSurface(facts=make_facts(**facts_kwargs), granted=frozenset(granted))


# =============================================================================
# Starlette application builders
# =============================================================================


class HeaderAuthBackend(AuthenticationBackend):
    """Authenticates ``X-Test-User``; ``X-Test-Scopes`` become base roles."""

    async def authenticate(self, conn):
        username = conn.headers.get("x-test-user")
        if not username:
            return None
        scopes = [s.strip() for s in conn.headers.get("x-test-scopes", "").split(",") if s.strip()]
        return AuthCredentials(scopes), SimpleUser(username)


async def role_probe(request: Request) -> Response:
    """Endpoint reporting role membership for ``?role=`` query values."""
    surface = get_role_surface(request)
    roles = request.query_params.getlist("role")
    return JSONResponse({role: surface.is_in_role(role) for role in roles})


def make_client(
    middleware: list[Middleware],
    with_auth: bool = True,
    routes: list[Route] | None = None,
) -> TestClient:
    """Starlette app with ``middleware`` in request order and a /probe route."""
    stack = list(middleware)
    if with_auth:
        stack.insert(0, Middleware(AuthenticationMiddleware, backend=HeaderAuthBackend()))
    app = Starlette(
        routes=[Route("/probe", role_probe), *(routes or [])],
        middleware=stack,
    )
    return TestClient(app, follow_redirects=False)


# =============================================================================
# Log Assertion Helpers
# =============================================================================


def assert_warning_logged(caplog, pattern: str):
    """
    Helper to assert a WARNING log was captured.

    Args:
        caplog: pytest caplog fixture
        pattern: String pattern to search for in log messages

    Raises:
        AssertionError: If no WARNING log matches the pattern
    """
    assert any(
        pattern in record.message
        for record in caplog.records
        if record.levelno == logging.WARNING
    ), f"Expected WARNING log matching '{pattern}' not found"
