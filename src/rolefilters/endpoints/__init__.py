"""Starlette endpoints."""

from src.rolefilters.endpoints.session_invalidator import (
    SessionInvalidatorEndpoint,
    build_invalidation_response,
    invalidate_session,
)

__all__ = [
    "SessionInvalidatorEndpoint",
    "build_invalidation_response",
    "invalidate_session",
]
