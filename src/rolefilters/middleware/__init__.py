"""Starlette middleware for role assignment, redirection and response fixes."""

from src.rolefilters.middleware.require_role import require_role
from src.rolefilters.middleware.response_headers import (
    ResponseHeaderMiddleware,
    apply_response_headers,
)
from src.rolefilters.middleware.role_filters import (
    RoleAssignerMiddleware,
    RoleRedirectionMiddleware,
    build_request_facts,
    get_role_surface,
)
from src.rolefilters.middleware.xhtml_accept import (
    XHTMLAcceptMiddleware,
    accepts_xhtml,
    fix_content_type,
)

__all__ = [
    "ResponseHeaderMiddleware",
    "RoleAssignerMiddleware",
    "RoleRedirectionMiddleware",
    "XHTMLAcceptMiddleware",
    "accepts_xhtml",
    "apply_response_headers",
    "build_request_facts",
    "fix_content_type",
    "get_role_surface",
    "require_role",
]
