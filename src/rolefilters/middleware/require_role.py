"""Role-based access control dependency for FastAPI endpoints.

Reads the role surface assembled by the role filters and rejects requests
that do not hold the required role.

Usage:
    from src.rolefilters.middleware import require_role

    @app.get("/admin", dependencies=[Depends(require_role("staff"))])
    async def admin():
        ...

Security:
    - Generic error message prevents role enumeration
    - Empty role names are rejected at decoration time
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import HTTPException, Request

from src.rolefilters.errors import ConfigurationError
from src.rolefilters.logging_utils import sanitize_for_log
from src.rolefilters.middleware.role_filters import get_role_surface
from src.rolefilters.roles.surface import RoleSurface

logger = logging.getLogger(__name__)


def require_role(required_role: str) -> Callable[[Request], RoleSurface]:
    """Dependency factory for role-based access control.

    Args:
        required_role: Role the request must hold

    Returns:
        A dependency returning the request's role surface when the role is
        held, raising HTTPException(403) otherwise

    Raises:
        ConfigurationError: At app construction if the role name is empty
    """
    if not required_role:
        raise ConfigurationError("require_role() needs a non-empty role name")

    def dependency(request: Request) -> RoleSurface:
        surface = get_role_surface(request)
        if not surface.is_in_role(required_role):
            # SECURITY: Generic message prevents role enumeration
            logger.debug(
                f"require_role({required_role}): denied",
                extra={"path": sanitize_for_log(request.url.path)},
            )
            raise HTTPException(status_code=403, detail="Access denied")
        return surface

    return dependency
