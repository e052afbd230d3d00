"""Role-based redirect resolution.

resolve() decides what happens to a request given its role surface:

1. anonymous and an unauthorized location is configured -> redirect there
2. first configured role the request holds -> redirect to its location
3. a default location is configured -> redirect there
4. otherwise pass through (or 401 / 403 when send_errors is enabled)

Roles are tried in configuration order, so when a request holds several
mapped roles the one listed first wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from src.rolefilters.config.settings import RoleRedirectionSettings
from src.rolefilters.roles.surface import RoleSurface

logger = logging.getLogger(__name__)


class RedirectAction(StrEnum):
    """Outcome kinds of a redirect resolution."""

    REDIRECT = "redirect"
    ERROR = "error"
    PASS = "pass"


@dataclass(frozen=True)
class RedirectDecision:
    """Result of resolving one request.

    Attributes:
        action: What the middleware should do
        location: Redirect target (REDIRECT only)
        status_code: HTTP status (ERROR only)
        reason: Which rule fired, for logging
    """

    action: RedirectAction
    location: str | None = None
    status_code: int | None = None
    reason: str = ""

    @classmethod
    def redirect(cls, location: str, reason: str) -> RedirectDecision:
        return cls(RedirectAction.REDIRECT, location=location, reason=reason)

    @classmethod
    def error(cls, status_code: int, reason: str) -> RedirectDecision:
        return cls(RedirectAction.ERROR, status_code=status_code, reason=reason)


PASS_THROUGH = RedirectDecision(RedirectAction.PASS, reason="no-match")


class RoleRedirector:
    """Chooses a redirect target from the request's current roles."""

    def __init__(self, settings: RoleRedirectionSettings) -> None:
        self.settings = settings
        for role, location in settings.locations:
            if not location:
                logger.warning(
                    "Redirect location for role is empty",
                    extra={"role": role},
                )

    def resolve(self, surface: RoleSurface) -> RedirectDecision:
        settings = self.settings
        authenticated = surface.facts.is_authenticated

        if not authenticated and settings.unauthorized_location is not None:
            return RedirectDecision.redirect(
                settings.unauthorized_location, reason="unauthorized"
            )

        for role, location in settings.locations:
            if surface.is_in_role(role):
                return RedirectDecision.redirect(location, reason=f"role:{role}")

        if settings.default_location is not None:
            return RedirectDecision.redirect(
                settings.default_location, reason="default"
            )

        if settings.send_errors:
            if not authenticated:
                return RedirectDecision.error(401, reason="unauthorized")
            return RedirectDecision.error(403, reason="forbidden")

        return PASS_THROUGH
