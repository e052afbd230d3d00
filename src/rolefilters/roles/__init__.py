"""Role surfaces, assigners and redirect resolution."""

from src.rolefilters.roles.assigners import (
    KnownUnknownRoleAssigner,
    LocaleRoleAssigner,
    LocaleRoleRule,
    RemoteHostRoleAssigner,
    RequestHeaderRoleAssigner,
    RoleAssigner,
    StaticRoleAssigner,
)
from src.rolefilters.roles.redirector import (
    RedirectAction,
    RedirectDecision,
    RoleRedirector,
)
from src.rolefilters.roles.surface import (
    ROLE_SURFACE_SCOPE_KEY,
    FixedRoleRule,
    RequestFacts,
    RequestRoleSurface,
    RoleDecorator,
    RoleSurface,
    grant,
    granted_roles,
)

__all__ = [
    "ROLE_SURFACE_SCOPE_KEY",
    "FixedRoleRule",
    "KnownUnknownRoleAssigner",
    "LocaleRoleAssigner",
    "LocaleRoleRule",
    "RedirectAction",
    "RedirectDecision",
    "RemoteHostRoleAssigner",
    "RequestFacts",
    "RequestHeaderRoleAssigner",
    "RequestRoleSurface",
    "RoleAssigner",
    "RoleDecorator",
    "RoleRedirector",
    "RoleSurface",
    "StaticRoleAssigner",
    "grant",
    "granted_roles",
]
