"""Role query surfaces and the decorator chain built over them.

A role surface answers one question, "is this client in role R?", and
exposes the read-only request facts the assigners decide from. Assigners
never modify a surface; they wrap it:

    base = RequestRoleSurface(facts, granted=frozenset({"staff"}))
    surface = grant(base, "remote-host-10.0.0.1")
    surface = RoleDecorator(surface, LocaleRoleRule("locale-"))

Each RoleDecorator evaluates its own rule first and falls through to the
surface it wraps, so the answer for any role is the OR of every layer plus
the base grants. Adding layers can only add roles, never revoke them.

Surfaces live for one request. They are stored in the ASGI scope under
ROLE_SURFACE_SCOPE_KEY by the middleware in
src.rolefilters.middleware.role_filters.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from starlette.datastructures import Headers

if TYPE_CHECKING:
    from src.rolefilters.utils.language_tags import LanguageTag

ROLE_SURFACE_SCOPE_KEY = "role_surface"


@dataclass(frozen=True)
class RequestFacts:
    """Read-only request facts role rules are evaluated against.

    Attributes:
        remote_host: Client host as reported by the server ("" if unknown)
        headers: Case-insensitive, multi-valued request headers
        locales: Accepted locales, highest preference first
        remote_user: Authenticated identity, None when anonymous
        has_accept_language: Whether the client sent Accept-Language at all
    """

    remote_host: str = ""
    headers: Headers = field(default_factory=Headers)
    locales: tuple[LanguageTag, ...] = ()
    remote_user: str | None = None
    has_accept_language: bool = False

    @property
    def is_authenticated(self) -> bool:
        """True when the request carries a non-empty identity."""
        return bool(self.remote_user)

    def header(self, name: str) -> str | None:
        """First value of a header, None if absent."""
        return self.headers.get(name)

    def header_values(self, name: str) -> list[str]:
        """All values of a header, in the order received."""
        return self.headers.getlist(name)


@runtime_checkable
class RoleSurface(Protocol):
    """Anything that can answer role membership queries for one request."""

    @property
    def facts(self) -> RequestFacts: ...

    def is_in_role(self, role: str) -> bool: ...


class RoleRule(Protocol):
    """A single role-granting rule installed by one decorator layer."""

    def matches(self, role: str, facts: RequestFacts) -> bool: ...


@dataclass(frozen=True)
class RequestRoleSurface:
    """Base of every chain: roles the hosting platform already established.

    Under Starlette these are the scopes of the AuthCredentials placed in
    scope["auth"] by AuthenticationMiddleware.
    """

    facts: RequestFacts
    granted: frozenset[str] = frozenset()

    def is_in_role(self, role: str) -> bool:
        return role in self.granted


@dataclass(frozen=True)
class FixedRoleRule:
    """Grants exactly one role name (case-sensitive equality)."""

    role: str

    def matches(self, role: str, facts: RequestFacts) -> bool:
        return role == self.role


@dataclass(frozen=True)
class RoleDecorator:
    """One layer of the chain: its own rule, then the wrapped surface.

    The rule is consulted first and a match short-circuits, so a layer can
    grant a role the inner surface would deny. Anything the rule does not
    recognise is answered by the inner surface unchanged.
    """

    inner: RoleSurface
    rule: RoleRule

    @property
    def facts(self) -> RequestFacts:
        return self.inner.facts

    def is_in_role(self, role: str) -> bool:
        if self.rule.matches(role, self.facts):
            return True
        return self.inner.is_in_role(role)


def grant(surface: RoleSurface, *roles: str) -> RoleSurface:
    """Wrap ``surface`` in one fixed-role layer per role, in order.

    Granting a role already held adds a redundant layer; query results are
    unchanged.
    """
    for role in roles:
        surface = RoleDecorator(surface, FixedRoleRule(role))
    return surface


def iter_layers(surface: RoleSurface) -> Iterator[RoleSurface]:
    """Yield every layer from the outermost decorator down to the base."""
    current: RoleSurface | None = surface
    while current is not None:
        yield current
        current = current.inner if isinstance(current, RoleDecorator) else None


def granted_roles(surface: RoleSurface) -> list[str]:
    """Fixed role names visible in the chain, outermost first, de-duplicated.

    Rule-based layers (e.g. locale) are not enumerable and are skipped.
    Intended for diagnostics only; authorisation decisions must go through
    is_in_role().
    """
    seen: dict[str, None] = {}
    for layer in iter_layers(surface):
        if isinstance(layer, RoleDecorator) and isinstance(layer.rule, FixedRoleRule):
            seen.setdefault(layer.rule.role, None)
        elif isinstance(layer, RequestRoleSurface):
            for role in sorted(layer.granted):
                seen.setdefault(role, None)
    return list(seen)
