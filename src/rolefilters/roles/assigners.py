"""Role assigners: one request signal in, zero or more decorator layers out.

Every assigner implements ``decorate(surface) -> surface``. None of them
knows about the others; the OR-composition in RoleDecorator is what makes
their grants add up. Settings are validated once at construction.

Assigners:
    LocaleRoleAssigner        locale-<tag> roles from Accept-Language
    RemoteHostRoleAssigner    remote-host-<host>
    RequestHeaderRoleAssigner roles from regexes over one header
    KnownUnknownRoleAssigner  known-user / unknown-user
    StaticRoleAssigner        a fixed list of roles
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from src.rolefilters.config.settings import (
    KnownUnknownRoleSettings,
    LocaleRoleSettings,
    RemoteHostRoleSettings,
    RequestHeaderRoleSettings,
    StaticRoleSettings,
)
from src.rolefilters.logging_utils import safe_header_value, sanitize_for_log
from src.rolefilters.roles.surface import (
    RequestFacts,
    RoleDecorator,
    RoleSurface,
    grant,
)
from src.rolefilters.utils.language_tags import parse_language_tag

logger = logging.getLogger(__name__)


class RoleAssigner(Protocol):
    """Produces a (possibly) further decorated surface."""

    def decorate(self, surface: RoleSurface) -> RoleSurface: ...


@dataclass(frozen=True)
class LocaleRoleRule:
    """Matches ``<prefix><tag>`` when an accepted locale satisfies ``tag``.

    ``locale-en`` matches any English locale, ``locale-en-US`` only
    English/US. A suffix that does not parse as a language tag never
    matches.
    """

    prefix: str

    def matches(self, role: str, facts: RequestFacts) -> bool:
        if not role.startswith(self.prefix):
            return False

        role_tag = parse_language_tag(role[len(self.prefix) :])
        if role_tag is None:
            logger.debug(
                "Locale role suffix is not a language tag",
                extra={"role": sanitize_for_log(role)},
            )
            return False

        return any(role_tag.matches(locale) for locale in facts.locales)


class LocaleRoleAssigner:
    """Installs a LocaleRoleRule layer when the client sent Accept-Language.

    Without the header no locale role can match, so the request is passed
    through undecorated.
    """

    def __init__(self, settings: LocaleRoleSettings | None = None) -> None:
        self.settings = settings or LocaleRoleSettings()
        self._rule = LocaleRoleRule(self.settings.prefix)

    def decorate(self, surface: RoleSurface) -> RoleSurface:
        if not surface.facts.has_accept_language:
            return surface
        return RoleDecorator(surface, self._rule)


class RemoteHostRoleAssigner:
    """Grants ``<prefix><remote host>`` to every request."""

    def __init__(self, settings: RemoteHostRoleSettings | None = None) -> None:
        self.settings = settings or RemoteHostRoleSettings()

    def role_for(self, facts: RequestFacts) -> str:
        return self.settings.prefix + facts.remote_host

    def decorate(self, surface: RoleSurface) -> RoleSurface:
        return grant(surface, self.role_for(surface.facts))


class RequestHeaderRoleAssigner:
    """Grants the role of every pattern that fully matches one header value.

    The header value defaults to "" when absent, so a pattern such as
    ``^$`` can target clients that omit the header. Matching uses
    re.fullmatch: ``mobile`` does not match ``mozilla (mobile)``.
    """

    def __init__(self, settings: RequestHeaderRoleSettings) -> None:
        self.settings = settings

    def header_value(self, facts: RequestFacts) -> str:
        value = facts.header(self.settings.header_name) or ""
        if self.settings.lower_case_value:
            value = value.lower()
        return value

    def matching_roles(self, facts: RequestFacts) -> list[str]:
        value = self.header_value(facts)
        return [
            entry.role
            for entry in self.settings.patterns
            if entry.pattern.fullmatch(value) is not None
        ]

    def decorate(self, surface: RoleSurface) -> RoleSurface:
        roles = self.matching_roles(surface.facts)
        if roles:
            logger.debug(
                "Header patterns matched",
                extra={
                    "header": self.settings.header_name,
                    "value": safe_header_value(
                        self.settings.header_name,
                        surface.facts.header(self.settings.header_name),
                    ),
                    "roles": [sanitize_for_log(role) for role in roles],
                },
            )
        return grant(surface, *roles)


class KnownUnknownRoleAssigner:
    """Grants exactly one of the known / unknown user roles."""

    def __init__(self, settings: KnownUnknownRoleSettings | None = None) -> None:
        self.settings = settings or KnownUnknownRoleSettings()

    def role_for(self, facts: RequestFacts) -> str:
        if facts.is_authenticated:
            return self.settings.known_role
        return self.settings.unknown_role

    def decorate(self, surface: RoleSurface) -> RoleSurface:
        return grant(surface, self.role_for(surface.facts))


class StaticRoleAssigner:
    """Grants a configured list of roles regardless of the request."""

    def __init__(self, settings: StaticRoleSettings | None = None) -> None:
        self.settings = settings or StaticRoleSettings()

    def decorate(self, surface: RoleSurface) -> RoleSurface:
        if self.settings.roles is None:
            return surface
        return grant(surface, *self.settings.roles)
