"""Typed settings for every filter in the pipeline.

Each model enumerates the options its filter recognises, with the defaults
the filter uses when a parameter is absent. Models are frozen: they are
built once at startup and shared read-only by every request.

Build them directly in code, or from a flat parameter mapping with the
functions in src.rolefilters.config.loader.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LOCALE_ROLE_PREFIX = "locale-"
DEFAULT_REMOTE_HOST_ROLE_PREFIX = "remote-host-"
DEFAULT_KNOWN_USER_ROLE = "known-user"
DEFAULT_UNKNOWN_USER_ROLE = "unknown-user"
DEFAULT_SESSION_COOKIE_NAME = "session"


class _FrozenSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class LocaleRoleSettings(_FrozenSettings):
    """Locale role assigner: grants ``<prefix><language-tag>`` roles."""

    prefix: str = DEFAULT_LOCALE_ROLE_PREFIX


class RemoteHostRoleSettings(_FrozenSettings):
    """Remote-host role assigner: grants ``<prefix><remote-host>``."""

    prefix: str = DEFAULT_REMOTE_HOST_ROLE_PREFIX


class KnownUnknownRoleSettings(_FrozenSettings):
    """Login-presence role assigner role names."""

    known_role: str = Field(DEFAULT_KNOWN_USER_ROLE, min_length=1)
    unknown_role: str = Field(DEFAULT_UNKNOWN_USER_ROLE, min_length=1)


class StaticRoleSettings(_FrozenSettings):
    """Static role assigner. ``roles=None`` installs nothing."""

    roles: tuple[str, ...] | None = None

    @field_validator("roles")
    @classmethod
    def _drop_blank_roles(cls, roles: tuple[str, ...] | None) -> tuple[str, ...] | None:
        if roles is None:
            return None
        return tuple(role for role in roles if role)


class PatternRole(_FrozenSettings):
    """One header pattern and the role it grants on a full match."""

    pattern: re.Pattern
    role: str = Field(..., min_length=1)


class RequestHeaderRoleSettings(_FrozenSettings):
    """Header-pattern role assigner.

    Patterns are compiled when the model is validated; an invalid regex is a
    validation error, never a per-request failure.
    """

    header_name: str = Field(..., min_length=1)
    lower_case_value: bool = True
    patterns: tuple[PatternRole, ...] = ()


class RoleRedirectionSettings(_FrozenSettings):
    """Role-based redirector.

    ``locations`` is evaluated in order; the first role the request holds
    wins. ``send_errors`` turns the pass-through outcomes into 401/403.
    """

    unauthorized_location: str | None = None
    default_location: str | None = None
    locations: tuple[tuple[str, str], ...] = ()
    send_errors: bool = False


class ResponseHeaderSettings(_FrozenSettings):
    """Response header injection."""

    headers: tuple[tuple[str, str], ...] = ()
    additive_mode: bool = False
    post_mode: bool = False


class SessionInvalidatorSettings(_FrozenSettings):
    """Session invalidation endpoint."""

    redirect_location: str | None = None
    cookie_name: str = Field(DEFAULT_SESSION_COOKIE_NAME, min_length=1)
