"""
Filter Parameter Loader
=======================

Turns a flat mapping of string parameters into typed filter settings.

Parameters use the key conventions of the filters they configure. Keys that
carry a filter instance name look like ``<FilterKind>.<name>.<option>``:

    LocaleRoleFilter.Prefix                           locale-
    RemoteHostRoleFilter.Prefix                       remote-host-
    KnownUnknownRoleFilter.KnownUserRole              known-user
    KnownUnknownRoleFilter.UnknownUserRole            unknown-user
    RequestHeaderRoleFilter.<name>.HEADER_NAME        User-Agent
    RequestHeaderRoleFilter.<name>.LOWER_CASE_VALUE   true
    RequestHeaderRoleFilter.<name>.<regex>            <role>
    StaticRoleFilter.<name>.Roles                     a, b, c
    RoleRedirectionFilter.<name>.UnauthorizedLocation /login
    RoleRedirectionFilter.<name>.DefaultLocation      /home
    RoleRedirectionFilter.<name>.SendErrors           false
    RoleRedirectionFilter.<name>.<role>               <location>
    SetResponseHeaderFilter.<name>.AdditiveMode.Enable false
    SetResponseHeaderFilter.<name>.PostMode.Enable    false
    SetResponseHeaderFilter.<name>.<Header-Name>      <value>
    SessionInvalidator.<name>.RedirectLocation        /
    SessionInvalidator.<name>.CookieName              session
    Pipeline.Filters                                  locale, header:ua, redirect:home

Prefix scanning happens here, once. Every other module only sees settings
models.

For On-Call Engineers:
    If the application fails at startup with ConfigurationError:
    1. The message names the offending key
    2. Check ROLEFILTERS_CONFIG_FILE points at a readable JSON object
    3. Header pattern keys must be valid Python regular expressions

For Developers:
    - Use get_params() to read the parameter file named by the environment
    - Use the load_*_settings() functions to build one filter's settings
    - Mapping order is preserved: redirect roles are tried in file order
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from src.rolefilters.config.settings import (
    KnownUnknownRoleSettings,
    LocaleRoleSettings,
    PatternRole,
    RemoteHostRoleSettings,
    RequestHeaderRoleSettings,
    ResponseHeaderSettings,
    RoleRedirectionSettings,
    SessionInvalidatorSettings,
    StaticRoleSettings,
)
from src.rolefilters.errors import ConfigurationError, InvalidPatternError

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "ROLEFILTERS_CONFIG_FILE"

LOCALE_PREFIX_KEY = "LocaleRoleFilter.Prefix"
REMOTE_HOST_PREFIX_KEY = "RemoteHostRoleFilter.Prefix"
KNOWN_USER_ROLE_KEY = "KnownUnknownRoleFilter.KnownUserRole"
UNKNOWN_USER_ROLE_KEY = "KnownUnknownRoleFilter.UnknownUserRole"

HEADER_FILTER = "RequestHeaderRoleFilter"
HEADER_NAME_OPTION = "HEADER_NAME"
LOWER_CASE_VALUE_OPTION = "LOWER_CASE_VALUE"

STATIC_FILTER = "StaticRoleFilter"
ROLES_OPTION = "Roles"

REDIRECT_FILTER = "RoleRedirectionFilter"
UNAUTHORIZED_LOCATION_OPTION = "UnauthorizedLocation"
DEFAULT_LOCATION_OPTION = "DefaultLocation"
SEND_ERRORS_OPTION = "SendErrors"

RESPONSE_HEADER_FILTER = "SetResponseHeaderFilter"
ADDITIVE_MODE_OPTION = "AdditiveMode.Enable"
POST_MODE_OPTION = "PostMode.Enable"

SESSION_INVALIDATOR = "SessionInvalidator"
REDIRECT_LOCATION_OPTION = "RedirectLocation"
COOKIE_NAME_OPTION = "CookieName"

PIPELINE_FILTERS_KEY = "Pipeline.Filters"

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}
_ROLE_LIST_SPLIT_RE = re.compile(r"\s*,\s*")

S = TypeVar("S", bound=BaseModel)


def get_params() -> dict[str, str]:
    """
    Load filter parameters from the file named by ROLEFILTERS_CONFIG_FILE.

    Returns:
        Parameter mapping, empty if the variable is not set

    Raises:
        ConfigurationError: If the file is unreadable or not a JSON object
    """
    path = os.environ.get(CONFIG_FILE_ENV, "")
    if not path:
        logger.info("No filter parameter file configured, using defaults")
        return {}
    return load_params(Path(path))


def load_params(path: Path) -> dict[str, str]:
    """
    Read a JSON object of string parameters, preserving key order.

    Non-string scalar values (true, 3) are converted with str(); booleans
    become "true"/"false" so parse_bool() accepts them.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read parameter file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Parameter file {path} is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Parameter file {path} must contain a JSON object")

    params: dict[str, str] = {}
    for key, value in raw.items():
        if isinstance(value, (dict, list)) or value is None:
            raise ConfigurationError(
                f"Parameter {key!r} must be a string, got {type(value).__name__}",
                key=key,
            )
        if isinstance(value, bool):
            value = "true" if value else "false"
        params[key] = str(value)

    logger.info(
        "Filter parameters loaded",
        extra={"path": str(path), "parameter_count": len(params)},
    )
    return params


def parse_bool(value: str | None, default: bool, key: str = "") -> bool:
    """
    Parse a boolean parameter.

    Example:
        >>> parse_bool("TRUE", default=False)
        True
        >>> parse_bool(None, default=True)
        True

    Raises:
        ConfigurationError: If the value is not a recognised boolean
    """
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key or 'value'} must be a boolean, got {value!r}", key=key)


def parse_role_list(value: str) -> tuple[str, ...]:
    """
    Split a comma separated role list, trimming whitespace around commas.

    Example:
        >>> parse_role_list(" staff , beta,admin ")
        ('staff', 'beta', 'admin')
    """
    return tuple(_ROLE_LIST_SPLIT_RE.split(value.strip()))


def instance_prefix(filter_kind: str, name: str) -> str:
    """Key prefix for a named filter instance, e.g. ``StaticRoleFilter.main.``."""
    return f"{filter_kind}.{name}."


def iter_instance_params(
    params: Mapping[str, str], prefix: str, reserved: set[str]
) -> Iterator[tuple[str, str]]:
    """Yield ``(suffix, value)`` for keys under ``prefix`` that are not options."""
    for key, value in params.items():
        if not key.startswith(prefix):
            continue
        suffix = key[len(prefix) :]
        if suffix in reserved or not suffix:
            continue
        yield suffix, value


def _build(model: Callable[..., S], key: str, **fields) -> S:
    """Instantiate a settings model, converting validation failures."""
    try:
        return model(**fields)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings for {key}: {e}", key=key) from e


def load_locale_settings(params: Mapping[str, str]) -> LocaleRoleSettings:
    fields = {}
    if LOCALE_PREFIX_KEY in params:
        fields["prefix"] = params[LOCALE_PREFIX_KEY]
    return _build(LocaleRoleSettings, LOCALE_PREFIX_KEY, **fields)


def load_remote_host_settings(params: Mapping[str, str]) -> RemoteHostRoleSettings:
    fields = {}
    if REMOTE_HOST_PREFIX_KEY in params:
        fields["prefix"] = params[REMOTE_HOST_PREFIX_KEY]
    return _build(RemoteHostRoleSettings, REMOTE_HOST_PREFIX_KEY, **fields)


def load_known_unknown_settings(params: Mapping[str, str]) -> KnownUnknownRoleSettings:
    fields = {}
    if KNOWN_USER_ROLE_KEY in params:
        fields["known_role"] = params[KNOWN_USER_ROLE_KEY]
    if UNKNOWN_USER_ROLE_KEY in params:
        fields["unknown_role"] = params[UNKNOWN_USER_ROLE_KEY]
    return _build(KnownUnknownRoleSettings, "KnownUnknownRoleFilter", **fields)


def load_request_header_settings(
    params: Mapping[str, str], name: str
) -> RequestHeaderRoleSettings:
    """
    Build header-pattern settings for one named filter instance.

    Every key under the instance prefix other than HEADER_NAME and
    LOWER_CASE_VALUE is a regex; its value is the role granted.

    Raises:
        InvalidPatternError: If any pattern key fails to compile
        ConfigurationError: If HEADER_NAME is missing
    """
    prefix = instance_prefix(HEADER_FILTER, name)
    header_name = params.get(prefix + HEADER_NAME_OPTION)
    if not header_name:
        raise ConfigurationError(
            f"{prefix + HEADER_NAME_OPTION} is required", key=prefix + HEADER_NAME_OPTION
        )

    lower_case_value = parse_bool(
        params.get(prefix + LOWER_CASE_VALUE_OPTION),
        default=True,
        key=prefix + LOWER_CASE_VALUE_OPTION,
    )

    patterns = []
    reserved = {HEADER_NAME_OPTION, LOWER_CASE_VALUE_OPTION}
    for pattern_text, role in iter_instance_params(params, prefix, reserved):
        try:
            compiled = re.compile(pattern_text)
        except re.error as e:
            raise InvalidPatternError(pattern_text, str(e)) from e
        patterns.append(_build(PatternRole, prefix + pattern_text, pattern=compiled, role=role))

    settings = _build(
        RequestHeaderRoleSettings,
        prefix.rstrip("."),
        header_name=header_name,
        lower_case_value=lower_case_value,
        patterns=tuple(patterns),
    )
    logger.info(
        "Header role filter configured",
        extra={"filter": name, "header": header_name, "pattern_count": len(patterns)},
    )
    return settings


def load_static_settings(params: Mapping[str, str], name: str) -> StaticRoleSettings:
    key = instance_prefix(STATIC_FILTER, name) + ROLES_OPTION
    roles_value = params.get(key)
    roles = parse_role_list(roles_value) if roles_value is not None else None
    return _build(StaticRoleSettings, key, roles=roles)


def load_redirection_settings(
    params: Mapping[str, str], name: str
) -> RoleRedirectionSettings:
    """
    Build redirector settings for one named filter instance.

    Role entries keep the order of ``params``; that order is the tie-break
    when a request holds several mapped roles.
    """
    prefix = instance_prefix(REDIRECT_FILTER, name)
    reserved = {UNAUTHORIZED_LOCATION_OPTION, DEFAULT_LOCATION_OPTION, SEND_ERRORS_OPTION}
    locations = tuple(iter_instance_params(params, prefix, reserved))

    settings = _build(
        RoleRedirectionSettings,
        prefix.rstrip("."),
        unauthorized_location=params.get(prefix + UNAUTHORIZED_LOCATION_OPTION),
        default_location=params.get(prefix + DEFAULT_LOCATION_OPTION),
        locations=locations,
        send_errors=parse_bool(
            params.get(prefix + SEND_ERRORS_OPTION),
            default=False,
            key=prefix + SEND_ERRORS_OPTION,
        ),
    )
    logger.info(
        "Role redirection filter configured",
        extra={"filter": name, "role_count": len(locations)},
    )
    return settings


def load_response_header_settings(
    params: Mapping[str, str], name: str
) -> ResponseHeaderSettings:
    prefix = instance_prefix(RESPONSE_HEADER_FILTER, name)
    reserved = {ADDITIVE_MODE_OPTION, POST_MODE_OPTION}
    return _build(
        ResponseHeaderSettings,
        prefix.rstrip("."),
        headers=tuple(iter_instance_params(params, prefix, reserved)),
        additive_mode=parse_bool(
            params.get(prefix + ADDITIVE_MODE_OPTION),
            default=False,
            key=prefix + ADDITIVE_MODE_OPTION,
        ),
        post_mode=parse_bool(
            params.get(prefix + POST_MODE_OPTION),
            default=False,
            key=prefix + POST_MODE_OPTION,
        ),
    )


def load_session_invalidator_settings(
    params: Mapping[str, str], name: str
) -> SessionInvalidatorSettings:
    prefix = instance_prefix(SESSION_INVALIDATOR, name)
    fields = {"redirect_location": params.get(prefix + REDIRECT_LOCATION_OPTION)}
    if prefix + COOKIE_NAME_OPTION in params:
        fields["cookie_name"] = params[prefix + COOKIE_NAME_OPTION]
    return _build(SessionInvalidatorSettings, prefix.rstrip("."), **fields)


def parse_pipeline(params: Mapping[str, str]) -> list[tuple[str, str]]:
    """
    Parse ``Pipeline.Filters`` into ``(kind, instance name)`` pairs.

    Entries are ``kind`` or ``kind:name``; the name defaults to the kind.
    Kind validation is left to the pipeline builder.

    Example:
        >>> parse_pipeline({"Pipeline.Filters": "locale, header:ua"})
        [('locale', 'locale'), ('header', 'ua')]
    """
    value = params.get(PIPELINE_FILTERS_KEY, "").strip()
    if not value:
        return []

    entries = []
    for entry in parse_role_list(value):
        if not entry:
            raise ConfigurationError(
                f"{PIPELINE_FILTERS_KEY} contains an empty entry", key=PIPELINE_FILTERS_KEY
            )
        kind, _, name = entry.partition(":")
        entries.append((kind.strip(), name.strip() or kind.strip()))
    return entries
