"""Filter settings models and the parameter loader."""

from src.rolefilters.config.loader import (
    get_params,
    load_known_unknown_settings,
    load_locale_settings,
    load_params,
    load_redirection_settings,
    load_remote_host_settings,
    load_request_header_settings,
    load_response_header_settings,
    load_session_invalidator_settings,
    load_static_settings,
    parse_bool,
    parse_pipeline,
    parse_role_list,
)
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

__all__ = [
    "KnownUnknownRoleSettings",
    "LocaleRoleSettings",
    "PatternRole",
    "RemoteHostRoleSettings",
    "RequestHeaderRoleSettings",
    "ResponseHeaderSettings",
    "RoleRedirectionSettings",
    "SessionInvalidatorSettings",
    "StaticRoleSettings",
    "get_params",
    "load_known_unknown_settings",
    "load_locale_settings",
    "load_params",
    "load_redirection_settings",
    "load_remote_host_settings",
    "load_request_header_settings",
    "load_response_header_settings",
    "load_session_invalidator_settings",
    "load_static_settings",
    "parse_bool",
    "parse_pipeline",
    "parse_role_list",
]
