"""Parsing and header helpers shared by the filters."""

from src.rolefilters.utils.cookie_helpers import make_expired_cookie, make_set_cookie
from src.rolefilters.utils.language_tags import (
    LanguageTag,
    parse_accept_language,
    parse_language_tag,
)

__all__ = [
    "LanguageTag",
    "make_expired_cookie",
    "make_set_cookie",
    "parse_accept_language",
    "parse_language_tag",
]
