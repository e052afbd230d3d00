"""BCP 47 language tag and Accept-Language parsing.

Only the subtags role matching needs are kept: language, script and region.
Variants and extensions are accepted syntactically and dropped.

Parsing is lenient in one direction only: case is normalised
(``EN-us`` -> ``en-US``), but malformed tags return None instead of raising.
Callers treat None as "does not match".
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from src.rolefilters.logging_utils import sanitize_for_log

logger = logging.getLogger(__name__)

# language: 2-3 letters (optionally extlang) or 4-8 letters
# script: 4 letters, region: 2 letters or 3 digits
_LANGUAGE_TAG_RE = re.compile(
    r"""
    (?P<language>[A-Za-z]{2,3}(?:-[A-Za-z]{3}){0,3}|[A-Za-z]{4,8})
    (?:-(?P<script>[A-Za-z]{4}))?
    (?:-(?P<region>[A-Za-z]{2}|[0-9]{3}))?
    (?:-(?:[A-Za-z0-9]{5,8}|[0-9][A-Za-z0-9]{3}))*
    (?:-[0-9A-WY-Za-wy-z](?:-[A-Za-z0-9]{2,8})+)*
    (?:-[xX](?:-[A-Za-z0-9]{1,8})+)?
    """,
    re.VERBOSE,
)

@dataclass(frozen=True)
class LanguageTag:
    """Normalised language tag (``language`` lower, ``region`` upper)."""

    language: str
    script: str = ""
    region: str = ""

    def __str__(self) -> str:
        return "-".join(part for part in (self.language, self.script, self.region) if part)

    def matches(self, other: LanguageTag) -> bool:
        """True when ``other`` satisfies this tag.

        Languages must be equal. An empty region here is a wildcard;
        otherwise the regions must be equal too. Scripts are ignored.
        """
        if self.language != other.language:
            return False
        return not self.region or self.region == other.region


def parse_language_tag(tag: str) -> LanguageTag | None:
    """Parse a BCP 47 tag, returning None when it is malformed.

    Example:
        >>> parse_language_tag("en-us")
        LanguageTag(language='en', script='', region='US')
        >>> parse_language_tag("en_US") is None
        True
    """
    match = _LANGUAGE_TAG_RE.fullmatch(tag.strip())
    if match is None:
        return None

    language = match.group("language").split("-")[0].lower()
    script = (match.group("script") or "").title()
    region = (match.group("region") or "").upper()
    return LanguageTag(language=language, script=script, region=region)


def parse_accept_language(header_value: str | None) -> tuple[LanguageTag, ...]:
    """Parse an Accept-Language header into tags, most preferred first.

    Entries are ordered by quality value; ties keep header order. The ``*``
    wildcard, entries with ``q=0`` and malformed entries are dropped.

    Example:
        >>> [str(t) for t in parse_accept_language("fr;q=0.5, en-US")]
        ['en-US', 'fr']
    """
    if not header_value:
        return ()

    weighted: list[tuple[float, int, LanguageTag]] = []
    for position, entry in enumerate(header_value.split(",")):
        tag_text, _, params = entry.strip().partition(";")
        tag_text = tag_text.strip()
        if not tag_text or tag_text == "*":
            continue

        quality = _parse_quality(params)
        if quality is None or not quality > 0:
            continue

        tag = parse_language_tag(tag_text)
        if tag is None:
            logger.debug(
                "Skipping malformed Accept-Language entry",
                extra={"entry": sanitize_for_log(tag_text)},
            )
            continue
        weighted.append((-quality, position, tag))

    weighted.sort()
    return tuple(tag for _, _, tag in weighted)


def _parse_quality(params: str) -> float | None:
    """Extract ``q`` from the parameter part of one entry (default 1.0)."""
    for param in params.split(";"):
        name, _, value = param.strip().partition("=")
        if name.strip().lower() != "q":
            continue
        try:
            return float(value.strip())
        except ValueError:
            return None
    return 1.0
