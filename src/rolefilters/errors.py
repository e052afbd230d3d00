"""Error types for the role filter pipeline.

Configuration problems are fatal at startup: a filter that cannot build its
settings must refuse to initialize rather than run with a partial mapping.
Per-request input problems never raise through this package; they simply
fail to match.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when filter configuration is invalid or missing.

    On-Call Note:
        This error means the application cannot start. The message names
        the offending parameter key; check the parameter file referenced
        by ROLEFILTERS_CONFIG_FILE.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)


class InvalidPatternError(ConfigurationError):
    """Raised when a header pattern key does not compile as a regex."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"Invalid header pattern {pattern!r}: {reason}", key=pattern)


class UnknownFilterError(ConfigurationError):
    """Raised when the pipeline names a filter kind that does not exist."""

    def __init__(self, kind: str, valid_kinds: frozenset[str]) -> None:
        self.kind = kind
        self.valid_kinds = valid_kinds
        super().__init__(
            f"Unknown filter kind '{kind}'. Valid kinds: {sorted(valid_kinds)}",
            key=kind,
        )
