"""
Log sanitisation helpers for request-derived values.

Remote hosts, header values and role names queried by clients are all
user-controlled. They pass through sanitize_for_log() before reaching a log
record, preventing:
- Log injection attacks (CWE-117, CWE-93)
- Log flooding from oversized header values

Security References:
- OWASP Logging Cheat Sheet: https://cheatsheetseries.owasp.org/cheatsheets/Logging_Cheat_Sheet.html
"""

import re
from typing import Any

# Maximum length for logged user input to prevent log flooding
MAX_LOG_INPUT_LENGTH = 200

# Header names whose values should never be logged
SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "set-cookie",
    "proxy-authorization",
    "x-api-key",
}


def sanitize_for_log(value: Any, max_length: int = MAX_LOG_INPUT_LENGTH) -> str:
    """
    Sanitize a value for safe logging by removing CRLF and limiting length.

    Args:
        value: Value to sanitize (will be converted to string)
        max_length: Maximum length of output (default: 200)

    Returns:
        Sanitized string safe for logging

    Example:
        >>> sanitize_for_log("mobile\\n[FAKE] role granted")
        'mobile [FAKE] role granted'
    """
    text = str(value)

    # Remove CRLF characters to prevent log injection
    text = text.replace("\r", " ").replace("\n", " ").replace("\t", " ")

    # Remove other control characters
    text = re.sub(r"[\x00-\x1f\x7f-\x9f]", " ", text)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text


def safe_header_value(name: str, value: str | None) -> str:
    """
    Render a header value for logging, redacting credential-bearing headers.

    Example:
        >>> safe_header_value("Authorization", "Bearer abc")
        '***REDACTED***'
        >>> safe_header_value("User-Agent", None)
        ''
    """
    if name.lower() in SENSITIVE_HEADERS:
        return "***REDACTED***"
    if value is None:
        return ""
    return sanitize_for_log(value)


def get_safe_error_info(exception: Exception) -> dict[str, str]:
    """
    Extract safe information from an exception for logging.

    Returns only the exception type, not the message, since messages raised
    while handling a request may echo request data.

    Example:
        >>> try:
        ...     raise ValueError("user input here")
        ... except Exception as e:
        ...     get_safe_error_info(e)
        {'error_type': 'ValueError'}
    """
    return {"error_type": type(exception).__name__}
