"""Set-Cookie header construction using stdlib http.cookies."""

from http.cookies import SimpleCookie

INVALIDATED_COOKIE_VALUE = "invalidated"


def make_set_cookie(
    name: str,
    value: str,
    *,
    httponly: bool = True,
    secure: bool = True,
    samesite: str = "Lax",
    max_age: int = 3600,
    path: str = "/",
) -> str:
    """Construct a Set-Cookie header value.

    Args:
        name: Cookie name.
        value: Cookie value.
        httponly: Whether to set HttpOnly flag.
        secure: Whether to set Secure flag.
        samesite: SameSite attribute ("Strict", "Lax", or "None").
        max_age: Max-Age in seconds.
        path: Cookie path.

    Returns:
        Complete Set-Cookie header value string.
    """
    cookie = SimpleCookie()
    cookie[name] = value
    cookie[name]["httponly"] = httponly
    cookie[name]["secure"] = secure
    cookie[name]["samesite"] = samesite
    cookie[name]["max-age"] = max_age
    cookie[name]["path"] = path
    return cookie[name].OutputString()


def make_expired_cookie(name: str, *, path: str = "/", secure: bool = False) -> str:
    """Set-Cookie value that makes the client drop cookie ``name`` immediately.

    Example:
        >>> make_expired_cookie("session")
        'session=invalidated; HttpOnly; Max-Age=0; Path=/; SameSite=Lax'
    """
    return make_set_cookie(
        name,
        INVALIDATED_COOKIE_VALUE,
        secure=secure,
        max_age=0,
        path=path,
    )
