"""Serve XHTML only to clients that accept it.

Clients whose Accept header does not mention an XML type receive
``application/xhtml+xml`` responses relabelled as ``text/html``, with the
original media type parameters (charset etc.) preserved.
"""

from __future__ import annotations

import logging

from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

XHTML_MEDIA_TYPE = "application/xhtml+xml"
HTML_MEDIA_TYPE = "text/html"
XML_ACCEPT_MARKERS = (XHTML_MEDIA_TYPE, "text/xml", "application/xml")


def accepts_xhtml(headers: Headers) -> bool:
    """True if any Accept header value names an XHTML or XML media type."""
    for value in headers.getlist("accept"):
        lowered = value.lower()
        if any(marker in lowered for marker in XML_ACCEPT_MARKERS):
            return True
    return False


def fix_content_type(content_type: str | None) -> str | None:
    """Relabel an XHTML content type as HTML, keeping its parameters.

    Example:
        >>> fix_content_type("application/xhtml+xml; charset=utf-8")
        'text/html; charset=utf-8'
        >>> fix_content_type("application/json")
        'application/json'
    """
    if not content_type:
        return content_type

    base_type, separator, parameters = content_type.partition(";")
    base_type = base_type.strip()
    if base_type.lower() != XHTML_MEDIA_TYPE:
        return content_type

    if not separator:
        return HTML_MEDIA_TYPE
    return f"{HTML_MEDIA_TYPE};{parameters}"


class XHTMLAcceptMiddleware(BaseHTTPMiddleware):
    """Downgrades XHTML responses for clients that cannot accept them."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if accepts_xhtml(request.headers):
            return response

        content_type = response.headers.get("content-type")
        fixed = fix_content_type(content_type)
        if fixed != content_type:
            logger.debug("Relabelled XHTML response as text/html")
            response.headers["content-type"] = fixed
        return response
