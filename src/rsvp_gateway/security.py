"""Security helpers used at the HTTP boundary."""

import re

from fastapi import Request

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self' 'unsafe-eval'; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https:; font-src 'self' data:;"
    ),
}

MAX_STRING_LENGTH = 1000
MAX_EMAIL_LENGTH = 254  # RFC 5321

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_STRIPPED_CHARS = re.compile(r"[<>'\"]")

# Checked in order; the first header present wins
CLIENT_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")


def sanitize_string(value: str) -> str:
    """Strip markup and quote characters, trim, and cap the length."""
    return _STRIPPED_CHARS.sub("", value).strip()[:MAX_STRING_LENGTH]


def is_valid_email(email: str) -> bool:
    sanitized = sanitize_string(email)
    return (
        bool(_EMAIL_PATTERN.match(sanitized))
        and len(sanitized) <= MAX_EMAIL_LENGTH
        and ".." not in sanitized
        and not sanitized.startswith(".")
        and not sanitized.endswith(".")
    )


def client_identity(request: Request) -> str:
    """Best-effort client address for rate limiting.

    Proxy headers first (first hop of x-forwarded-for), then the socket peer.
    """
    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
