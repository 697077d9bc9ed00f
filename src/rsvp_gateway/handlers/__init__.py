"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.
Rate limits are enforced here, before any service call is dispatched.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .auth_handler import AuthHandler
from .rsvp_handler import RSVPHandler

__all__ = [
    "AuthHandler",
    "RSVPHandler",
]
