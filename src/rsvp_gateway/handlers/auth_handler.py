"""HTTP handlers for admin authentication."""

import logging

from fastapi import HTTPException, status

from rsvp_gateway.config import settings
from rsvp_gateway.dto import LoginRequest, LoginResponse
from rsvp_gateway.errors import RateLimitedError
from rsvp_gateway.services import AuthService, RateLimiter

logger = logging.getLogger(__name__)


class AuthHandler:
    """HTTP handlers for login and admin checks.

    Credential checks are rate limited per client address
    (LOGIN_RATE_LIMIT per LOGIN_RATE_WINDOW).
    """

    def __init__(self, auth_service: AuthService, rate_limiter: RateLimiter) -> None:
        self._auth = auth_service
        self._limiter = rate_limiter

    async def login(self, request: LoginRequest, client_ip: str) -> LoginResponse:
        """Handle POST /auth/login requests.

        Raises:
            RateLimitedError: If the client exceeded its login budget
            ServiceError: If the upstream rejected the credentials or failed
        """
        decision = self._limiter.check_and_consume(
            f"login:{client_ip}",
            settings.login_rate_limit,
            settings.login_rate_window,
        )
        if not decision.allowed:
            raise RateLimitedError(
                decision.reset_at,
                "Too many login attempts. Please try again later.",
            )

        payload = await self._auth.login(request.password)
        logger.info("Admin login succeeded from %s", client_ip)
        return LoginResponse(
            success=bool(payload.get("success", True)),
            message=str(payload.get("message") or "Login successful"),
            token=payload.get("token"),
            user=payload.get("user"),
        )

    async def require_admin(self, authorization: str | None) -> str:
        """Validate a ``Bearer`` Authorization header with the upstream.

        Returns:
            The token, if valid

        Raises:
            HTTPException: 401 if the header is missing or the token is rejected
        """
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")

        token = authorization[len("Bearer "):].strip()
        if not token or not await self._auth.validate_token(token):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
        return token
