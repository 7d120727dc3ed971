from __future__ import annotations

from typing import Optional

from ftzhts.hts.errors import UnauthorizedError
from ftzhts.settings import get_settings


def allowed_api_tokens() -> frozenset[str]:
    """Return the configured bearer tokens from env or fallback to a dev token."""

    return get_settings().api_tokens


def verify_bearer_token(authorization: Optional[str]) -> str:
    """Validate an ``Authorization: Bearer <token>`` header value."""

    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("No valid authorization token provided")
    token = authorization[len("Bearer "):].strip()
    if token not in allowed_api_tokens():
        raise UnauthorizedError("Invalid or expired token")
    return token
