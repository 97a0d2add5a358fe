"""Rate limiting and the bearer check guarding /metrics."""

import logging
from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

# Rate limiter using client IP
limiter = Limiter(key_func=get_remote_address)


def bearer_token_error(authorization: Optional[str], expected_token: Optional[str]) -> Optional[str]:
    """
    Validate an "Authorization: Bearer <token>" header.

    Returns None when access is allowed (including when no token is
    configured), otherwise the reason for rejecting it.
    """
    if not expected_token:
        return None
    if not authorization:
        return "Missing Authorization header"
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return "Invalid Authorization format"
    if parts[1] != expected_token:
        logger.warning("Rejected /metrics request with invalid token")
        return "Invalid token"
    return None
