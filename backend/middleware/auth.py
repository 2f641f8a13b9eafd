"""
Operator authentication helpers.

The console does not issue or verify credentials itself: the storefront
backend does. Every order route requires an `Authorization: Bearer <token>`
header, and the token is forwarded unchanged to the order service, which
answers 401/403 when it is not acceptable. Rejections are never retried.
"""
import logging
from typing import Optional

from fastapi import Header

from domain.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def _parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


async def require_operator_token(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> str:
    """FastAPI dependency: the operator's bearer token, or 401."""
    token = _parse_bearer_token(authorization)
    if not token:
        logger.warning("Order route called without a bearer token")
        raise UnauthorizedError(
            "Authentication required. Provide Authorization: Bearer <token>.",
        )
    return token
