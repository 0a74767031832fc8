"""
Admin authorization for HTTP endpoints.

Admin routes require a static bearer token (ADMIN_API_TOKEN). The token is
compared in constant time; a missing header is 401, a wrong token 403.
An unset ADMIN_API_TOKEN locks every admin route.
"""

import hmac
import logging

from fastapi import Request

import config
from exceptions.auth import UnauthenticatedException, ForbiddenException

logger = logging.getLogger(__name__)


def is_valid_admin_token(token: str | None) -> bool:
    """
    Check a presented admin token against ADMIN_API_TOKEN.

    Example:
        >>> is_valid_admin_token(config.ADMIN_API_TOKEN)
        True
        >>> is_valid_admin_token("guess")
        False
    """
    if not config.ADMIN_API_TOKEN or not token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), config.ADMIN_API_TOKEN.encode("utf-8"))


async def require_admin(request: Request) -> None:
    """
    FastAPI dependency guarding admin routes.

    Raises:
        UnauthenticatedException: If no bearer token was sent
        ForbiddenException: If the token does not match
    """
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedException()

    if not is_valid_admin_token(token.strip()):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning(f"⚠️ Rejected admin request to {request.url.path} from {client_ip}")
        raise ForbiddenException()
