"""Request authentication for the marketplace routes."""

from fastapi import Depends, Request

from marketplace.config import get_settings
from marketplace.errors import AuthenticationError, AuthorizationError
from marketplace.identity.tokens import TokenClaims, decode_token
from marketplace.identity.user import Role
from marketplace.utils.logging import bind_request_context


def _token_from(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip() or None
    return request.cookies.get(get_settings().cookie_name)


def authenticated_user(request: Request) -> TokenClaims:
    """Claims of the caller's session token, from the Bearer header or the cookie."""
    token = _token_from(request)
    if not token:
        raise AuthenticationError("Unauthorized: No token provided")

    claims = decode_token(token)
    bind_request_context(user_id=claims.user_id, role=claims.role)
    return claims


def require_farmer(user: TokenClaims = Depends(authenticated_user)) -> TokenClaims:
    if user.role != Role.FARMER.value:
        raise AuthorizationError("You are not a farmer")
    return user
