"""Session tokens: compact HS256 JWTs signed with the application secret.

The payload mirrors what the storefront expects to decode client-side:
``{userId, role, name, avatar, iat, exp}``.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass

from marketplace.config import get_settings
from marketplace.errors import AuthenticationError

_HEADER = {"alg": "HS256", "typ": "JWT"}


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    role: str
    name: str | None = None
    avatar: str | None = None
    issued_at: int = 0
    expires_at: int = 0


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode(), message, hashlib.sha256).digest()


def issue_token(user, now: int | None = None) -> str:
    settings = get_settings()
    issued_at = int(now if now is not None else time.time())
    payload = {
        "userId": str(user.id),
        "role": user.role,
        "name": user.full_name,
        "avatar": user.profile_picture,
        "iat": issued_at,
        "exp": issued_at + settings.token_ttl_days * 24 * 60 * 60,
    }

    header_b64 = _b64encode(json.dumps(_HEADER, separators=(",", ":")).encode())
    payload_b64 = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
    signing_input = f"{header_b64}.{payload_b64}".encode()
    return f"{header_b64}.{payload_b64}.{_b64encode(_sign(signing_input, settings.jwt_secret))}"


def decode_token(token: str, now: int | None = None) -> TokenClaims:
    """Verify signature and expiry; raise ``AuthenticationError`` on any failure."""
    settings = get_settings()

    parts = token.split(".")
    if len(parts) != 3:
        raise AuthenticationError("Invalid token")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64decode(header_b64))
        signature = _b64decode(signature_b64)
        payload = json.loads(_b64decode(payload_b64))
    except (ValueError, TypeError) as exc:
        raise AuthenticationError("Invalid token") from exc

    if not isinstance(header, dict) or not isinstance(payload, dict) or header.get("alg") != "HS256":
        raise AuthenticationError("Invalid token")

    expected = _sign(f"{header_b64}.{payload_b64}".encode(), settings.jwt_secret)
    if not hmac.compare_digest(signature, expected):
        raise AuthenticationError("Invalid token")

    current = int(now if now is not None else time.time())
    if not isinstance(payload.get("exp"), int) or payload["exp"] <= current:
        raise AuthenticationError("Token expired")

    if not payload.get("userId") or not payload.get("role"):
        raise AuthenticationError("Invalid token")

    return TokenClaims(
        user_id=payload["userId"],
        role=payload["role"],
        name=payload.get("name"),
        avatar=payload.get("avatar"),
        issued_at=payload.get("iat", 0),
        expires_at=payload["exp"],
    )
