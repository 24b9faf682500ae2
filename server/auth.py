"""Bearer-token issuing and verification for the gateway."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from models.errors import AuthError

ANONYMOUS_USER = "anonymous"


class TokenVerifier:
    """HS256 JWTs whose ``sub`` claim is the user id."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)) -> None:
        if not secret:
            raise ValueError("A token secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, user_id: str, expires_in: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        claims = {"sub": user_id, "iat": now, "exp": now + (expires_in or self.ttl)}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise AuthError("Unauthorized") from exc
        user_id = claims.get("sub")
        if not user_id:
            raise AuthError("Unauthorized")
        return str(user_id)


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization`` header value."""

    if not authorization:
        raise AuthError("Missing authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Unauthorized")
    return token.strip()


__all__ = ["ANONYMOUS_USER", "TokenVerifier", "bearer_token"]
