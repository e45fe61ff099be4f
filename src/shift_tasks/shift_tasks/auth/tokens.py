from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..core.constants import DEFAULT_TOKEN_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..users.model import User
from .model import Claim

JWT_ALGORITHM = "HS256"


class TokenService:
    """Issues and verifies the signed bearer tokens carrying a Claim."""

    def __init__(self, secret: str, *, expires_hours: int = DEFAULT_TOKEN_HOURS):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._expires = timedelta(hours=int(expires_hours))

    def issue(self, user: User, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "userId": user.user_id,
            "email": user.email,
            "role": user.role.value,
            "positionIds": list(user.position_ids),
            "iat": int(now.timestamp()),
            "exp": int((now + self._expires).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> Claim:
        if not token:
            raise AuthenticationError("No token provided")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc

        user_id = payload.get("userId")
        email = payload.get("email")
        position_ids = payload.get("positionIds") or []
        if not user_id or not email or not isinstance(position_ids, list):
            raise AuthenticationError("Invalid token")
        try:
            role = Role(payload.get("role"))
        except ValueError as exc:
            raise AuthenticationError("Invalid token") from exc

        return Claim(
            user_id=str(user_id),
            email=str(email),
            role=role,
            position_ids=tuple(str(p) for p in position_ids),
        )
