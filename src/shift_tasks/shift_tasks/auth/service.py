from __future__ import annotations

import logging
from typing import Any

from werkzeug.security import check_password_hash

from ..core.exceptions import AuthenticationError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate a user (login) and hand out a bearer token."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def login(self, email: Any, password: Any) -> tuple[User, str]:
        if not email or not password or not isinstance(email, str) or not isinstance(password, str):
            raise ValidationError("Email and password are required")

        user = self._users.get_by_email(email.strip().lower())
        if not user:
            logger.info("Login failed: unknown email")
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            logger.info("Login failed for user %s", user.user_id)
            raise AuthenticationError("Invalid credentials")

        return user, self._tokens.issue(user)
