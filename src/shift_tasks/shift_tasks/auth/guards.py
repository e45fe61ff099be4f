from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from .model import Claim
from .tokens import TokenService


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def bearer_required(tokens: TokenService):
    """Decorator factory: verify the bearer token and expose it as `g.claim`.

    Verification errors (AuthenticationError) propagate to the app error
    handler, which answers 401.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = extract_bearer_token(request.headers.get("Authorization"))
            g.claim = tokens.verify(token or "")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_claim() -> Claim:
    return g.claim
