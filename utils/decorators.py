from __future__ import annotations
from collections import namedtuple
from functools import wraps
from flask import request, g, current_app
from utils.exceptions import Unauthenticated, Unauthorized
from utils.security import verify_token

Identity = namedtuple("Identity", ["user_id", "email"])


def bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def jwt_required():
    """
    401 when no bearer token is presented, 403 when it does not verify.
    On success g.current_user holds the token's Identity; the user store is
    not consulted.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if token is None:
                raise Unauthenticated()
            result = verify_token(token, current_app.config["JWT_SECRET"], expected_type="access")
            if not result.ok:
                raise Unauthorized()

            g.current_user = Identity(str(result.claims["sub"]), result.claims["email"])
            g.current_token_jti = result.claims.get("jti")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def is_synthetic_identity(user_id) -> bool:
    """True for reserved test ids, and only while TEST_IDENTITIES_ENABLED is set."""
    if not current_app.config.get("TEST_IDENTITIES_ENABLED", False):
        return False
    prefix = current_app.config.get("TEST_IDENTITY_PREFIX", "test-user-")
    return bool(prefix) and isinstance(user_id, str) and user_id.startswith(prefix)


def synthetic_identity(responder, param: str = "user_id"):
    """
    Route synthetic test ids to `responder` instead of the wrapped handler,
    so they never reach the user store or the ownership check.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if is_synthetic_identity(kwargs.get(param)):
                return responder(kwargs[param])
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def owner_required(param: str = "user_id"):
    """
    Allow the call only when the authenticated user is the target resource.
    Must run after jwt_required().
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if g.current_user.user_id != kwargs.get(param):
                raise Unauthorized("Forbidden: Cannot modify other users")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
