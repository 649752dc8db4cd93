"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers

Access and refresh tokens are signed with two independent secrets
(JWT_SECRET / REFRESH_SECRET), so one can never be replayed as the other.
"""
from __future__ import annotations

import enum
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt
from argon2 import PasswordHasher
from flask import current_app

ph = PasswordHasher()

IDENTITY_CLAIMS = ("sub", "email")


class VerificationError(enum.Enum):
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Verification:
    """Outcome of verify_token: claims on success, error otherwise."""
    claims: Optional[Dict[str, Any]] = None
    error: Optional[VerificationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).

    Millisecond timestamp plus a random suffix: two tokens minted for the
    same identity in the same instant still differ.
    """
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _encode(user_id: str, email: str, token_type: str, secret: str, expires, jti: str) -> str:
    now = _now()
    payload = {
        "iss": current_app.config.get("JWT_ISSUER", "session-core"),
        "sub": str(user_id),
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + expires).timestamp()),
        "type": token_type,
        "jti": jti,
    }
    return jwt.encode(payload, secret, algorithm=current_app.config["JWT_ALGORITHM"])


def create_access_token(user_id: str, email: str, jti: str | None = None) -> str:
    """Mint a 24h access token signed with JWT_SECRET."""
    return _encode(
        user_id,
        email,
        "access",
        current_app.config["JWT_SECRET"],
        current_app.config["ACCESS_TOKEN_EXPIRES"],
        jti or generate_jti(),
    )


def create_refresh_token(user_id: str, email: str) -> str:
    """Mint a refresh token signed with REFRESH_SECRET.

    Issuance belongs to the login flow; callers must add the result to the
    refresh registry for it to be accepted.
    """
    return _encode(
        user_id,
        email,
        "refresh",
        current_app.config["REFRESH_SECRET"],
        current_app.config["REFRESH_TOKEN_EXPIRES"],
        generate_jti(),
    )


def verify_token(token: str, secret: str, expected_type: str | None = None) -> Verification:
    """
    Decode and validate a JWT without raising.
    Returns Verification(error=...) on expiry, bad signature or malformed input.
    """
    # compact JWTs are base64url segments; anything else cannot be encoded safely
    if not isinstance(token, str) or not token or not token.isascii():
        return Verification(error=VerificationError.MALFORMED)
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        return Verification(error=VerificationError.EXPIRED)
    except jwt.InvalidSignatureError:
        return Verification(error=VerificationError.BAD_SIGNATURE)
    except jwt.InvalidTokenError:
        return Verification(error=VerificationError.MALFORMED)

    if expected_type and decoded.get("type") != expected_type:
        return Verification(error=VerificationError.MALFORMED)
    if any(not decoded.get(claim) for claim in IDENTITY_CLAIMS):
        return Verification(error=VerificationError.MALFORMED)
    return Verification(claims=decoded)
