"""Credential hashing and JWT issuance/verification."""
import base64
import hashlib
import hmac
import logging
import os
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from eventlog.config import settings
from eventlog.schemas.auth import TokenPayload
from eventlog.time_utils import utcnow

logger = logging.getLogger(__name__)

_ALGORITHM = "pbkdf2_sha256"
_ITERATIONS = 260_000
_SALT_BYTES = 16


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<digest>``."""
    iterations = iterations or _ITERATIONS
    salt = os.urandom(_SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{_ALGORITHM}${iterations}${_b64(salt)}${_b64(digest)}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
        if algorithm != _ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), base64.b64decode(salt), int(iterations),
        )
    except ValueError:
        return False
    return hmac.compare_digest(_b64(digest), expected)


def create_access_token(user) -> str:
    """Issue a signed token for ``user`` (anything with the User profile attributes)."""
    expires = utcnow() + timedelta(minutes=settings.JWT_EXPIRES_MINUTES)
    payload = {
        "sub": user.user_id,
        "username": user.username,
        "email": user.email,
        "display_name": user.display_name,
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenPayload]:
    """Return the token claims, or None for a bad signature, expiry or shape."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return TokenPayload(**payload)
    except (JWTError, ValidationError):
        logger.info("Rejected access token")
        return None
