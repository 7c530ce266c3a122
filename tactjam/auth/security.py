# tactjam/auth/security.py
"""
Credential hashing and session tokens.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from tactjam.core.config import settings
from tactjam.core.exceptions import PermissionDeniedError

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=settings.auth.bcrypt_rounds)
    return bcrypt.hashpw(pwd_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a stored bcrypt hash."""
    try:
        return bool(bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8")))
    except ValueError:
        # malformed hash, or password over the bcrypt limit
        return False


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    """Issue a signed session token for the given user id."""
    minutes = expires_minutes if expires_minutes is not None else settings.auth.token_expire_minutes
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    return jwt.encode(claims, settings.auth.secret_key, algorithm=settings.auth.algorithm)


def decode_access_token(token: str) -> str:
    """Return the user id from a valid token; PermissionDeniedError otherwise."""
    try:
        claims = jwt.decode(token, settings.auth.secret_key, algorithms=[settings.auth.algorithm])
    except JWTError:
        raise PermissionDeniedError("Invalid or expired token")

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise PermissionDeniedError("Invalid or expired token")
    return subject
