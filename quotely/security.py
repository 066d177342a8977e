"""
Quotely API — Password Hashing & Access Tokens
===============================================

What:  bcrypt password hashing and HS256 JWT issue/verify.
Who:   AuthService (signup/login) and the get_current_user dependency.

Token payload:
    sub  user id (UUID string)
    iat  issued-at (UTC)
    exp  iat + ACCESS_TOKEN_EXPIRE_MINUTES

Tokens are stateless: verifying one never touches the store.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import bcrypt
import jwt

from quotely.config import Settings, settings as default_settings
from quotely.exceptions import AuthError

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def issue_token(user_id: UUID | str, config: Optional[Settings] = None) -> str:
    config = config or default_settings
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=config.access_token_expire_minutes),
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_token(token: str, config: Optional[Settings] = None) -> UUID:
    """
    Verify a bearer token and return the user id it was issued for.

    Raises:
        AuthError: expired, tampered, or missing/invalid `sub`
    """
    config = config or default_settings
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthError(message="Token has expired")
    except jwt.PyJWTError:
        raise AuthError(message="Invalid token")

    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthError(message="Invalid token")
