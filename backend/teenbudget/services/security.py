# teenbudget/services/security.py
"""PIN hashing + JWT helpers.

PINs go through passlib pbkdf2_sha256 (pure-python, no native backend needed).
Session tokens are HS256 JWTs made with python-jose; ``sub`` carries the user id.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Union, Dict, Any
from passlib.context import CryptContext
from jose import jwt, JWTError
from teenbudget.core.config import settings

pin_ctx = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ALGORITHM = "HS256"


def hash_pin(pin: str) -> str:
    """Hash a plaintext PIN (never store plaintext)."""
    if pin is None:
        raise ValueError("pin cannot be None")
    return pin_ctx.hash(pin)


def verify_pin(plain: str, hashed: str) -> bool:
    """Verify plain PIN against hashed. Returns False for a missing or malformed hash."""
    if plain is None or hashed is None:
        return False
    try:
        return pin_ctx.verify(plain, hashed)
    except ValueError:
        return False


def create_access_token(
    subject: Union[str, int],
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token for a user.
    - subject (user id) is stored under 'sub' as a string
    - 'iat' and 'exp' included as int timestamps
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload: Dict[str, Any] = {
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises JWTError on an invalid or expired token.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])


__all__ = ["hash_pin", "verify_pin", "create_access_token", "decode_access_token", "JWTError"]
