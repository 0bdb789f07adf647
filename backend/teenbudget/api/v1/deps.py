# teenbudget/api/v1/deps.py
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from teenbudget.db import models
from teenbudget.db.session import get_db
from teenbudget.schemas.auth import Identity
from teenbudget.services.security import JWTError, decode_access_token

# auto_error off so a missing header gets our 401 body instead of FastAPI's 403
bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    sub = payload.get("sub")
    if sub is None:
        raise _unauthorized("Invalid token (no sub)")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token subject")

    user = db.get(models.User, user_id)
    if not user:
        raise _unauthorized("User not found")
    return Identity(user_id=user.id, email=user.email, name=user.name)


__all__ = ["get_db", "get_current_identity"]
