# teenbudget/services/users.py
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teenbudget.core.config import settings
from teenbudget.core.errors import ConflictError, NotFoundError, UnauthorizedError
from teenbudget.db import models
from teenbudget.schemas.auth import Identity, PinProfile, Token, UserOut, UserRegister
from teenbudget.services.categories import create_default_categories
from teenbudget.services.security import create_access_token, hash_pin, verify_pin

logger = logging.getLogger(__name__)

INVALID_PIN = "Invalid PIN"
DEMO_NAME = "Demo User"


def user_to_out(user: models.User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        avatar=user.avatar,
        has_pin=bool(user.pin_hash),
    )


def issue_token(user: models.User) -> Token:
    return Token(
        access_token=create_access_token(user.id, email=user.email),
        user=user_to_out(user),
    )


def _create_with_defaults(db: Session, user: models.User) -> models.User:
    db.add(user)
    try:
        db.flush()
        create_default_categories(db, user)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Email already registered") from exc
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    return user


def provision_demo_user(db: Session) -> models.User:
    """Get-or-create the shared demo account."""
    user = db.query(models.User).filter(models.User.email == settings.DEMO_EMAIL).first()
    if user:
        return user
    user = _create_with_defaults(db, models.User(email=settings.DEMO_EMAIL, name=DEMO_NAME))
    logger.info("provisioned demo user %s", user.id)
    return user


def register_user(db: Session, payload: UserRegister) -> models.User:
    email = payload.email.lower()
    if db.query(models.User.id).filter(models.User.email == email).first():
        raise ConflictError("Email already registered")

    user = models.User(
        name=payload.name,
        email=email,
        avatar=payload.avatar,
        pin_hash=hash_pin(payload.pin),
    )
    user = _create_with_defaults(db, user)
    logger.info("registered user %s", user.id)
    return user


def list_pin_profiles(db: Session) -> List[PinProfile]:
    users = (
        db.query(models.User)
        .filter(models.User.pin_hash.isnot(None))
        .order_by(models.User.name.asc(), models.User.id.asc())
        .all()
    )
    return [PinProfile.model_validate(u) for u in users]


def authenticate_pin(db: Session, user_id: int, pin: str) -> models.User:
    user = db.get(models.User, user_id)
    # same answer for unknown user, no PIN and wrong PIN
    if user is None or not user.pin_hash or not verify_pin(pin, user.pin_hash):
        logger.info("rejected PIN login for user %s", user_id)
        raise UnauthorizedError(INVALID_PIN)
    return user


def get_user(db: Session, identity: Identity) -> models.User:
    user = db.get(models.User, identity.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def change_pin(db: Session, identity: Identity, current_pin: str, new_pin: str) -> None:
    user = get_user(db, identity)
    if not user.pin_hash or not verify_pin(current_pin, user.pin_hash):
        raise UnauthorizedError("Current PIN is incorrect")
    user.pin_hash = hash_pin(new_pin)
    db.commit()
    logger.info("user %s changed PIN", user.id)


def reset_pin(db: Session, email: str, new_pin: str) -> models.User:
    """Administrative reset; no knowledge of the old PIN required."""
    user = db.query(models.User).filter(models.User.email == email.lower()).first()
    if user is None:
        raise NotFoundError(f"No user with email {email}")
    user.pin_hash = hash_pin(new_pin)
    db.commit()
    logger.info("PIN reset for user %s", user.id)
    return user
