# teenbudget/api/v1/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teenbudget.api.v1.deps import get_current_identity, get_db
from teenbudget.schemas.auth import Identity, PinChange, PinLogin, PinProfileList, Token, UserOut, UserRegister
from teenbudget.schemas.common import SuccessOut
from teenbudget.services import users

router = APIRouter()

@router.post("/demo", response_model=Token)
def demo_login(db: Session = Depends(get_db)):
    """Sign in as the shared demo account, creating it on first use."""
    user = users.provision_demo_user(db)
    return users.issue_token(user)

@router.get("/users", response_model=PinProfileList)
def pin_profiles(db: Session = Depends(get_db)):
    return PinProfileList(users=users.list_pin_profiles(db))

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    user = users.register_user(db, payload)
    return users.issue_token(user)

@router.post("/pin", response_model=Token)
def pin_login(payload: PinLogin, db: Session = Depends(get_db)):
    user = users.authenticate_pin(db, payload.user_id, payload.pin)
    return users.issue_token(user)

@router.put("/pin", response_model=SuccessOut)
def change_pin(
    payload: PinChange,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    users.change_pin(db, identity, payload.current_pin, payload.new_pin)
    return SuccessOut()

@router.get("/me", response_model=UserOut)
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return users.user_to_out(users.get_user(db, identity))
