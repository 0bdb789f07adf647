# teenbudget/schemas/auth.py
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from teenbudget.schemas.common import CamelModel

PIN_PATTERN = r"^\d{4,6}$"

class Identity(BaseModel):
    """The authenticated caller, passed explicitly into every service call."""
    user_id: int
    email: str
    name: Optional[str] = None

class UserRegister(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    pin: str = Field(..., pattern=PIN_PATTERN)
    avatar: Optional[str] = Field(None, max_length=255)

class PinLogin(CamelModel):
    user_id: int
    pin: str = Field(..., pattern=PIN_PATTERN)

class PinChange(CamelModel):
    current_pin: str = Field(..., pattern=PIN_PATTERN)
    new_pin: str = Field(..., pattern=PIN_PATTERN)

class UserOut(CamelModel):
    id: int
    name: Optional[str] = None
    email: str
    avatar: Optional[str] = None
    has_pin: bool = False

class PinProfile(CamelModel):
    id: int
    name: Optional[str] = None
    avatar: Optional[str] = None

class PinProfileList(BaseModel):
    users: List[PinProfile]

class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
