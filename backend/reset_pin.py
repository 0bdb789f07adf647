# reset_pin.py
import re
import sys

from teenbudget.core.errors import NotFoundError
from teenbudget.db.session import SessionLocal
from teenbudget.schemas.auth import PIN_PATTERN
from teenbudget.services.users import reset_pin as reset_user_pin


def reset_pin(email: str, new_pin: str, session_factory=SessionLocal) -> int:
    if not re.fullmatch(PIN_PATTERN, new_pin):
        print("PIN must be 4 to 6 digits")
        return 2
    db = session_factory()
    try:
        reset_user_pin(db, email, new_pin)
    except NotFoundError:
        print("User not found:", email)
        return 1
    finally:
        db.close()
    print(f"PIN reset for {email}")
    return 0

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python reset_pin.py <email> <new_pin>")
        sys.exit(2)
    sys.exit(reset_pin(sys.argv[1], sys.argv[2]))
