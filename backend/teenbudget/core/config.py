# teenbudget/core/config.py
# Plain settings object filled from the environment (and an optional .env file)
import os
from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class SimpleSettings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./teenbudget.db")
    SQL_ECHO = _as_bool(os.getenv("SQL_ECHO", "false"))
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if origin.strip()
    ]
    DEMO_EMAIL = os.getenv("DEMO_EMAIL", "demo@teen-budget.app")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

settings = SimpleSettings()
