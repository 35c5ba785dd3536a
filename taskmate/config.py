from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from repo root and taskmate/.env (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskmate.db")
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")

# Sessions last a week, like a typical "remember me" web login.
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))
PASSWORD_RESET_ENABLED = _env_bool("PASSWORD_RESET_ENABLED", True)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

_cors_origins = os.getenv("FRONTEND_URL", "http://localhost:5173")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]
