"""Account storage and password checks.

Passwords are only ever stored as bcrypt hashes. Login failures look the same
whether or not the email is registered: same error, same message, and a bcrypt
comparison is performed either way.
"""

import logging
from functools import lru_cache
from typing import Optional

import bcrypt
from email_validator import EmailNotValidError, validate_email
from sqlmodel import Session, select

from ..config import BCRYPT_ROUNDS, PASSWORD_MIN_LENGTH
from ..errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    UserNotFoundError,
    ValidationError,
)
from ..models import User
from ..models.common import utcnow

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100
BCRYPT_MAX_BYTES = 72


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes; newer releases refuse longer input.
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt directly."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    hashed_bytes = hashed_password.encode("utf-8") if isinstance(hashed_password, str) else hashed_password
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_bytes)
    except ValueError:
        # Corrupt or foreign hash in the database.
        logger.warning("Stored password hash could not be parsed")
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return get_password_hash("taskmate-timing-equaliser")


def check_password_policy(password: Optional[str]) -> str:
    if not password:
        raise ValidationError("Password is required")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    return password


def _check_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name cannot exceed {NAME_MAX_LENGTH} characters")
    return name


def _check_email(email: Optional[str]) -> str:
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required")
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Please provide a valid email address") from None
    return email


class CredentialStore:
    """User records backed by a SQLModel session."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_email(self, email: Optional[str]) -> Optional[User]:
        email = normalize_email(email)
        if not email:
            return None
        return self.db.exec(select(User).where(User.email == email)).first()

    def email_exists(self, email: Optional[str]) -> bool:
        return self.find_by_email(email) is not None

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
        name = _check_name(name)
        email = _check_email(email)
        password = check_password_policy(password)

        if self.email_exists(email):
            raise DuplicateEmailError()

        user = User(name=name, email=email, hashed_password=get_password_hash(password))
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def verify(self, email: Optional[str], password: Optional[str]) -> User:
        user = self.find_by_email(email)
        if user is None:
            verify_password(password or "", _dummy_hash())
            raise InvalidCredentialsError()
        if not password or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()
        return user

    def reset_password(self, email: Optional[str], new_password: Optional[str]) -> User:
        user = self.find_by_email(email)
        if user is None:
            raise UserNotFoundError()
        new_password = check_password_policy(new_password)

        user.hashed_password = get_password_hash(new_password)
        user.updated_at = utcnow()
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.warning("Password reset without ownership proof for user %s", user.id)
        return user
