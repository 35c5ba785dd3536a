import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from ..config import PASSWORD_RESET_ENABLED
from ..database import get_db
from ..errors import InvalidTokenError, PasswordResetDisabledError
from ..models import User
from ..schemas.user import EmailCheck, PasswordReset, UserCreate, UserLogin, build_user_payload
from ..services.credentials import CredentialStore
from ..services.sessions import SessionIssuer

logger = logging.getLogger(__name__)

router = APIRouter()


def get_session_issuer() -> SessionIssuer:
    return SessionIssuer()


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def _get_token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return None


def get_current_user(
    request: Request,
    credentials: CredentialStore = Depends(get_credential_store),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> User:
    """Resolve the bearer token to a user, or fail with 401."""
    user_id = issuer.authenticate(_get_token_from_request(request))
    user = credentials.get(user_id)
    if user is None:
        # Token outlived its account.
        raise InvalidTokenError()
    return user


def _session_payload(user: User, issuer: SessionIssuer) -> dict:
    token = issuer.issue(user.id)
    return {
        "user": build_user_payload(user),
        "token": token,
        "expiresAt": issuer.expires_at(token).isoformat(),
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(
    body: UserCreate,
    credentials: CredentialStore = Depends(get_credential_store),
    issuer: SessionIssuer = Depends(get_session_issuer),
):
    """Create a new account and start a session for it."""
    user = credentials.register(body.name, body.email, body.password)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": _session_payload(user, issuer),
    }


@router.post("/login")
def login(
    body: UserLogin,
    credentials: CredentialStore = Depends(get_credential_store),
    issuer: SessionIssuer = Depends(get_session_issuer),
):
    """Exchange email and password for a session token."""
    user = credentials.verify(body.email, body.password)
    logger.info("User %s logged in", user.id)
    return {
        "success": True,
        "message": "Login successful",
        "data": _session_payload(user, issuer),
    }


@router.get("/me")
def read_users_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return {"success": True, "data": {"user": build_user_payload(current_user)}}


@router.post("/check-email")
def check_email(body: EmailCheck, credentials: CredentialStore = Depends(get_credential_store)):
    return {"success": True, "data": {"exists": credentials.email_exists(body.email)}}


@router.post("/reset-password")
def reset_password(body: PasswordReset, credentials: CredentialStore = Depends(get_credential_store)):
    """Set a new password for the account registered under ``email``.

    There is no proof of mailbox ownership; deployments that cannot accept
    that turn the flow off with PASSWORD_RESET_ENABLED=false.
    """
    if not PASSWORD_RESET_ENABLED:
        raise PasswordResetDisabledError()
    credentials.reset_password(body.email, body.newPassword)
    return {"success": True, "message": "Password reset successfully"}
