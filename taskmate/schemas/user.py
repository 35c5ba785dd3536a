from pydantic import BaseModel
from typing import Optional

from ..models import User


class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class EmailCheck(BaseModel):
    email: Optional[str] = None


class PasswordReset(BaseModel):
    email: Optional[str] = None
    newPassword: Optional[str] = None


def build_user_payload(user: User) -> dict:
    return {
        "_id": user.id,
        "name": user.name,
        "email": user.email,
        "createdAt": user.created_at.isoformat(),
        "updatedAt": user.updated_at.isoformat(),
    }
