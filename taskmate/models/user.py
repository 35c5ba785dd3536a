from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import List

from .common import new_object_id, utcnow


class User(SQLModel, table=True):
    """Account record. ``email`` is stored lower-cased."""
    __tablename__ = "users"

    id: str = Field(default_factory=new_object_id, primary_key=True, max_length=24)
    name: str = Field(max_length=100)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Relationship to tasks
    tasks: List["Task"] = Relationship(back_populates="user")
