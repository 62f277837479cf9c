from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional
from datetime import datetime

from bookstore.schemas.user_schemas import AuthProvider, auth_adapter


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    first_name: str
    last_name: str = ""

    # LocalAuth | GoogleAuth, stored as its tagged JSON form
    auth: dict = Field(sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def auth_provider(self) -> AuthProvider:
        return auth_adapter.validate_python(self.auth)
