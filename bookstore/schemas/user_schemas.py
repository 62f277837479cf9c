from typing import Annotated, Literal, Union

from pydantic import BaseModel, EmailStr, Field, TypeAdapter


class LocalAuth(BaseModel):
    provider: Literal["local"] = "local"
    password_hash: str


class GoogleAuth(BaseModel):
    provider: Literal["google"] = "google"
    external_id: str


AuthProvider = Annotated[Union[LocalAuth, GoogleAuth], Field(discriminator="provider")]

auth_adapter = TypeAdapter(AuthProvider)


class UserCreate(BaseModel):
    email: EmailStr
    first_name: str
    last_name: str = ""
    auth: AuthProvider
