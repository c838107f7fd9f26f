# setukpa/schemas/auth.py
from pydantic import BaseModel, EmailStr, ConfigDict

from setukpa.models.enums import Role


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    role: Role


class LoginRequest(BaseModel):
    email: str  # email or nosis
    password: str


class RegisterRequest(BaseModel):
    """Self registration is for students only; staff accounts come from admins"""
    email: EmailStr
    password: str
    name: str
    nosis: str | None = None
    batch_id: int | None = None


class UserPublic(BaseModel):
    id: int
    email: EmailStr
    name: str
    role: Role
    nosis: str | None = None
    batch_id: int | None = None
    pembimbing_id: int | None = None

    model_config = ConfigDict(from_attributes=True)
