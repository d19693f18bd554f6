from typing import Optional
from pydantic import BaseModel

from archiver.schemas.user import User


class Token(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    identifier: str  # username or email
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class AuthResponse(Token):
    user: User
