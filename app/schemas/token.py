from pydantic import BaseModel, EmailStr
from typing import Optional

from app.schemas.user import User

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    user_id: Optional[int] = None
    role: Optional[str] = None
    jti: Optional[str] = None
    exp: Optional[int] = None

class LoginResponse(BaseModel):
    token: Token
    user: User
