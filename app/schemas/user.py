from typing import Optional
from datetime import datetime
from pydantic import EmailStr, Field
from .common import APIModel


class UserBase(APIModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class UserResponse(UserBase):
    id: int
    role: str
    is_verified: bool
    created_at: datetime


class UserSummary(APIModel):
    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None


class Token(APIModel):
    access_token: str
    token_type: str


class UserLogin(APIModel):
    email: EmailStr
    password: str
