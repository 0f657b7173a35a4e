from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    phone: Optional[str] = None

class UserCreate(UserBase):
    password: str = Field(..., min_length=6)

class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)

class User(UserBase):
    id: int
    is_admin: bool = False
    booking_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class AuthResponse(BaseModel):
    access_token: str
    token_type: str
    user: User

class SessionUser(BaseModel):
    """Identity of the signed-in user as seen by the booking flow"""
    user_id: int
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> "SessionUser":
        return cls(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            phone=user.phone
        )
