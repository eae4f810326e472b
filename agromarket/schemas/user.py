from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, ConfigDict, Field
from agromarket.models.user import Role


class UserBase(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(..., min_length=1)
    role: Role = Role.BUYER


class UserResponse(UserBase):
    id: int
    role: Role
    profile_picture: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class AuthPayload(BaseModel):
    token: str
    user: UserResponse


class Identity(BaseModel):
    """Caller identity carried by a verified bearer token."""
    id: int
    email: str
    role: Role

    model_config = ConfigDict(frozen=True)
