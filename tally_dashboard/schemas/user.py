"""
User & Auth Schemas
===================
"""

from pydantic import BaseModel, Field, EmailStr
from typing import Optional, Literal
from datetime import datetime

from .base import BaseSchema

UserRole = Literal['admin', 'accountant', 'analyst']


class RegisterSchema(BaseSchema):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginSchema(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserCreateSchema(RegisterSchema):
    """Dipakai admin untuk membuat user dengan role tertentu"""
    role: UserRole = 'analyst'
    is_active: bool = True


class UserUpdateSchema(BaseSchema):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class ProfileUpdateSchema(BaseSchema):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)


class UserSchema(BaseSchema):
    id: int
    username: str
    email: str
    role: str
    is_active: bool = True
    created_at: Optional[datetime] = None


class LoginResponseSchema(BaseModel):
    user: UserSchema
    token: str
    token_type: str = 'Bearer'
    expires_in: int
