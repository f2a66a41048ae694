"""
Pydantic schemas for users and authentication.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict, model_validator
from enum import Enum

from wms.core.config import settings
from wms.core.permissions import Action, Module, Role


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


# Base schemas
class UserBase(BaseModel):
    """Base user schema with common fields."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr


class UserCreate(UserBase):
    """Schema for an administrator creating an account."""
    password: str = Field(..., min_length=settings.min_password_length, max_length=100)
    role: Role = Role.USER
    status: UserStatus = UserStatus.ACTIVE


class UserUpdate(BaseModel):
    """Schema for an administrator editing an account."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    status: Optional[UserStatus] = None


class ProfileUpdate(BaseModel):
    """Schema for users editing their own profile."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    avatar: Optional[str] = None


class UserChangePassword(BaseModel):
    """Schema for password change."""
    current_password: str
    new_password: str = Field(..., min_length=settings.min_password_length, max_length=100)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("New passwords do not match")
        return self


class UserResponse(UserBase):
    """Schema for user response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: Role
    status: UserStatus
    avatar: Optional[str] = None
    last_active: Optional[datetime] = None
    created_at: datetime


class ModuleAccess(BaseModel):
    """A module the current user can open and what they may do there."""
    module: Module
    actions: list[Action]


# Authentication schemas
class Token(BaseModel):
    """Schema for token response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefresh(BaseModel):
    """Schema for token refresh request."""
    refresh_token: str


class LoginRequest(BaseModel):
    """Schema for login request."""
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Schema for login response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse
