"""
Defines Pydantic schemas for API data validation and serialization.

These schemas determine the shape of the data for API requests and responses.
Update schemas declare every field optional; which fields a client actually
sent is read with `model_dump(exclude_unset=True)`, so a value such as a
height of 0 counts as supplied rather than absent.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .models import Role, Gender, BMICategory


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Treats a blank string, as sent by an empty form field, as no value."""
    if value is None or not value.strip():
        return None
    return value


class UserCreate(BaseModel):
    """Schema for validating new user registration data."""
    username: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: Role = Role.USER

    @field_validator("phone")
    def blank_phone_is_none(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)


class UserLogin(BaseModel):
    """Schema for validating user login credentials."""
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    """Schema for the general profile update: identity and health fields together."""
    username: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None

    gender: Optional[Gender] = None
    height: Optional[float] = Field(None, description="Height in cm", gt=0)
    weight: Optional[float] = Field(None, description="Weight in kg", gt=0)

    @field_validator("phone")
    def blank_phone_is_none(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)


class TrainerProfileUpdate(BaseModel):
    """Schema for the trainer profile update."""
    username: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[int] = Field(None, description="Years of experience", ge=0)
    location: Optional[str] = None
    description: Optional[str] = None
    prices: Optional[Any] = None

    @field_validator("phone")
    def blank_phone_is_none(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)


IDENTITY_FIELDS = ("username", "email", "phone", "date_of_birth")
TRAINER_FIELDS = ("specialty", "experience", "location", "description", "prices")
HEALTH_FIELDS = ("gender", "height", "weight")


class UserResponse(BaseModel):
    """Schema for formatting user data in API responses (excludes the password hash)."""
    id: int
    username: str
    email: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: Role
    image: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[int] = None
    location: Optional[str] = None
    description: Optional[str] = None
    prices: Optional[Any] = None
    is_premium: bool = False
    premium_expired_at: Optional[datetime] = None
    premium_days_left: int = 0

    class Config:
        from_attributes = True


class HealthInfoResponse(BaseModel):
    """Schema for responding with a user's health record."""
    id: int
    gender: Gender
    height: float
    weight: float
    bmi: float
    bmi_category: BMICategory

    class Config:
        from_attributes = True


class ProfileView(BaseModel):
    """The merged read-only view of a user and their health record."""
    user: UserResponse
    health_info: Optional[HealthInfoResponse] = None


class ProfileUpdateResponse(BaseModel):
    message: str
    data: ProfileView


class TrainerUpdateResponse(BaseModel):
    message: str
    updated: UserResponse


class UserEnvelope(BaseModel):
    message: str
    user: UserResponse


class AuthResponse(BaseModel):
    """Schema for the register/login response, carrying the JWT access token."""
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenClaims(BaseModel):
    """The verified contents of an access token."""
    subject_id: int
    role: Role
    issued_at: datetime
    expires_at: datetime


class MessageResponse(BaseModel):
    message: str


