"""
Defines the SQLAlchemy ORM models for the database.

Each class in this file represents a table in the database and its columns.
The UNIQUE constraints on username, email and phone are the authoritative
guard for identity uniqueness.
"""

import math
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, Float, JSON, ForeignKey, Boolean, Date, DateTime, Text, func
)
from sqlalchemy.orm import relationship
from .database import Base


class Role(str, Enum):
    """Enum to enforce the set of account roles."""
    USER = "user"
    PT = "pt"
    ADMIN = "admin"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BMICategory(str, Enum):
    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


class User(Base):
    """
    Represents the 'users' table in the database.
    """
    __tablename__ = "users"

    # Core identification fields
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, unique=True, index=True, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.USER.value)

    # Basic profile information
    date_of_birth = Column(Date, nullable=True)
    image = Column(String, nullable=True)

    # Trainer profile information
    specialty = Column(String, nullable=True)
    experience = Column(Integer, nullable=True)
    location = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    prices = Column(JSON, nullable=True)

    # Premium membership
    is_premium = Column(Boolean, nullable=False, default=False)
    premium_expired_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    health_info = relationship("HealthInfo", back_populates="user", uselist=False)

    @property
    def premium_days_left(self) -> int:
        """Whole days until the premium membership expires, never negative."""
        if not self.is_premium or self.premium_expired_at is None:
            return 0
        expires_at = self.premium_expired_at
        # SQLite hands back naive datetimes; they are stored as UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        remaining = (expires_at - datetime.now(timezone.utc)).total_seconds()
        return max(0, math.ceil(remaining / 86400))


class HealthInfo(Base):
    """
    Represents the 'health_info' table, one row per user.

    bmi and bmi_category are derived from height and weight and are only
    ever written by the profile merge engine.
    """
    __tablename__ = "health_info"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)

    gender = Column(String, nullable=False, default=Gender.MALE.value)
    height = Column(Float, nullable=False)  # cm
    weight = Column(Float, nullable=False)  # kg
    bmi = Column(Float, nullable=False)
    bmi_category = Column(String, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="health_info")
