# app/core/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime
import re

class PasswordComplexity:
    """Класс для проверки сложности пароля"""
    MIN_LENGTH = 8
    MAX_LENGTH = 64
    REQUIRE_LETTER = True
    REQUIRE_DIGIT = True

    @classmethod
    def validate(cls, password: str) -> None:
        """Проверка сложности пароля"""
        errors = []

        if len(password) < cls.MIN_LENGTH:
            errors.append(f"Password must be at least {cls.MIN_LENGTH} characters long")
        if len(password) > cls.MAX_LENGTH:
            errors.append(f"Password must be at most {cls.MAX_LENGTH} characters long")

        if cls.REQUIRE_LETTER and not any(c.isalpha() for c in password):
            errors.append("Password must contain at least one letter")
        if cls.REQUIRE_DIGIT and not any(c.isdigit() for c in password):
            errors.append("Password must contain at least one digit")

        weak_passwords = [
            "password1", "12345678a", "qwerty123", "abc12345", "iloveyou1", "1q2w3e4r",
        ]
        if password.lower() in weak_passwords:
            errors.append("Password is too common and easily guessable")

        if errors:
            raise ValueError("; ".join(errors))

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="Public username")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if not re.match(r'^[A-Za-z0-9_.-]+$', v):
            raise ValueError("Username may contain only letters, digits, '_', '.' and '-'")
        return v

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        """Валидация сложности пароля"""
        PasswordComplexity.validate(v)
        return v

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiration time in seconds")

class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str = "user"
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserPublic(BaseModel):
    id: int
    username: str
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Refresh token for getting new access token")
