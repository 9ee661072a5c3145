"""Pydantic schemas for user accounts and authentication payloads."""

import re
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, EmailStr, Field

from mireb.repositories.storefront.models.enums import Role
from mireb.repositories.storefront.schemas.common_schema import PersonName, WireModel

PASSWORD_COMPLEXITY = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
MIN_PASSWORD_LENGTH = 6


def check_new_password(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError("Le mot de passe doit contenir au moins 6 caractères")
    if not PASSWORD_COMPLEXITY.match(value):
        raise ValueError(
            "Le mot de passe doit contenir au moins une minuscule, une majuscule et un chiffre"
        )
    return value


NewPassword = Annotated[str, AfterValidator(check_new_password)]
# stored lowercased so the unique index is case-insensitive
NormalizedEmail = Annotated[EmailStr, AfterValidator(str.lower)]


class UserCreate(WireModel):
    """Payload of the public registration endpoint."""

    name: PersonName
    email: NormalizedEmail
    password: NewPassword


class UserLogin(WireModel):
    email: NormalizedEmail
    password: str = Field(..., min_length=1)


class UserProfileUpdate(WireModel):
    """Fields a user may change on their own profile."""

    name: Optional[PersonName] = None
    profile_image: Optional[str] = Field(default=None, max_length=500)


class PasswordChange(WireModel):
    current_password: str = Field(..., min_length=1)
    new_password: NewPassword


class UserStatusUpdate(WireModel):
    is_active: bool


class UserResponse(WireModel):
    """Public profile; the password hash is never part of it."""

    id: int
    name: str
    email: str
    role: Role
    is_active: bool
    is_admin: bool
    profile_image: str = ""
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class AuthPayload(WireModel):
    user: UserResponse
    token: str
