from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..core.security import UserRole

_email = TypeAdapter(EmailStr)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRegister(CamelModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    role: Optional[UserRole] = None
    phone: Optional[str] = Field(default=None, max_length=32)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Full name is required.")
        return value

    @field_validator("phone")
    @classmethod
    def blank_phone_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class UserLogin(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        # Same normalisation as registration; anything that is not an email
        # is looked up verbatim and simply fails authentication.
        try:
            return _email.validate_python(value)
        except PydanticValidationError:
            return value


class UserResponse(CamelModel):
    """Outward user representation; the password hash is never included."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    full_name: str
    email: str
    role: UserRole
    phone: Optional[str] = None


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class ProfileUpdate(CamelModel):
    full_name: Optional[str] = None
