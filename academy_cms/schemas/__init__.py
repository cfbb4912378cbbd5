"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, validate_email
from pydantic_core import PydanticCustomError

# bcrypt only looks at the first 72 bytes of a password and refuses longer input.
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


NewPassword = Annotated[str, Field(min_length=6), AfterValidator(_check_password_bytes)]


def normalize_email(value: str) -> str:
    """Canonical form of an address, the one `EmailStr` stores at registration."""
    _, email = validate_email(value)
    return email


def _lookup_email(value: str) -> str:
    # Malformed input is kept as is: it matches no account and gets the usual reply.
    try:
        return normalize_email(value)
    except PydanticCustomError:
        return value


LookupEmail = Annotated[str, Field(min_length=1, max_length=254), AfterValidator(_lookup_email)]


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: NewPassword


class LoginRequest(BaseModel):
    email: LookupEmail
    password: str = Field(..., min_length=1)


class AccountLoginResponse(BaseModel):
    account_id: str
    username: str
    email: str
    role: str
    access_token: str
    token_type: str = "bearer"


class AccountResponse(BaseModel):
    id: str
    username: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RoleUpdate(BaseModel):
    # Free-form on purpose: values outside the enumeration are answered with "Invalid role".
    role: str


class ForgotPasswordRequest(BaseModel):
    email: LookupEmail


class ResetPasswordRequest(BaseModel):
    password: NewPassword
    confirm_password: str = Field(..., alias="confirmPassword")

    model_config = ConfigDict(populate_by_name=True)


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: NewPassword


class MessageResponse(BaseModel):
    message: str


class DeleteResponse(MessageResponse):
    id: str
