# timeblocks/api/schemas/auth_schema.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer

from timeblocks.api.schemas._datetime_serializer import serialize_dt


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=200)
    name: str | None = Field(default=None, max_length=100)


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=4, max_length=12)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=200)


class RequestPasswordResetRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    code: str = Field(min_length=4, max_length=12)
    new_password: str = Field(min_length=8, max_length=200, alias="newPassword")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None = None
    role: str
    email_verified_at: datetime | None = None

    @field_serializer("email_verified_at")
    def serialize_dates(self, value: datetime | None):
        return serialize_dt(value)


class AuthResponse(BaseModel):
    user: UserResponse
