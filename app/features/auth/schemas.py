"""
Authentication-specific schemas.
"""

from pydantic import EmailStr, Field, field_validator, model_validator

from app.core.security import validate_password
from app.models.user import UserRole
from app.schemas.agency import AgencySummary
from app.schemas.common import BaseSchema
from app.schemas.user import UserRead


class SignupRequest(BaseSchema):
    """Self-service sign-up: creates an agency and its owner."""

    first_name: str = Field(..., min_length=2, max_length=100, alias="prenom")
    last_name: str = Field(..., min_length=2, max_length=100, alias="nom")
    email: EmailStr
    password: str = Field(..., max_length=128)
    confirm_password: str = Field(..., alias="confirmPassword")
    agency_name: str = Field(..., min_length=2, max_length=255, alias="nomAgence")

    @field_validator("password")
    @classmethod
    def check_password_policy(cls, v: str) -> str:
        result = validate_password(v)
        if not result.is_valid:
            raise ValueError(result.error)
        return v

    @model_validator(mode="after")
    def check_passwords_match(self) -> "SignupRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class SignupResponse(BaseSchema):
    """Sign-up result. The verification link is only exposed outside production."""

    message: str
    user: UserRead
    verification_url: str | None = Field(None, alias="verificationUrl")


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=1, description="User password")


class LoginResponse(BaseSchema):
    message: str
    user: UserRead


class IdentityProfile(BaseSchema):
    """
    Profile of the current caller.

    Demo visitors get a synthesized profile built from their grant.
    """

    id: str
    email: str
    first_name: str = Field(..., alias="prenom")
    last_name: str = Field(..., alias="nom")
    role: UserRole
    agency_id: str = Field(..., alias="agenceId")
    email_verified: bool = Field(True, alias="emailVerifie")
    is_demo: bool = Field(False, alias="isDemo")


class ProfileUpdate(BaseSchema):
    first_name: str = Field(..., min_length=2, max_length=100, alias="prenom")
    last_name: str = Field(..., min_length=2, max_length=100, alias="nom")


class AccountResponse(BaseSchema):
    """User and agency summary for the account page."""

    user: UserRead
    agency: AgencySummary = Field(..., alias="agence")
