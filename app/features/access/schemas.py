"""
Temporary access grant schemas.
"""

from datetime import datetime

from pydantic import EmailStr, Field

from app.schemas.common import BaseSchema


class TemporaryAccessCreate(BaseSchema):
    label: str = Field(..., min_length=1, max_length=255, alias="nom")
    email: EmailStr | None = None
    valid_days: int | None = Field(
        None,
        ge=0,
        le=3650,
        alias="joursValidite",
        description="Days until expiration; empty or 0 means no expiration",
    )


class AdminTemporaryAccessCreate(TemporaryAccessCreate):
    agency_id: str = Field(..., alias="agenceId")


class TemporaryAccessRead(BaseSchema):
    id: str
    agency_id: str = Field(..., alias="agenceId")
    label: str = Field(..., alias="nom")
    email: str | None = None
    token: str
    expires_at: datetime | None = Field(None, alias="dateExpiration")
    is_active: bool = Field(..., alias="actif")
    created_by: str = Field(..., alias="creePar")
    created_at: datetime = Field(..., alias="dateCreation")


class TemporaryAccessCreated(TemporaryAccessRead):
    share_link: str = Field(..., alias="lien")


class GrantValidation(BaseSchema):
    """Public preflight for a share link."""

    valid: bool = True
    agency_id: str = Field(..., alias="agenceId")
    agency_name: str = Field(..., alias="agenceNom")
    label: str = Field(..., alias="nom")


class DemoLanding(BaseSchema):
    label: str = Field(..., alias="nom")
    agency_name: str = Field(..., alias="agenceNom")
    expires_at: datetime | None = Field(None, alias="dateExpiration")


class DemoAccessGranted(BaseSchema):
    message: str
    agency_id: str = Field(..., alias="agenceId")
