"""
Creator model schemas.
"""

from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.common import BaseSchema


class CreatorModelBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255, alias="nom")
    platform: str = Field(..., min_length=1, max_length=50, alias="plateforme")
    username: str | None = Field(None, max_length=255, alias="nomUtilisateur")
    email: str | None = Field(None, max_length=255)
    instagram_url: str | None = Field(None, alias="urlInstagram")
    tiktok_url: str | None = Field(None, alias="urlTiktok")
    other_social_urls: str | None = Field(None, alias="autresUrlsSociales")
    notes: str | None = None
    photo_url: str | None = Field(None, alias="urlPhoto")
    onboarded_at: datetime | None = Field(None, alias="dateOnboarding")
    followers: int = Field(0, ge=0, alias="abonnes")
    engagement: float = Field(0, ge=0)
    average_reach: int = Field(0, ge=0, alias="porteeMoyenne")
    revenue: float = Field(0, ge=0, alias="revenus")


class CreatorModelCreate(CreatorModelBase):
    pass


class CreatorModelUpdate(BaseSchema):
    """Partial update (all optional)."""

    name: str | None = Field(None, min_length=1, max_length=255, alias="nom")
    platform: str | None = Field(None, min_length=1, max_length=50, alias="plateforme")
    username: str | None = Field(None, max_length=255, alias="nomUtilisateur")
    email: str | None = Field(None, max_length=255)
    instagram_url: str | None = Field(None, alias="urlInstagram")
    tiktok_url: str | None = Field(None, alias="urlTiktok")
    other_social_urls: str | None = Field(None, alias="autresUrlsSociales")
    notes: str | None = None
    photo_url: str | None = Field(None, alias="urlPhoto")
    onboarded_at: datetime | None = Field(None, alias="dateOnboarding")
    followers: int | None = Field(None, ge=0, alias="abonnes")
    engagement: float | None = Field(None, ge=0)
    average_reach: int | None = Field(None, ge=0, alias="porteeMoyenne")
    revenue: float | None = Field(None, ge=0, alias="revenus")

    @field_validator("name", "platform", "followers", "engagement", "average_reach", "revenue")
    @classmethod
    def reject_null(cls, v):
        """These columns can be changed but never cleared."""
        if v is None:
            raise ValueError("This field cannot be null")
        return v


class CreatorModelRead(CreatorModelBase):
    id: str
    agency_id: str = Field(..., alias="agenceId")
    created_at: datetime = Field(..., alias="dateCreation")
