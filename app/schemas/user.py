"""
Pydantic schemas for User.
"""

from datetime import datetime

from pydantic import Field

from app.models.user import UserRole
from app.schemas.common import BaseSchema


class UserRead(BaseSchema):
    """Schema for reading user data (never exposes credentials)."""

    id: str
    agency_id: str = Field(..., alias="agenceId")
    email: str
    first_name: str = Field(..., alias="prenom")
    last_name: str = Field(..., alias="nom")
    role: UserRole
    email_verified: bool = Field(..., alias="emailVerifie")
    is_active: bool = Field(..., alias="actif")
    last_login_at: datetime | None = Field(None, alias="derniereConnexion")
    created_at: datetime = Field(..., alias="dateCreation")
