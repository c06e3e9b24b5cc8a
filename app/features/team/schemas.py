"""
Team management schemas.
"""

from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field

from app.models.invitation import InvitationStatus
from app.models.user import UserRole
from app.schemas.common import BaseSchema
from app.schemas.user import UserRead

InvitableRole = Literal["member", "model"]


class MemberInvite(BaseSchema):
    """Invite a teammate; the account is created with a generated password."""

    first_name: str = Field(..., min_length=2, max_length=100, alias="prenom")
    last_name: str = Field(..., min_length=2, max_length=100, alias="nom")
    email: EmailStr
    role: InvitableRole


class MemberCreate(MemberInvite):
    """Create a teammate with an owner-chosen password."""

    password: str = Field(..., min_length=6, max_length=128, alias="motDePasse")


class RoleUpdate(BaseSchema):
    role: UserRole


class MemberCreatedResponse(BaseSchema):
    message: str
    member: UserRead = Field(..., alias="membre")
    generated_password: str | None = Field(None, alias="motDePasse")


class InvitationRead(BaseSchema):
    id: str
    email: str
    role: str
    status: InvitationStatus = Field(..., alias="statut")
    invited_by_user_id: str | None = Field(None, alias="invitePar")
    expires_at: datetime = Field(..., alias="dateExpiration")
    created_at: datetime = Field(..., alias="dateCreation")
