"""
Administration schemas.
"""

from datetime import datetime

from pydantic import EmailStr, Field

from app.models.agency import SubscriptionPlan, SubscriptionStatus
from app.models.user import UserRole
from app.schemas.common import BaseSchema


class AdminLoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1, alias="motDePasse")


class AdminRead(BaseSchema):
    id: str
    email: str
    first_name: str = Field(..., alias="prenom")
    last_name: str = Field(..., alias="nom")
    is_active: bool = Field(..., alias="actif")
    last_login_at: datetime | None = Field(None, alias="derniereConnexion")
    created_at: datetime = Field(..., alias="dateCreation")


class AdminLoginResponse(BaseSchema):
    message: str
    admin: AdminRead


class AdminCreate(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128, alias="motDePasse")
    first_name: str = Field(..., min_length=1, max_length=255, alias="prenom")
    last_name: str = Field(..., min_length=1, max_length=255, alias="nom")


class AdminUpdate(BaseSchema):
    is_active: bool | None = Field(None, alias="actif")
    password: str | None = Field(None, min_length=8, max_length=128, alias="motDePasse")


class AgencyCreate(BaseSchema):
    name: str = Field(..., min_length=2, max_length=255, alias="nom")
    plan: SubscriptionPlan = SubscriptionPlan.FREE
    is_demo: bool = Field(False, alias="demo")


class AgencyUpdate(BaseSchema):
    plan: SubscriptionPlan | None = None
    subscription_status: SubscriptionStatus | None = Field(None, alias="statutAbonnement")
    is_demo: bool | None = Field(None, alias="demo")


class UserAdminUpdate(BaseSchema):
    role: UserRole | None = None
    is_active: bool | None = Field(None, alias="actif")
    email_verified: bool | None = Field(None, alias="emailVerifie")


class PlatformStats(BaseSchema):
    """Headline numbers; demo agencies are counted separately."""

    total_agencies: int = Field(..., alias="totalAgences")
    premium_agencies: int = Field(..., alias="agencesPremium")
    free_agencies: int = Field(..., alias="agencesFree")
    total_users: int = Field(..., alias="totalUtilisateurs")
    active_users: int = Field(..., alias="utilisateursActifs")
    total_admins: int = Field(..., alias="totalAdmins")
    monthly_revenue: int = Field(..., alias="revenuMensuel")
    demo_agencies: int = Field(..., alias="agencesDemo")


class SessionPurgeResult(BaseSchema):
    purged: int
