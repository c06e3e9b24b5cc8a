"""
Database models package.
"""

from app.core.database import Base
from app.models.base import AgencyScopedMixin, BaseModel
from app.models.agency import Agency, SubscriptionPlan, SubscriptionStatus
from app.models.user import User, UserRole
from app.models.session import UserSession
from app.models.invitation import Invitation, InvitationStatus
from app.models.admin import SuperAdmin
from app.models.temporary_access import TemporaryAccess
from app.models.creator_model import CreatorModel

__all__ = [
    "Base",
    "BaseModel",
    "AgencyScopedMixin",
    "Agency",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "User",
    "UserRole",
    "UserSession",
    "Invitation",
    "InvitationStatus",
    "SuperAdmin",
    "TemporaryAccess",
    "CreatorModel",
]
