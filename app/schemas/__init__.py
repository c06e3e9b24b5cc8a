"""
Pydantic schemas package.
"""

from app.schemas.agency import AgencyRead, AgencySummary
from app.schemas.common import (
    BaseSchema,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
)
from app.schemas.user import UserRead

__all__ = [
    # Common
    "BaseSchema",
    "MessageResponse",
    "ErrorDetail",
    "ErrorResponse",
    # Agency
    "AgencyRead",
    "AgencySummary",
    # User
    "UserRead",
]
