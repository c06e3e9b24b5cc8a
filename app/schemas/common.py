"""
Common/shared Pydantic schemas.
"""

from pydantic import BaseModel, ConfigDict


# Base configuration for all schemas
class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    All schemas should inherit from this. Python attribute names are
    English; the wire names clients use are declared as aliases.
    """

    model_config = ConfigDict(
        from_attributes=True,  # Allow ORM mode (SQLAlchemy objects)
        populate_by_name=True,  # Allow population by field name or alias
        str_strip_whitespace=True,  # Strip whitespace from strings
        validate_assignment=True,  # Validate on assignment, not just creation
    )


# Standard response wrappers
class MessageResponse(BaseModel):
    """Simple message response."""
    message: str


class ErrorDetail(BaseModel):
    """Error detail structure."""
    field: str | None = None
    message: str
    type: str | None = None


class ErrorResponse(BaseModel):
    """Standardized error response."""
    detail: str | dict
    errors: list[ErrorDetail] | None = None
