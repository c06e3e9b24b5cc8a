"""
Tenant isolation utilities.

Every tenant-scoped table carries an ``agency_id`` column that must be
part of every read and write. A row owned by another agency is reported
exactly like a missing row, so callers cannot probe for foreign ids.
"""

import logging
from typing import Type, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import not_found
from app.models.base import AgencyScopedMixin, BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def get_tenant_scoped_query(model: Type[T], tenant_id: str) -> Select:
    """
    Create a query scoped to one agency.

    Usage:
        query = get_tenant_scoped_query(CreatorModel, identity.tenant_id)
        result = await db.execute(query.order_by(CreatorModel.created_at))
    """
    if not issubclass(model, AgencyScopedMixin):
        raise TypeError(f"{model.__name__} is not tenant-scoped")

    return select(model).where(model.agency_id == tenant_id)


async def get_tenant_resource(
    db: AsyncSession,
    model: Type[T],
    resource_id: str,
    tenant_id: str,
    label: str | None = None,
) -> T:
    """
    Fetch one resource of the caller's agency.

    Raises:
        HTTPException: 404 if absent or owned by another agency
    """
    result = await db.execute(
        get_tenant_scoped_query(model, tenant_id).where(model.id == resource_id)
    )
    resource = result.scalar_one_or_none()

    if resource is None:
        logger.debug(f"{model.__name__} {resource_id} not visible to agency {tenant_id}")
        raise not_found(f"{label or model.__name__} not found")

    return resource
