"""
Temporary access management endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.rate_limit import rate_limit
from app.features.access.schemas import (
    GrantValidation,
    TemporaryAccessCreate,
    TemporaryAccessCreated,
    TemporaryAccessRead,
)
from app.features.access.service import share_link, temporary_access_service
from app.features.auth.dependencies import CurrentPrincipal, OwnerPrincipal
from app.schemas.common import MessageResponse

router = APIRouter(prefix="/temporary-access", tags=["Temporary access"])


@router.get("/", response_model=list[TemporaryAccessRead])
async def list_grants(
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[TemporaryAccessRead]:
    """Share links of the caller's agency. Demo visitors cannot see them."""
    grants = await temporary_access_service.list_for_agency(db, principal.tenant_id)
    return [TemporaryAccessRead.model_validate(g) for g in grants]


@router.post("/", response_model=TemporaryAccessCreated, status_code=status.HTTP_201_CREATED)
async def create_grant(
    data: TemporaryAccessCreate,
    owner: OwnerPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TemporaryAccessCreated:
    """Create a share link for the caller's agency (owner only)."""
    grant = await temporary_access_service.create(db, owner.tenant_id, owner.id, data)

    return TemporaryAccessCreated(
        **TemporaryAccessRead.model_validate(grant).model_dump(),
        share_link=share_link(grant),
    )


@router.delete("/{grant_id}", response_model=MessageResponse)
async def revoke_grant(
    grant_id: str,
    owner: OwnerPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    await temporary_access_service.revoke(db, grant_id, agency_id=owner.tenant_id)
    return MessageResponse(message="Access revoked")


@router.get(
    "/validate/{token}",
    response_model=GrantValidation,
    dependencies=[Depends(rate_limit("public_token", by="ip"))],
)
async def validate_grant(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GrantValidation:
    """
    Public check of a share link (no authentication).

    404 for an unknown token, 403 when revoked or expired.
    """
    grant, agency = await temporary_access_service.resolve_token(db, token)
    return GrantValidation(
        agency_id=grant.agency_id,
        agency_name=agency.name,
        label=grant.label,
    )
