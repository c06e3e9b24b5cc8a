"""
Team management endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.features.auth.dependencies import CurrentIdentity, OwnerPrincipal
from app.features.team.schemas import (
    InvitationRead,
    MemberCreate,
    MemberCreatedResponse,
    MemberInvite,
    RoleUpdate,
)
from app.features.team.service import team_service
from app.schemas.common import MessageResponse
from app.schemas.user import UserRead

router = APIRouter(prefix="/team", tags=["Team"])


@router.get("/", response_model=list[UserRead])
async def list_members(
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[UserRead]:
    """Members of the caller's agency, oldest first."""
    members = await team_service.list_members(db, identity.tenant_id)
    return [UserRead.model_validate(m) for m in members]


@router.post("/invite", response_model=MemberCreatedResponse, status_code=status.HTTP_201_CREATED)
async def invite_member(
    data: MemberInvite,
    owner: OwnerPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MemberCreatedResponse:
    """
    Invite a member (owner only).

    Outside production the generated password is returned so the
    account can be handed over without email delivery.
    """
    member, password = await team_service.invite(db, owner, data)

    return MemberCreatedResponse(
        message="Member invited",
        member=UserRead.model_validate(member),
        generated_password=None if settings.is_production else password,
    )


@router.post("/", response_model=MemberCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    data: MemberCreate,
    owner: OwnerPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MemberCreatedResponse:
    """Create a member with a chosen password (owner only)."""
    member = await team_service.create(db, owner.tenant_id, data)
    return MemberCreatedResponse(message="Member created", member=UserRead.model_validate(member))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_member(
    user_id: str,
    owner: OwnerPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    await team_service.delete(db, owner, user_id)
    return MessageResponse(message="Member removed")


@router.patch("/{user_id}/role", response_model=UserRead)
async def change_role(
    user_id: str,
    data: RoleUpdate,
    owner: OwnerPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRead:
    member = await team_service.change_role(db, owner, user_id, data.role)
    return UserRead.model_validate(member)


@router.get("/invitations", response_model=list[InvitationRead])
async def list_invitations(
    owner: OwnerPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[InvitationRead]:
    invitations = await team_service.list_pending_invitations(db, owner.tenant_id)
    return [InvitationRead.model_validate(i) for i in invitations]
