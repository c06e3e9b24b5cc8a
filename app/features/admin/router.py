"""
Platform administration endpoints (admin plane only).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.features.access.schemas import (
    AdminTemporaryAccessCreate,
    TemporaryAccessCreated,
    TemporaryAccessRead,
)
from app.features.access.service import share_link, temporary_access_service
from app.features.admin.dependencies import CurrentAdmin, require_admin
from app.features.admin.schemas import (
    AdminCreate,
    AdminRead,
    AdminUpdate,
    AgencyCreate,
    AgencyUpdate,
    PlatformStats,
    SessionPurgeResult,
    UserAdminUpdate,
)
from app.features.admin.service import admin_service
from app.features.auth.sessions import session_store
from app.schemas.agency import AgencyRead
from app.schemas.common import MessageResponse
from app.schemas.user import UserRead

router = APIRouter(
    prefix="/admin",
    tags=["Administration"],
    dependencies=[Depends(require_admin)],
)

DB = Annotated[AsyncSession, Depends(get_db)]


@router.get("/check")
async def check_admin(admin: CurrentAdmin) -> dict:
    return {"isAdmin": True}


# Agencies

@router.get("/agencies", response_model=list[AgencyRead])
async def list_agencies(db: DB) -> list[AgencyRead]:
    agencies = await admin_service.list_agencies(db)
    return [AgencyRead.model_validate(a) for a in agencies]


@router.post("/agencies", response_model=AgencyRead, status_code=status.HTTP_201_CREATED)
async def create_agency(data: AgencyCreate, db: DB) -> AgencyRead:
    agency = await admin_service.create_agency(db, data)
    return AgencyRead.model_validate(agency)


@router.patch("/agencies/{agency_id}", response_model=AgencyRead)
async def update_agency(agency_id: str, data: AgencyUpdate, db: DB) -> AgencyRead:
    """Change plan, subscription status or demo flag."""
    agency = await admin_service.update_agency(db, agency_id, data)
    return AgencyRead.model_validate(agency)


# Users

@router.get("/users", response_model=list[UserRead])
async def list_users(db: DB) -> list[UserRead]:
    users = await admin_service.list_users(db)
    return [UserRead.model_validate(u) for u in users]


@router.patch("/users/{user_id}", response_model=UserRead)
async def update_user(user_id: str, data: UserAdminUpdate, db: DB) -> UserRead:
    user = await admin_service.update_user(db, user_id, data)
    return UserRead.model_validate(user)


# Admins

@router.get("/admins", response_model=list[AdminRead])
async def list_admins(db: DB) -> list[AdminRead]:
    admins = await admin_service.list_admins(db)
    return [AdminRead.model_validate(a) for a in admins]


@router.post("/admins", response_model=AdminRead, status_code=status.HTTP_201_CREATED)
async def create_admin(data: AdminCreate, db: DB) -> AdminRead:
    admin = await admin_service.create_admin(db, data)
    return AdminRead.model_validate(admin)


@router.patch("/admins/{admin_id}", response_model=AdminRead)
async def update_admin(admin_id: str, data: AdminUpdate, db: DB) -> AdminRead:
    admin = await admin_service.update_admin(db, admin_id, data)
    return AdminRead.model_validate(admin)


# Stats

@router.get("/stats", response_model=PlatformStats)
async def platform_stats(db: DB) -> PlatformStats:
    return PlatformStats(**await admin_service.stats(db))


# Temporary access

@router.get("/temporary-access", response_model=list[TemporaryAccessRead])
async def list_all_grants(db: DB) -> list[TemporaryAccessRead]:
    grants = await temporary_access_service.list_all(db)
    return [TemporaryAccessRead.model_validate(g) for g in grants]


@router.post(
    "/temporary-access",
    response_model=TemporaryAccessCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_grant_for_agency(
    data: AdminTemporaryAccessCreate,
    admin: CurrentAdmin,
    db: DB,
) -> TemporaryAccessCreated:
    await admin_service.get_agency(db, data.agency_id)
    grant = await temporary_access_service.create(db, data.agency_id, admin.id, data)
    return TemporaryAccessCreated(
        **TemporaryAccessRead.model_validate(grant).model_dump(),
        share_link=share_link(grant),
    )


@router.delete("/temporary-access/{grant_id}", response_model=MessageResponse)
async def revoke_any_grant(grant_id: str, db: DB) -> MessageResponse:
    await temporary_access_service.revoke(db, grant_id)
    return MessageResponse(message="Access revoked")


# Sessions

@router.post("/sessions/purge", response_model=SessionPurgeResult)
async def purge_sessions(db: DB) -> SessionPurgeResult:
    """Delete expired sessions now instead of waiting for the hourly job."""
    return SessionPurgeResult(purged=await session_store.purge_expired(db))
