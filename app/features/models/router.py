"""
Creator model endpoints (tenant-scoped).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.features.auth.dependencies import CurrentIdentity, EditorPrincipal
from app.features.models.schemas import CreatorModelCreate, CreatorModelRead, CreatorModelUpdate
from app.features.models.service import creator_model_service
from app.schemas.common import MessageResponse

router = APIRouter(prefix="/models", tags=["Models"])

DB = Annotated[AsyncSession, Depends(get_db)]


@router.get("/", response_model=list[CreatorModelRead])
async def list_models(identity: CurrentIdentity, db: DB) -> list[CreatorModelRead]:
    """List the creators of the caller's agency (demo visitors included)."""
    creators = await creator_model_service.list_models(db, identity.tenant_id)
    return [CreatorModelRead.model_validate(c) for c in creators]


@router.get("/{model_id}", response_model=CreatorModelRead)
async def get_model(model_id: str, identity: CurrentIdentity, db: DB) -> CreatorModelRead:
    creator = await creator_model_service.get(db, identity.tenant_id, model_id)
    return CreatorModelRead.model_validate(creator)


@router.post("/", response_model=CreatorModelRead, status_code=status.HTTP_201_CREATED)
async def create_model(
    data: CreatorModelCreate,
    identity: EditorPrincipal,
    db: DB,
) -> CreatorModelRead:
    creator = await creator_model_service.create(db, identity.tenant_id, data)
    return CreatorModelRead.model_validate(creator)


@router.patch("/{model_id}", response_model=CreatorModelRead)
async def update_model(
    model_id: str,
    data: CreatorModelUpdate,
    identity: EditorPrincipal,
    db: DB,
) -> CreatorModelRead:
    creator = await creator_model_service.update(db, identity.tenant_id, model_id, data)
    return CreatorModelRead.model_validate(creator)


@router.delete("/{model_id}", response_model=MessageResponse)
async def delete_model(model_id: str, identity: EditorPrincipal, db: DB) -> MessageResponse:
    await creator_model_service.delete(db, identity.tenant_id, model_id)
    return MessageResponse(message="Model deleted")
