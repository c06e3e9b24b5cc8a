"""
Creator model business logic.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import bad_request
from app.core.tenant import get_tenant_resource, get_tenant_scoped_query
from app.features.models.schemas import CreatorModelCreate, CreatorModelUpdate
from app.models.creator_model import CreatorModel

logger = logging.getLogger(__name__)


class CreatorModelService:
    """CRUD over the agency's creators, always filtered by agency."""

    @staticmethod
    async def list_models(db: AsyncSession, agency_id: str) -> list[CreatorModel]:
        result = await db.execute(
            get_tenant_scoped_query(CreatorModel, agency_id).order_by(CreatorModel.created_at)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get(db: AsyncSession, agency_id: str, model_id: str) -> CreatorModel:
        return await get_tenant_resource(db, CreatorModel, model_id, agency_id, label="Model")

    @staticmethod
    async def create(
        db: AsyncSession,
        agency_id: str,
        data: CreatorModelCreate,
    ) -> CreatorModel:
        creator = CreatorModel(agency_id=agency_id, **data.model_dump())
        db.add(creator)
        await db.commit()

        logger.info(f"Model created: {creator.name} in agency {agency_id}")
        return creator

    @staticmethod
    async def update(
        db: AsyncSession,
        agency_id: str,
        model_id: str,
        data: CreatorModelUpdate,
    ) -> CreatorModel:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise bad_request("No changes provided")

        creator = await CreatorModelService.get(db, agency_id, model_id)

        for field, value in changes.items():
            setattr(creator, field, value)
        await db.commit()

        return creator

    @staticmethod
    async def delete(db: AsyncSession, agency_id: str, model_id: str) -> None:
        creator = await CreatorModelService.get(db, agency_id, model_id)
        await db.delete(creator)
        await db.commit()

        logger.info(f"Model deleted: {model_id} from agency {agency_id}")


# Singleton instance
creator_model_service = CreatorModelService()
