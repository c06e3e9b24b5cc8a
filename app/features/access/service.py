"""
Temporary access grants.

A grant is a revocable, optionally time-boxed share link for one agency.
Exchanging its token yields a short-lived demo token; the grant itself
is never turned into a user account.
"""

import logging
from datetime import timedelta

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import forbidden, not_found
from app.core.metrics import demo_exchanges_total
from app.core.security import create_demo_token, generate_token, utcnow
from app.features.access.schemas import TemporaryAccessCreate
from app.models.agency import Agency
from app.models.temporary_access import TemporaryAccess

logger = logging.getLogger(__name__)


def share_link(grant: TemporaryAccess) -> str:
    return f"/access/{grant.token}"


class TemporaryAccessService:
    """Create, revoke, validate and exchange temporary access grants."""

    @staticmethod
    async def list_for_agency(db: AsyncSession, agency_id: str) -> list[TemporaryAccess]:
        result = await db.execute(
            select(TemporaryAccess)
            .where(TemporaryAccess.agency_id == agency_id)
            .order_by(TemporaryAccess.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_all(db: AsyncSession) -> list[TemporaryAccess]:
        result = await db.execute(
            select(TemporaryAccess).order_by(TemporaryAccess.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def create(
        db: AsyncSession,
        agency_id: str,
        created_by: str,
        data: TemporaryAccessCreate,
    ) -> TemporaryAccess:
        """
        Create an active grant.

        A positive ``valid_days`` sets an absolute expiration; otherwise
        the grant lasts until revoked.
        """
        expires_at = None
        if data.valid_days:
            expires_at = utcnow() + timedelta(days=data.valid_days)

        grant = TemporaryAccess(
            agency_id=agency_id,
            label=data.label,
            email=data.email,
            token=generate_token(32),
            expires_at=expires_at,
            is_active=True,
            created_by=created_by,
        )
        db.add(grant)
        await db.commit()

        logger.info(f"Temporary access created: {grant.label} for agency {agency_id}")
        return grant

    @staticmethod
    async def revoke(
        db: AsyncSession,
        grant_id: str,
        agency_id: str | None = None,
    ) -> TemporaryAccess:
        """
        Deactivate a grant; the row is kept.

        With ``agency_id`` the lookup is tenant-scoped (404 across agencies).
        """
        query = select(TemporaryAccess).where(TemporaryAccess.id == grant_id)
        if agency_id is not None:
            query = query.where(TemporaryAccess.agency_id == agency_id)

        result = await db.execute(query)
        grant = result.scalar_one_or_none()
        if grant is None:
            raise not_found("Access not found")

        grant.is_active = False
        await db.commit()

        logger.info(f"Temporary access revoked: {grant.id}")
        return grant

    @staticmethod
    async def resolve_token(db: AsyncSession, token: str) -> tuple[TemporaryAccess, Agency]:
        """
        Look up a usable grant by its bare token.

        Raises:
            HTTPException: 404 unknown token, 403 revoked or expired
        """
        result = await db.execute(
            select(TemporaryAccess).where(TemporaryAccess.token == token)
        )
        grant = result.scalar_one_or_none()

        if grant is None:
            raise not_found("Invalid access link")

        if not grant.is_active:
            raise forbidden("This access has been revoked")

        if grant.is_expired():
            raise forbidden("This access has expired")

        result = await db.execute(select(Agency).where(Agency.id == grant.agency_id))
        agency = result.scalar_one_or_none()
        if agency is None:
            raise not_found("Invalid access link")

        return grant, agency

    @staticmethod
    async def exchange(db: AsyncSession, token: str) -> tuple[TemporaryAccess, str]:
        """
        Trade a valid grant token for a demo token.

        Returns:
            (grant, demo_token)
        """
        try:
            grant, _ = await TemporaryAccessService.resolve_token(db, token)
        except HTTPException:
            demo_exchanges_total.labels(outcome="rejected").inc()
            raise

        demo_token = create_demo_token(grant.id, grant.agency_id, grant.label)
        demo_exchanges_total.labels(outcome="granted").inc()

        logger.info(f"Demo access granted via grant {grant.id}")
        return grant, demo_token


# Singleton instance
temporary_access_service = TemporaryAccessService()
