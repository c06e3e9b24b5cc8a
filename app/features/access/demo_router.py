"""
Demo access endpoints: exchange a share link for a demo session.
"""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.core.rate_limit import rate_limit
from app.features.access.schemas import DemoAccessGranted, DemoLanding
from app.features.access.service import temporary_access_service
from app.features.auth.cookies import set_token_cookie

router = APIRouter(
    prefix="/demo",
    tags=["Demo"],
    dependencies=[Depends(rate_limit("public_token", by="ip"))],
)


@router.get("/validate/{token}", response_model=DemoLanding)
async def validate_demo_link(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DemoLanding:
    """Landing page preflight."""
    grant, agency = await temporary_access_service.resolve_token(db, token)
    return DemoLanding(
        label=grant.label,
        agency_name=agency.name,
        expires_at=grant.expires_at,
    )


@router.post("/access/{token}", response_model=DemoAccessGranted)
async def access_demo(
    token: str,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DemoAccessGranted:
    """Set a 24 hour ``demo_token`` cookie scoped to the grant's agency."""
    grant, demo_token = await temporary_access_service.exchange(db, token)

    set_token_cookie(
        response,
        settings.demo_cookie_name,
        demo_token,
        max_age=timedelta(hours=settings.demo_token_expire_hours),
    )

    return DemoAccessGranted(message="Access granted", agency_id=grant.agency_id)
