"""
Admin plane authentication endpoints.
"""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationError
from app.core.rate_limit import rate_limit
from app.features.admin.schemas import AdminLoginRequest, AdminLoginResponse, AdminRead
from app.features.admin.service import admin_auth_service
from app.features.auth.authenticators import admin_authenticator
from app.features.auth.cookies import clear_token_cookie, set_token_cookie
from app.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/auth", tags=["Admin authentication"])


@router.post(
    "/login",
    response_model=AdminLoginResponse,
    dependencies=[Depends(rate_limit("admin_auth", by="ip"))],
)
async def admin_login(
    data: AdminLoginRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdminLoginResponse:
    """Log in as a super admin; sets the ``admin_token`` cookie."""
    admin, token = await admin_auth_service.login(db, data.email, data.password)

    set_token_cookie(
        response,
        settings.admin_cookie_name,
        token,
        max_age=timedelta(days=settings.admin_token_expire_days),
    )

    return AdminLoginResponse(message="Logged in", admin=AdminRead.model_validate(admin))


@router.post("/logout", response_model=MessageResponse)
async def admin_logout(response: Response) -> MessageResponse:
    clear_token_cookie(response, settings.admin_cookie_name)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=AdminRead)
async def admin_me(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """
    Current admin, re-checked against the database on every call.

    A deactivated or deleted account gets a 401 and its cookie cleared.
    """
    try:
        admin = await admin_authenticator.authenticate(request, db)
    except AuthenticationError as e:
        failure = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": e.message},
        )
        clear_token_cookie(failure, settings.admin_cookie_name)
        return failure

    return AdminRead.model_validate(admin)
