"""
Authentication endpoints for agency users.
"""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.core.rate_limit import rate_limit
from app.features.auth.cookies import clear_token_cookie, set_token_cookie
from app.features.auth.dependencies import CurrentIdentity, CurrentPrincipal
from app.features.auth.identity import EphemeralGrantPrincipal
from app.features.auth.schemas import (
    AccountResponse,
    IdentityProfile,
    LoginRequest,
    LoginResponse,
    ProfileUpdate,
    SignupRequest,
    SignupResponse,
)
from app.features.auth.service import auth_service, verification_url
from app.features.auth.sessions import session_store
from app.schemas.agency import AgencySummary
from app.schemas.common import MessageResponse
from app.schemas.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SignupResponse:
    """
    Create an agency and its owner account.

    Requirements:
    - First/last name and agency name of at least 2 characters
    - Password policy (8+ chars, uppercase, digit, special character)
    - Matching confirmation
    - Email not already registered
    """
    user = await auth_service.signup(db, data)

    # TODO: send the verification link by email once an SMTP provider is configured
    link = verification_url(user.verification_token)
    logger.info(f"Verification link issued for {user.email}")

    return SignupResponse(
        message="Account created. Please verify your email before logging in.",
        user=UserRead.model_validate(user),
        verification_url=None if settings.is_production else link,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(rate_limit("auth", by="ip"))],
)
async def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LoginResponse:
    """
    Log in with email and password.

    Sets the ``auth_token`` cookie and drops any demo cookie.
    """
    user, token = await auth_service.login(
        db,
        email=data.email,
        password=data.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

    clear_token_cookie(response, settings.demo_cookie_name)
    set_token_cookie(
        response,
        settings.auth_cookie_name,
        token,
        max_age=timedelta(days=settings.auth_token_expire_days),
        samesite="strict",
    )

    return LoginResponse(message="Logged in", user=UserRead.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    identity: CurrentIdentity,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Delete the caller's session and clear both user cookies."""
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        await session_store.revoke(db, token)

    clear_token_cookie(response, settings.auth_cookie_name)
    clear_token_cookie(response, settings.demo_cookie_name)

    logger.info(f"Logged out: {identity.id}")
    return MessageResponse(message="Logged out")


@router.get("/verify-email/{token}", response_model=MessageResponse)
async def verify_email(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    await auth_service.verify_email(db, token)
    return MessageResponse(message="Email verified, you can now log in")


@router.get("/me", response_model=IdentityProfile)
async def get_me(identity: CurrentIdentity) -> IdentityProfile:
    """
    Get the current caller's profile.

    Demo visitors receive a profile synthesized from their grant.
    """
    if isinstance(identity, EphemeralGrantPrincipal):
        return IdentityProfile(
            id=identity.id,
            email=identity.email,
            first_name=identity.label,
            last_name="Demo",
            role=identity.role,
            agency_id=identity.tenant_id,
            is_demo=True,
        )

    user = identity.user
    return IdentityProfile(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        agency_id=user.agency_id,
        email_verified=user.email_verified,
    )


@router.put("/profile", response_model=UserRead)
async def update_profile(
    data: ProfileUpdate,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRead:
    """Update first and last name. Not available to demo visitors."""
    user = await auth_service.update_profile(db, principal.user, data)
    return UserRead.model_validate(user)


@router.get("/account", response_model=AccountResponse)
async def get_account(
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AccountResponse:
    agency = await auth_service.get_agency(db, principal.tenant_id)
    return AccountResponse(
        user=UserRead.model_validate(principal.user),
        agency=AgencySummary.model_validate(agency),
    )
