"""
Admin plane guard.

Only an ``admin_token`` carrying the admin discriminator and pointing at
an active super admin row is accepted; agency tokens never pass.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.context import set_request_context
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, unauthorized
from app.core.metrics import auth_failures_total
from app.features.auth.authenticators import admin_authenticator
from app.models.admin import SuperAdmin


async def require_admin(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SuperAdmin:
    try:
        admin = await admin_authenticator.authenticate(request, db)
    except AuthenticationError as e:
        auth_failures_total.labels(plane="admin", reason=e.message).inc()
        raise unauthorized(e.message)

    request.state.admin_id = admin.id
    request.state.user_id = admin.id
    request.state.plane = "admin"
    set_request_context(user_id=admin.id, plane="admin")
    return admin


CurrentAdmin = Annotated[SuperAdmin, Depends(require_admin)]
