"""
Periodic maintenance of authentication data.

Tasks run in Celery workers (scheduled by beat), never on the request path.
"""

import asyncio
import logging
import time

from sqlalchemy import update

from app.core.celery_app import celery_app
from app.core.database import db_manager
from app.core.metrics import task_duration_seconds
from app.core.security import utcnow
from app.features.auth.sessions import session_store
from app.models.invitation import Invitation, InvitationStatus

logger = logging.getLogger(__name__)


def get_or_create_event_loop():
    """Helper to handle asyncio loops safely within thread-based workers."""
    try:
        return asyncio.get_event_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        return loop


def _run(task_name: str, coro_factory) -> dict:
    db_manager.init()
    loop = get_or_create_event_loop()
    start = time.time()
    status = "success"
    try:
        return loop.run_until_complete(coro_factory())
    except Exception:
        status = "failure"
        raise
    finally:
        task_duration_seconds.labels(task_name=task_name, status=status).observe(
            time.time() - start
        )


@celery_app.task(name="purge_expired_sessions")
def purge_expired_sessions() -> dict:
    """Delete session rows whose expiration has passed."""
    logger.info("Starting expired session purge")
    return _run("purge_expired_sessions", _purge_expired_sessions_async)


async def _purge_expired_sessions_async() -> dict:
    async for db in db_manager.get_session():
        purged = await session_store.purge_expired(db)
        return {"sessions_purged": purged}


@celery_app.task(name="expire_stale_invitations")
def expire_stale_invitations() -> dict:
    """
    Mark pending invitations past their expiration as expired.

    Teammate invites are accepted on creation, so this only has work to
    do once invitations are accepted asynchronously.
    """
    return _run("expire_stale_invitations", _expire_stale_invitations_async)


async def _expire_stale_invitations_async() -> dict:
    async for db in db_manager.get_session():
        result = await db.execute(
            update(Invitation)
            .where(
                Invitation.status == InvitationStatus.PENDING,
                Invitation.expires_at <= utcnow(),
            )
            .values(status=InvitationStatus.EXPIRED)
        )
        await db.commit()
        logger.info(f"Expired {result.rowcount} stale invitations")
        return {"invitations_expired": result.rowcount}
