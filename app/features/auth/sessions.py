"""
Server-side session store.

A session row is written for every issued auth token and holds only the
token's SHA-256 digest. Tokens are accepted while their row exists and
is unexpired; logout and the periodic purge delete rows.
"""

import logging
from datetime import timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.metrics import sessions_created_total, sessions_revoked_total
from app.core.security import hash_token, utcnow
from app.models.session import UserSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Create, validate and delete session rows."""

    @staticmethod
    async def create(
        db: AsyncSession,
        user_id: str,
        token: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> UserSession:
        session = UserSession(
            user_id=user_id,
            token_hash=hash_token(token),
            expires_at=utcnow() + timedelta(days=settings.auth_token_expire_days),
            ip_address=ip_address[:45] if ip_address else None,
            user_agent=user_agent,
        )
        db.add(session)
        await db.commit()

        sessions_created_total.inc()
        logger.info(f"Session created for user {user_id}")
        return session

    @staticmethod
    async def is_valid(db: AsyncSession, token: str, user_id: str) -> bool:
        """A row with this digest, for this user, expiring in the future."""
        result = await db.execute(
            select(UserSession.id).where(
                UserSession.token_hash == hash_token(token),
                UserSession.user_id == user_id,
                UserSession.expires_at > utcnow(),
            )
        )
        return result.first() is not None

    @staticmethod
    async def revoke(db: AsyncSession, token: str) -> int:
        """
        Delete the session for a token.

        Idempotent: revoking an unknown token deletes nothing.

        Returns:
            Number of rows deleted
        """
        result = await db.execute(
            delete(UserSession).where(UserSession.token_hash == hash_token(token))
        )
        await db.commit()

        if result.rowcount:
            sessions_revoked_total.labels(reason="logout").inc(result.rowcount)
        return result.rowcount

    @staticmethod
    async def revoke_all_for_user(db: AsyncSession, user_id: str) -> int:
        result = await db.execute(
            delete(UserSession).where(UserSession.user_id == user_id)
        )

        if result.rowcount:
            sessions_revoked_total.labels(reason="user_removed").inc(result.rowcount)
        return result.rowcount

    @staticmethod
    async def purge_expired(db: AsyncSession) -> int:
        """Delete every session whose expiration has passed."""
        result = await db.execute(
            delete(UserSession).where(UserSession.expires_at <= utcnow())
        )
        await db.commit()

        purged = result.rowcount or 0
        if purged:
            sessions_revoked_total.labels(reason="expired").inc(purged)
        logger.info(f"Purged {purged} expired sessions")
        return purged


session_store = SessionStore()
