"""
Integration tests for the periodic maintenance jobs.

The coroutines behind the Celery tasks are run directly against the
test database.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from app.core.security import generate_token, utcnow
from app.features.auth import tasks
from app.models import Invitation, InvitationStatus, UserSession
from tests.factories import AgencyFactory, SessionFactory, UserFactory


class _TestDatabase:
    def __init__(self, session):
        self.session = session

    async def get_session(self):
        yield self.session


@pytest.fixture
def task_db(monkeypatch, db_session):
    monkeypatch.setattr(tasks, "db_manager", _TestDatabase(db_session))
    return db_session


@pytest.mark.integration
class TestMaintenanceTasks:
    async def test_purge_expired_sessions(self, task_db):
        agency = await AgencyFactory.create(task_db)
        user = await UserFactory.create(task_db, agency)
        await SessionFactory.create(task_db, user, expires_in=timedelta(days=-1))
        await SessionFactory.create(task_db, user)

        result = await tasks._purge_expired_sessions_async()

        assert result == {"sessions_purged": 1}
        remaining = (await task_db.execute(select(UserSession))).scalars().all()
        assert len(remaining) == 1

    async def test_expire_stale_invitations(self, task_db):
        agency = await AgencyFactory.create(task_db)

        def invitation(expires_in: timedelta, status=InvitationStatus.PENDING) -> Invitation:
            return Invitation(
                email=f"{generate_token()[:8]}@test.com",
                role="member",
                token=generate_token(),
                status=status,
                expires_at=utcnow() + expires_in,
                agency_id=agency.id,
            )

        stale = invitation(timedelta(hours=-1))
        fresh = invitation(timedelta(hours=1))
        accepted = invitation(timedelta(hours=-1), InvitationStatus.ACCEPTED)
        task_db.add_all([stale, fresh, accepted])
        await task_db.commit()

        result = await tasks._expire_stale_invitations_async()

        assert result == {"invitations_expired": 1}
        for row in (stale, fresh, accepted):
            await task_db.refresh(row)
        assert InvitationStatus(stale.status) is InvitationStatus.EXPIRED
        assert InvitationStatus(fresh.status) is InvitationStatus.PENDING
        assert InvitationStatus(accepted.status) is InvitationStatus.ACCEPTED
