"""
Team management business logic.

Every query is filtered by the caller's agency; a user id belonging to
another agency is reported as not found.
"""

import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import bad_request, not_found
from app.core.security import generate_secure_password, generate_token, hash_password, utcnow
from app.features.auth.identity import Identity
from app.features.auth.service import auth_service
from app.features.auth.sessions import session_store
from app.features.team.schemas import MemberCreate, MemberInvite
from app.models.invitation import Invitation, InvitationStatus
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


class TeamService:
    """Agency membership operations."""

    @staticmethod
    async def list_members(db: AsyncSession, agency_id: str) -> list[User]:
        result = await db.execute(
            select(User)
            .where(User.agency_id == agency_id)
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_member(db: AsyncSession, agency_id: str, user_id: str) -> User:
        result = await db.execute(
            select(User).where(User.id == user_id, User.agency_id == agency_id)
        )
        member = result.scalar_one_or_none()
        if member is None:
            raise not_found("Member not found")
        return member

    @staticmethod
    async def _create_member(
        db: AsyncSession,
        agency_id: str,
        data: MemberInvite,
        password: str,
    ) -> User:
        email = data.email.lower()

        # Emails are unique across all agencies
        if await auth_service.get_user_by_email(db, email):
            raise bad_request("A user with this email already exists")

        member = User(
            email=email,
            hashed_password=hash_password(password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=UserRole(data.role),
            agency_id=agency_id,
            is_active=True,
            email_verified=True,
        )
        db.add(member)
        return member

    @staticmethod
    async def invite(
        db: AsyncSession,
        inviter: Identity,
        data: MemberInvite,
    ) -> tuple[User, str]:
        """
        Create a verified account with a generated password.

        An invitation is recorded as already accepted for traceability.

        Returns:
            (member, generated_password)
        """
        password = generate_secure_password()
        member = await TeamService._create_member(db, inviter.tenant_id, data, password)

        db.add(Invitation(
            email=member.email,
            role=data.role,
            token=generate_token(),
            status=InvitationStatus.ACCEPTED,
            expires_at=utcnow() + timedelta(hours=settings.invitation_expire_hours),
            agency_id=inviter.tenant_id,
            invited_by_user_id=inviter.id,
        ))
        await db.commit()

        # TODO: email the credentials to the invitee once an SMTP provider is configured
        logger.info(f"Member invited: {member.email} to agency {inviter.tenant_id}")
        return member, password

    @staticmethod
    async def create(
        db: AsyncSession,
        agency_id: str,
        data: MemberCreate,
    ) -> User:
        member = await TeamService._create_member(db, agency_id, data, data.password)
        await db.commit()

        logger.info(f"Member created: {member.email} in agency {agency_id}")
        return member

    @staticmethod
    async def delete(db: AsyncSession, caller: Identity, user_id: str) -> None:
        """
        Remove a member and their sessions.

        Raises:
            HTTPException: 404 outside the agency, 400 for owners or self
        """
        member = await TeamService.get_member(db, caller.tenant_id, user_id)

        if member.role == UserRole.OWNER:
            raise bad_request("The agency owner cannot be removed")

        if member.id == caller.id:
            raise bad_request("You cannot delete your own account")

        await session_store.revoke_all_for_user(db, member.id)
        await db.delete(member)
        await db.commit()

        logger.info(f"Member removed: {member.email} from agency {caller.tenant_id}")

    @staticmethod
    async def change_role(
        db: AsyncSession,
        caller: Identity,
        user_id: str,
        role: UserRole,
    ) -> User:
        member = await TeamService.get_member(db, caller.tenant_id, user_id)

        if member.id == caller.id:
            raise bad_request("You cannot change your own role")

        member.role = role
        await db.commit()

        logger.info(f"Role changed: {member.email} -> {role.value}")
        return member

    @staticmethod
    async def list_pending_invitations(db: AsyncSession, agency_id: str) -> list[Invitation]:
        """
        Invitations still waiting for acceptance.

        ``invite`` creates the account immediately and records its
        invitation as accepted, so this is empty until invitations are
        sent by email and accepted later.
        """
        result = await db.execute(
            select(Invitation)
            .where(
                Invitation.agency_id == agency_id,
                Invitation.status == InvitationStatus.PENDING,
            )
            .order_by(Invitation.created_at.desc())
        )
        return list(result.scalars().all())


# Singleton instance
team_service = TeamService()
