"""
API tests for temporary access grants and demo sessions.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.config import settings
from app.core.security import utcnow
from tests.factories import CreatorModelFactory, TemporaryAccessFactory


@pytest.mark.api
class TestGrantManagement:
    async def test_owner_creates_grant(self, owner_client: AsyncClient, agency, owner):
        response = await owner_client.post(
            "/api/v1/temporary-access/",
            json={"nom": "Investor", "email": "investor@test.com", "joursValidite": 30},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["agenceId"] == agency.id
        assert data["creePar"] == owner.id
        assert data["actif"] is True
        assert data["lien"] == f"/access/{data['token']}"
        assert data["dateExpiration"] is not None

    async def test_zero_days_means_no_expiration(self, owner_client: AsyncClient):
        response = await owner_client.post(
            "/api/v1/temporary-access/",
            json={"nom": "Partner", "joursValidite": 0},
        )

        assert response.status_code == 201
        assert response.json()["dateExpiration"] is None

    async def test_member_cannot_create_grant(self, member_client: AsyncClient):
        response = await member_client.post(
            "/api/v1/temporary-access/",
            json={"nom": "Investor"},
        )

        assert response.status_code == 403

    async def test_owner_lists_own_grants(self, owner_client: AsyncClient, db_session, agency, other_agency, owner):
        await TemporaryAccessFactory.create(db_session, agency, owner.id, label="Investor")
        await TemporaryAccessFactory.create(db_session, other_agency, "someone", label="Theirs")

        response = await owner_client.get("/api/v1/temporary-access/")

        assert response.status_code == 200
        assert [g["nom"] for g in response.json()] == ["Investor"]

    async def test_revoke_other_agency_grant_is_not_found(
        self,
        owner_client: AsyncClient,
        db_session,
        other_agency,
    ):
        grant = await TemporaryAccessFactory.create(db_session, other_agency, "someone")

        response = await owner_client.delete(f"/api/v1/temporary-access/{grant.id}")

        assert response.status_code == 404
        await db_session.refresh(grant)
        assert grant.is_active is True


@pytest.mark.api
class TestPublicValidation:
    async def test_valid_link(self, client: AsyncClient, db_session, agency, owner):
        grant = await TemporaryAccessFactory.create(db_session, agency, owner.id, label="Investor")

        response = await client.get(f"/api/v1/temporary-access/validate/{grant.token}")

        assert response.status_code == 200
        assert response.json() == {
            "valid": True,
            "agenceId": agency.id,
            "agenceNom": "Test Agency",
            "nom": "Investor",
        }

    async def test_unknown_link(self, client: AsyncClient):
        response = await client.get("/api/v1/temporary-access/validate/nope")

        assert response.status_code == 404

    async def test_revoked_link(self, client: AsyncClient, db_session, agency, owner):
        grant = await TemporaryAccessFactory.create(db_session, agency, owner.id, is_active=False)

        response = await client.get(f"/api/v1/temporary-access/validate/{grant.token}")

        assert response.status_code == 403
        assert response.json()["detail"] == "This access has been revoked"

    async def test_expired_link(self, client: AsyncClient, db_session, agency, owner):
        grant = await TemporaryAccessFactory.create(
            db_session,
            agency,
            owner.id,
            expires_at=utcnow() - timedelta(minutes=1),
        )

        response = await client.get(f"/api/v1/demo/validate/{grant.token}")

        assert response.status_code == 403
        assert response.json()["detail"] == "This access has expired"


@pytest.mark.api
class TestDemoSession:
    async def test_exchange_gives_read_only_demo_identity(self, client: AsyncClient, db_session, agency, owner):
        grant = await TemporaryAccessFactory.create(db_session, agency, owner.id, label="Investor")
        await CreatorModelFactory.create(db_session, agency, name="Luna")

        response = await client.post(f"/api/v1/demo/access/{grant.token}")
        assert response.status_code == 200
        assert response.json()["agenceId"] == agency.id
        assert settings.demo_cookie_name in response.cookies

        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 200
        me = response.json()
        assert me["isDemo"] is True
        assert me["prenom"] == "Investor"
        assert me["nom"] == "Demo"
        assert me["agenceId"] == agency.id

        # Reads are allowed
        response = await client.get("/api/v1/models/")
        assert response.status_code == 200
        assert [m["nom"] for m in response.json()] == ["Luna"]

        # Writes are not
        response = await client.post("/api/v1/models/", json={"nom": "Nova", "plateforme": "tiktok"})
        assert response.status_code == 403

        response = await client.post(
            "/api/v1/temporary-access/",
            json={"nom": "Another"},
        )
        assert response.status_code == 403

        # Share links are not visible to demo visitors
        response = await client.get("/api/v1/temporary-access/")
        assert response.status_code == 403

        response = await client.put(
            "/api/v1/auth/profile",
            json={"prenom": "Hacker", "nom": "Demo"},
        )
        assert response.status_code == 403

    async def test_revoking_grant_ends_demo_session(
        self,
        owner_client: AsyncClient,
        other_client: AsyncClient,
        db_session,
        agency,
        owner,
    ):
        grant = await TemporaryAccessFactory.create(db_session, agency, owner.id)
        await other_client.post(f"/api/v1/demo/access/{grant.token}")
        assert (await other_client.get("/api/v1/auth/me")).status_code == 200

        response = await owner_client.delete(f"/api/v1/temporary-access/{grant.id}")
        assert response.status_code == 200

        response = await other_client.get("/api/v1/auth/me")
        assert response.status_code == 401

    async def test_exchange_refused_for_revoked_grant(self, client: AsyncClient, db_session, agency, owner):
        grant = await TemporaryAccessFactory.create(db_session, agency, owner.id, is_active=False)

        response = await client.post(f"/api/v1/demo/access/{grant.token}")

        assert response.status_code == 403
        assert settings.demo_cookie_name not in response.cookies
