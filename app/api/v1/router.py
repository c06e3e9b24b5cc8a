"""
API v1 router aggregator.

All v1 routes are registered here.
"""

from fastapi import APIRouter

from app.features.access.demo_router import router as demo_router
from app.features.access.router import router as temporary_access_router
from app.features.admin.auth_router import router as admin_auth_router
from app.features.admin.router import router as admin_router
from app.features.auth.router import router as auth_router
from app.features.billing.router import router as billing_router
from app.features.models.router import router as models_router
from app.features.team.router import router as team_router

# V1 API router
v1_router = APIRouter(prefix="/v1")

# Tenant plane
v1_router.include_router(auth_router)
v1_router.include_router(team_router)
v1_router.include_router(temporary_access_router)
v1_router.include_router(demo_router)
v1_router.include_router(models_router)
v1_router.include_router(billing_router)

# Admin plane (auth router first: /admin/auth/* is not behind the admin guard)
v1_router.include_router(admin_auth_router)
v1_router.include_router(admin_router)
