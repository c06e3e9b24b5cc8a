"""
Helpers for the HTTP-only authentication cookies.
"""

from datetime import timedelta
from typing import Literal

from fastapi import Response

from app.config import settings


def set_token_cookie(
    response: Response,
    name: str,
    token: str,
    max_age: timedelta,
    samesite: Literal["lax", "strict", "none"] = "lax",
) -> None:
    """Set an HTTP-only cookie on path /, secure only in production."""
    response.set_cookie(
        key=name,
        value=token,
        max_age=int(max_age.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite=samesite,
    )


def clear_token_cookie(response: Response, name: str) -> None:
    response.delete_cookie(
        key=name,
        path="/",
        httponly=True,
        secure=settings.is_production,
    )
