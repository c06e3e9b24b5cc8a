"""
Security utilities for authentication and authorization.

Provides:
- Password hashing and verification (bcrypt)
- Password policy and generated passwords
- Random tokens and token digests
- JWT issuance and validation for the tenant, demo and admin planes
"""

import hashlib
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings

logger = logging.getLogger(__name__)

# Token type discriminators
ACCESS_TOKEN_TYPE = "access"
ADMIN_TOKEN_TYPE = "admin"
DEMO_TOKEN_TYPE = "demo"

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

SPECIAL_CHARACTERS = "@#$%&*!?"


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes coming back from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hashed password (salted, non-deterministic)
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash.

    Malformed or unknown hashes verify as False instead of raising.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.warning(f"Password hash could not be verified: {e}")
        return False


def generate_token(length: int = 32) -> str:
    """
    Generate a secure random hex token.

    Used for email verification, password reset, invitations
    and temporary access links.

    Args:
        length: Number of random bytes (hex output is twice as long)
    """
    return secrets.token_hex(length)


def generate_secure_password() -> str:
    """
    Generate a random password that satisfies the password policy.

    3 uppercase letters, 3 digits, 2 special characters and
    4 lowercase letters, shuffled with the system CSPRNG.
    """
    rng = secrets.SystemRandom()

    characters = (
        [secrets.choice(string.ascii_uppercase) for _ in range(3)]
        + [secrets.choice(string.digits) for _ in range(3)]
        + [secrets.choice(SPECIAL_CHARACTERS) for _ in range(2)]
        + [secrets.choice(string.ascii_lowercase) for _ in range(4)]
    )
    rng.shuffle(characters)

    return "".join(characters)


@dataclass(frozen=True)
class PasswordValidation:
    """Outcome of a password policy check."""

    is_valid: bool
    error: str | None = None


def validate_password(password: str) -> PasswordValidation:
    """
    Check password strength.

    Rules are evaluated in order and the first failing rule is reported:
    - At least 8 characters
    - At least one uppercase letter
    - At least one digit
    - At least one non-alphanumeric character
    """
    if len(password) < 8:
        return PasswordValidation(False, "Password must be at least 8 characters long")

    if not any("A" <= char <= "Z" for char in password):
        return PasswordValidation(False, "Password must contain at least one uppercase letter")

    if not any("0" <= char <= "9" for char in password):
        return PasswordValidation(False, "Password must contain at least one digit")

    if all(char.isascii() and char.isalnum() for char in password):
        return PasswordValidation(False, "Password must contain at least one special character")

    return PasswordValidation(True)


def hash_token(token: str) -> str:
    """
    SHA-256 digest of a token.

    Sessions store this digest, never the bearer token itself.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _encode(claims: dict[str, Any], expires_delta: timedelta, secret: str) -> str:
    now = utcnow()
    to_encode = claims.copy()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
    })

    return jwt.encode(to_encode, secret, algorithm=settings.algorithm)


def decode_token(token: str, secret: str | None = None) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            secret or settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError as e:
        logger.debug(f"JWT decode error: {e}")
        raise


def verify_typed_token(
    token: str,
    token_type: str,
    secret: str | None = None,
) -> dict[str, Any] | None:
    """
    Decode a token and check its type discriminator.

    Returns None on any failure (malformed, expired, wrong secret, wrong type).
    """
    try:
        payload = decode_token(token, secret)
    except JWTError:
        return None

    if payload.get("type") != token_type:
        return None

    return payload


def generate_jwt(user_id: str, agency_id: str, role: str) -> str:
    """
    Issue the tenant-plane authentication token.

    Claims: userId, agenceId, role, type="access". Valid for 7 days.
    """
    return _encode(
        {
            "userId": str(user_id),
            "agenceId": str(agency_id),
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
        },
        timedelta(days=settings.auth_token_expire_days),
        settings.secret_key,
    )


def verify_jwt(token: str) -> dict[str, Any] | None:
    """Validate a tenant-plane token. Never raises."""
    payload = verify_typed_token(token, ACCESS_TOKEN_TYPE)

    if payload is None or not payload.get("userId"):
        return None

    return payload


def create_admin_token(admin_id: str, email: str) -> str:
    """Issue an admin-plane token signed with the admin secret."""
    return _encode(
        {"id": str(admin_id), "email": email, "type": ADMIN_TOKEN_TYPE},
        timedelta(days=settings.admin_token_expire_days),
        settings.effective_admin_secret,
    )


def verify_admin_token(token: str) -> dict[str, Any] | None:
    """Validate an admin-plane token. Never raises."""
    return verify_typed_token(
        token,
        ADMIN_TOKEN_TYPE,
        secret=settings.effective_admin_secret,
    )


def create_demo_token(access_id: str, agency_id: str, label: str) -> str:
    """Issue the short-lived token minted from a temporary access grant."""
    return _encode(
        {
            "type": DEMO_TOKEN_TYPE,
            "accesId": str(access_id),
            "agenceId": str(agency_id),
            "nom": label,
        },
        timedelta(hours=settings.demo_token_expire_hours),
        settings.secret_key,
    )


def verify_demo_token(token: str) -> dict[str, Any] | None:
    """Validate a demo token. Never raises."""
    return verify_typed_token(token, DEMO_TOKEN_TYPE)
