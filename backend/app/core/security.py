# app/core/security.py
"""
Security module for authentication.
Handles password hashing, token issuing for the two token kinds (anonymous and admin)
and token decoding with the failure taxonomy from app.core.errors.
"""
import secrets
import datetime as dt
import jwt  # PyJWT
from passlib.context import CryptContext

from app.config import settings
from app.core.errors import ExpiredToken, InvalidToken, WrongTokenType

# Password hashing context (Argon2 only)
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

# Token kinds carried in the "type" claim
TOKEN_ANON = "anon"
TOKEN_ADMIN = "admin"

# Admin roles
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "superAdmin"


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)


def new_token_id() -> str:
    """Opaque anonymous identity: 32 random bytes, hex encoded (256 bits)."""
    return secrets.token_hex(32)


def _default_lifetime(kind: str) -> dt.timedelta:
    if kind == TOKEN_ANON:
        return dt.timedelta(days=settings.anon_token_expire_days)
    return dt.timedelta(hours=settings.admin_token_expire_hours)


def create_access_token(subject: str, kind: str, expires_delta: dt.timedelta | None = None) -> str:
    """
    Create a signed token for an anonymous identity or an admin.

    Args:
        subject: tokenId (anonymous) or admin UUID string (admin)
        kind: TOKEN_ANON or TOKEN_ADMIN
        expires_delta: Override lifetime (defaults: 30 days anon, 24 hours admin)

    Token payload includes:
        - sub: Subject id
        - type: Token kind
        - iat: Issued at timestamp
        - exp: Expiration timestamp
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": subject,
        "type": kind,
        "iat": now,
        "exp": now + (expires_delta if expires_delta is not None else _default_lifetime(kind)),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALG)


def create_anon_token(token_id: str) -> str:
    return create_access_token(token_id, TOKEN_ANON)


def create_admin_token(admin_id: str) -> str:
    return create_access_token(admin_id, TOKEN_ADMIN)


def decode_access_token(token: str, expected_kind: str | None = None) -> dict:
    """
    Decode and validate a token.

    Checks, in order: signature/format, expiry, then kind (when expected_kind is given).

    Returns:
        Decoded payload dictionary

    Raises:
        InvalidToken: malformed token, bad signature or missing subject
        ExpiredToken: token past its exp claim
        WrongTokenType: token kind differs from expected_kind
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALG])
    except jwt.ExpiredSignatureError:
        raise ExpiredToken()
    except jwt.PyJWTError:
        raise InvalidToken()

    if not payload.get("sub"):
        raise InvalidToken()
    if expected_kind is not None and payload.get("type") != expected_kind:
        raise WrongTokenType()
    return payload
