# app/api/deps.py
"""
FastAPI dependencies: application context and the three authorization tiers.

Resolution of a bearer token, in order:
  1. signature / format   -> InvalidToken
  2. expiry               -> ExpiredToken
  3. token kind           -> WrongTokenType
  4. subject exists       -> UnknownSubject
The super-admin tier additionally requires role "superAdmin" (InsufficientPrivilege, 403).
Nothing here writes: tokens are never refreshed or rotated.
"""
from fastapi import Depends, Header, Request

from app.core.context import AppContext
from app.core.errors import InsufficientPrivilege, MissingToken, UnknownSubject
from app.core.security import ROLE_SUPER_ADMIN, TOKEN_ADMIN, TOKEN_ANON, decode_access_token
from app.models.admin import Admin
from app.models.anon_user import AnonUser


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise MissingToken()
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise MissingToken()
    return token


async def resolve_anon(token: str) -> AnonUser:
    payload = decode_access_token(token, expected_kind=TOKEN_ANON)
    user = await AnonUser.get_or_none(token_id=payload["sub"])
    if not user:
        raise UnknownSubject()
    return user


async def resolve_admin(token: str) -> Admin:
    payload = decode_access_token(token, expected_kind=TOKEN_ADMIN)
    admin = await Admin.get_or_none(id=payload["sub"])
    if not admin:
        raise UnknownSubject()
    return admin


async def require_anon(authorization: str | None = Header(default=None)) -> AnonUser:
    """
    Anonymous tier: the caller holds a valid anonymous token.

    Usage:
        @router.get("/favorites")
        async def favorites(user: AnonUser = Depends(require_anon)): ...
    """
    return await resolve_anon(bearer_token(authorization))


async def require_admin(authorization: str | None = Header(default=None)) -> Admin:
    """Admin tier: any admin role."""
    return await resolve_admin(bearer_token(authorization))


async def require_super_admin(current: Admin = Depends(require_admin)) -> Admin:
    """
    Super-admin tier. Authentication failures surface as 401 (from require_admin);
    an authenticated admin without the role gets 403.
    """
    if current.role != ROLE_SUPER_ADMIN:
        raise InsufficientPrivilege()
    return current
