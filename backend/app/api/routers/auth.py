# app/api/routers/auth.py
from fastapi import APIRouter, status

from app.core.security import create_anon_token, new_token_id
from app.models.anon_user import AnonUser

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/anonymous", status_code=status.HTTP_201_CREATED)
async def create_anonymous_token():
    """
    Issue a new anonymous identity and its token.

    The identity has no credentials: whoever holds the token acts as it.
    The server-side record never expires; the token does (30 days by default).

    Returns:
        dict: Response containing:
            - success: bool (always True)
            - message: str
            - data: dict with token, tokenId, createdAt
    """
    anon = await AnonUser.create(token_id=new_token_id())
    return {
        "success": True,
        "message": "Anonymous token created",
        "data": {
            "token": create_anon_token(anon.token_id),
            "tokenId": anon.token_id,
            "createdAt": anon.created_at.isoformat() if anon.created_at else None,
        },
    }
