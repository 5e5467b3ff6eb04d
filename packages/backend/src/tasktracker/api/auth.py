"""Auth API — registration, login, current user.

Learn: Routes for the account lifecycle:
- POST /register → create a new user account
- POST /login → username/password → signed access token (JWT)
- GET /me → the authenticated principal

/register and /login are open. /me runs the authenticate dependency
itself, since the rest of this router must stay reachable without a token.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.auth.dependencies import (
    Principal,
    authenticate,
    current_principal,
    get_token_codec,
)
from tasktracker.auth.issuer import CredentialIssuer
from tasktracker.auth.jwt import TokenCodec
from tasktracker.auth.store import CredentialStore
from tasktracker.db.engine import get_db
from tasktracker.schemas.auth import LoginRequest, RegisterRequest, UserRead

router = APIRouter()


def _issuer(
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
) -> CredentialIssuer:
    return CredentialIssuer(CredentialStore(db), codec)


@router.post("/register")
async def register(body: RegisterRequest, issuer: CredentialIssuer = Depends(_issuer)):
    """Create a new user account."""
    user = await issuer.register(body.username, body.password)
    return {"status": "success", "data": {"user": UserRead.model_validate(user)}}


@router.post("/login")
async def login(body: LoginRequest, issuer: CredentialIssuer = Depends(_issuer)):
    """Login with username and password → access token."""
    token = await issuer.login(body.username, body.password)
    return {"status": "success", "data": {"token": token}}


@router.get("/me", dependencies=[Depends(authenticate)])
async def get_me(principal: Principal = Depends(current_principal)):
    """Get the current authenticated user's info."""
    return {
        "status": "success",
        "data": {"user": {"id": principal.user_id, "username": principal.username}},
    }
