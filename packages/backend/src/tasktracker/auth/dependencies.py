"""FastAPI auth dependencies.

Learn: Two dependencies split the work:

1. authenticate — the context middleware. Attached to every protected
   router via include_router(dependencies=...), so it runs before any
   handler. It validates the bearer token, reloads the user from the
   database (one lookup per request, no caching, so a deleted account
   loses access immediately) and attaches a Principal to request.state.
   Any failure raises AuthFail before the handler runs.

2. current_principal — the extractor. Handlers declare
   `principal: Principal = Depends(current_principal)` and get the value
   authenticate attached. If nothing is attached (a route mounted without
   authenticate) it raises AuthFail rather than letting the call through.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.auth.jwt import TokenCodec, TokenError
from tasktracker.auth.store import CredentialStore
from tasktracker.db.engine import get_db
from tasktracker.errors import AuthFail

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Principal:
    """The authenticated user for one request. Never persisted."""

    user_id: int
    username: str


def get_token_codec(request: Request) -> TokenCodec:
    """The app's token codec, built once at startup."""
    return request.app.state.token_codec


def bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an Authorization header value."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthFail()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthFail()
    return token


async def authenticate(
    request: Request,
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Validate the bearer token and attach the Principal to the request."""
    try:
        token = bearer_token(authorization)
    except AuthFail:
        logger.info("auth.rejected", reason="missing_or_malformed_header")
        raise

    try:
        claims = codec.verify_token(token)
    except TokenError as e:
        logger.info("auth.rejected", reason=str(e))
        raise AuthFail() from e

    user = await CredentialStore(db).get_by_id(claims.subject)
    if user is None:
        logger.info("auth.rejected", reason="unknown_subject", user_id=claims.subject)
        raise AuthFail()

    principal = Principal(user_id=user.id, username=user.username)
    request.state.principal = principal
    structlog.contextvars.bind_contextvars(user_id=principal.user_id)
    return principal


def current_principal(request: Request) -> Principal:
    """Return the Principal attached by authenticate, or fail closed."""
    principal = getattr(request.state, "principal", None)
    if not isinstance(principal, Principal):
        logger.warning("auth.principal_missing", path=request.url.path)
        raise AuthFail()
    return principal
