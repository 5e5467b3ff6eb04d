"""Credential issuer — account registration and login.

Learn: login() answers "unknown user" and "wrong password" with the same
LoginFail error, so the response never tells a caller which usernames
exist. The unknown-user branch still runs a password verification
against a dummy hash so both branches cost about the same time.
"""

import structlog
from sqlalchemy.exc import IntegrityError

from tasktracker.auth.jwt import TokenCodec, TokenError
from tasktracker.auth.password import (
    PasswordHashingError,
    hash_password,
    needs_upgrade,
    verify_password,
)
from tasktracker.auth.store import CredentialStore
from tasktracker.db.models import User
from tasktracker.errors import AuthFail, Conflict, Internal, LoginFail

logger = structlog.get_logger()

_dummy_hash = None


def _timing_dummy_hash() -> str:
    """A real Argon2id hash with current parameters, built on first use."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("timing-equalizer")
    return _dummy_hash


class CredentialIssuer:
    """Registers users and exchanges username/password for access tokens."""

    def __init__(self, store: CredentialStore, codec: TokenCodec):
        self.store = store
        self.codec = codec

    async def register(self, username: str, password: str) -> User:
        """Create a new account. Raises Conflict if the username is taken."""
        if await self.store.get_by_username(username):
            raise Conflict("Username already registered")

        try:
            password_hash = hash_password(password)
        except PasswordHashingError as e:
            raise Internal() from e

        try:
            user = await self.store.insert(username, password_hash)
            await self.store.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name.
            await self.store.db.rollback()
            raise Conflict("Username already registered")

        logger.info("auth.registered", user_id=user.id)
        return user

    async def login(self, username: str, password: str) -> str:
        """Verify credentials and mint an access token."""
        user = await self.store.get_by_username(username)
        if user is None:
            verify_password(password, _timing_dummy_hash())
            logger.info("auth.login_failed", reason="unknown_user")
            raise LoginFail()

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", reason="bad_password", user_id=user.id)
            raise LoginFail()

        if needs_upgrade(user.password_hash):
            try:
                user.password_hash = hash_password(password)
                await self.store.db.commit()
                logger.info("auth.password_hash_upgraded", user_id=user.id)
            except PasswordHashingError:
                # The old hash still works; retry on the next login.
                logger.warning("auth.password_hash_upgrade_failed", user_id=user.id)

        try:
            token = self.codec.create_access_token(user.id)
        except TokenError as e:
            logger.error("auth.token_signing_failed", user_id=user.id, error=str(e))
            raise AuthFail() from e

        logger.info("auth.login", user_id=user.id)
        return token
