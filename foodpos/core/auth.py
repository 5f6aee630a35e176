"""
core/auth.py – AuthService class.
Responsibility: password hashing, login, bearer-token lookup and revocation.

Tokens are opaque random strings; only their sha256 digest is stored, with an
absolute expiry and a revocation flag.
"""
import asyncio
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from sqlalchemy import select

from ..db.models import SessionToken, User
from ..db.session import db_session
from ..models import LoginData, UserOut
from .errors import AuthError, InvalidInputError

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """Login / token validation on top of the users + session_tokens tables."""

    def __init__(self, database_url: str, token_ttl_hours: int = 24, bcrypt_rounds: int = 12) -> None:
        self._url = database_url
        self._ttl = timedelta(hours=token_ttl_hours)
        self._rounds = bcrypt_rounds

    # ── Public ─────────────────────────────────────────────────────────────────

    async def login(self, username: str, password: str) -> LoginData:
        return await asyncio.get_event_loop().run_in_executor(None, self._do_login, username, password)

    async def authenticate(self, token: str) -> UserOut:
        """Resolve a bearer token to its user. Raises AuthError."""
        return await asyncio.get_event_loop().run_in_executor(None, self._do_authenticate, token)

    async def logout(self, token: str) -> None:
        await asyncio.get_event_loop().run_in_executor(None, self._do_logout, token)

    def create_user(self, username: str, password: str, full_name: str, role: str = "cashier") -> Optional[UserOut]:
        """Create a user unless the username is taken. Used by the seed command."""
        with db_session(self._url) as session:
            if session.scalar(select(User).where(User.username == username)):
                return None
            user = User(
                username=username,
                password_hash=hash_password(password, self._rounds),
                full_name=full_name,
                role=role,
            )
            session.add(user)
            session.flush()
            return UserOut.model_validate(user)

    # ── Private ────────────────────────────────────────────────────────────────

    def _do_login(self, username: str, password: str) -> LoginData:
        if not username or not password:
            raise InvalidInputError("Username and password are required")
        with db_session(self._url) as session:
            user = session.scalar(select(User).where(User.username == username))
            if user is None or not check_password(password, user.password_hash):
                raise AuthError("Invalid username or password")

            token = secrets.token_urlsafe(32)
            expires_at = datetime.now() + self._ttl
            session.add(SessionToken(user_id=user.id, token_hash=_digest(token), expires_at=expires_at))
            logger.info("User %s logged in", user.username)
            return LoginData(user=UserOut.model_validate(user), token=token, expires_at=expires_at)

    def _do_authenticate(self, token: str) -> UserOut:
        with db_session(self._url) as session:
            row = session.scalar(select(SessionToken).where(SessionToken.token_hash == _digest(token)))
            if row is None or row.is_revoked:
                raise AuthError("Invalid token")
            if row.expires_at <= datetime.now():
                raise AuthError("Token expired")
            return UserOut.model_validate(row.user)

    def _do_logout(self, token: str) -> None:
        with db_session(self._url) as session:
            row = session.scalar(select(SessionToken).where(SessionToken.token_hash == _digest(token)))
            if row is not None:
                row.is_revoked = True
