"""
User Service

Registration and login against the user credentials file.
Login produces a Session; there is no process-wide "current user".
"""

from typing import Optional

from finance_tracker.audit import AuditLogger
from finance_tracker.config import get_settings
from finance_tracker.models.user import Session, User
from finance_tracker.services.storage import UserStorageInterface


class AuthenticationError(Exception):
    """Username and password do not match any registered user."""
    pass


class UserService:
    """Registers users and opens/closes sessions."""

    def __init__(
        self,
        storage: UserStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger

    async def register(self, user: User) -> User:
        """
        Persist a new user record.

        Registration always succeeds; a repeated username is stored
        again and the first matching record wins at login.
        """
        await self._storage.append_user(user)
        if self._audit_logger:
            await self._audit_logger.log_user_registered(user.username)
        return user

    async def create_user(
        self,
        username: str,
        password: str,
        currency: Optional[str] = None,
    ) -> User:
        """Register a user, falling back to the configured default currency."""
        user = User(
            username=username,
            password=password,
            currency=currency or get_settings().app.default_currency,
        )
        return await self.register(user)

    async def authenticate(self, username: str, password: str) -> Session:
        """
        Log in with an exact username and password match.

        Raises:
            AuthenticationError: No registered user matches
        """
        users = await self._storage.load_users()
        user = next(
            (u for u in users if u.username == username and u.password == password),
            None,
        )

        if user is None:
            if self._audit_logger:
                await self._audit_logger.log_login(username, None)
            raise AuthenticationError(f"Invalid username or password for {username!r}")

        session = Session(user=user)
        if self._audit_logger:
            await self._audit_logger.log_login(username, session.session_id)
        return session

    def current_user(self, session: Session) -> User:
        """
        The user logged in on ``session``.

        Raises:
            NotLoggedInError: The session has been signed out
        """
        return session.current_user()

    async def sign_out(self, session: Session) -> None:
        username = session.user.username if session.user else None
        session.end()
        if self._audit_logger:
            await self._audit_logger.log_signed_out(username, session.session_id)
