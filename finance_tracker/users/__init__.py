"""Users and sessions package."""

from finance_tracker.models.user import NotLoggedInError, Session
from finance_tracker.users.service import AuthenticationError, UserService

__all__ = [
    "AuthenticationError",
    "NotLoggedInError",
    "Session",
    "UserService",
]
