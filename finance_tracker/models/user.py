"""
User and Session Models

Passwords are stored and compared as plain text; the user file is
a local, single-user store.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_tracker.models.common import check_flat_text
from finance_tracker.models.debt import Debt
from finance_tracker.models.transaction import Transaction


class NotLoggedInError(Exception):
    """No user is logged in on this session."""
    pass


class User(BaseModel):
    """
    An application user.

    Only username, password and currency are persisted in the user file;
    the owned transaction and debt lists are filled from the ledgers.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=200)
    currency: str = Field(..., min_length=1, max_length=10)
    transactions: list[Transaction] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)

    @field_validator("username", "password", "currency")
    @classmethod
    def validate_flat_text(cls, v: str) -> str:
        return check_flat_text(v)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


class Session(BaseModel):
    """
    Login context handed to callers after authentication.

    Created by a successful login, ended by sign-out. An ended session
    no longer carries a user.
    """

    session_id: UUID = Field(default_factory=uuid4)
    user: Optional[User] = None
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: Optional[datetime] = None

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None and self.ended_at is None

    def current_user(self) -> User:
        if not self.is_logged_in:
            raise NotLoggedInError("No user is currently logged in.")
        return self.user

    def end(self) -> None:
        self.user = None
        self.ended_at = datetime.now()
