"""Tests for registration, login and sessions."""

import pytest

from finance_tracker.config import get_settings
from finance_tracker.models import AuditEventType, User
from finance_tracker.users import AuthenticationError, NotLoggedInError


class TestUserService:

    @pytest.mark.asyncio
    async def test_register_and_authenticate(self, user_service, store):
        await user_service.register(User(username="sam", password="secret", currency="NPR"))

        session = await user_service.authenticate("sam", "secret")

        assert session.is_logged_in
        assert user_service.current_user(session).currency == "NPR"
        assert len(await store.users.load_users()) == 1

    @pytest.mark.asyncio
    async def test_wrong_password(self, user_service, audit_logger):
        await user_service.register(User(username="sam", password="secret", currency="USD"))

        with pytest.raises(AuthenticationError):
            await user_service.authenticate("sam", "Secret")

        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.LOGIN_FAILED

    @pytest.mark.asyncio
    async def test_unknown_user(self, user_service):
        with pytest.raises(AuthenticationError):
            await user_service.authenticate("nobody", "secret")

    @pytest.mark.asyncio
    async def test_duplicate_username_first_match_wins(self, user_service):
        await user_service.register(User(username="sam", password="one", currency="USD"))
        await user_service.register(User(username="sam", password="two", currency="EUR"))

        first = await user_service.authenticate("sam", "one")
        second = await user_service.authenticate("sam", "two")

        assert first.current_user().currency == "USD"
        assert second.current_user().currency == "EUR"

    @pytest.mark.asyncio
    async def test_sign_out(self, user_service, audit_logger):
        await user_service.register(User(username="sam", password="secret", currency="USD"))
        session = await user_service.authenticate("sam", "secret")

        await user_service.sign_out(session)

        with pytest.raises(NotLoggedInError):
            user_service.current_user(session)
        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.SIGNED_OUT

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, user_service):
        await user_service.register(User(username="sam", password="secret", currency="USD"))
        await user_service.register(User(username="alex", password="hunter2", currency="GBP"))

        sam = await user_service.authenticate("sam", "secret")
        alex = await user_service.authenticate("alex", "hunter2")
        await user_service.sign_out(sam)

        assert alex.current_user().username == "alex"
        assert sam.session_id != alex.session_id

    @pytest.mark.asyncio
    async def test_create_user_uses_default_currency(self, user_service, monkeypatch):
        monkeypatch.setenv("DEFAULT_CURRENCY", "npr")
        get_settings.cache_clear()
        try:
            user = await user_service.create_user("sam", "secret")
        finally:
            get_settings.cache_clear()

        assert user.currency == "NPR"

    @pytest.mark.asyncio
    async def test_create_user_with_currency(self, user_service):
        user = await user_service.create_user("sam", "secret", currency="eur")
        assert user.currency == "EUR"
