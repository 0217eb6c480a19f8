import httpx
import pytest

from arena.core.exceptions import AuthenticationError, NotFoundError, RemoteServiceError
from arena.services import auth_service, user_service
from tests.factories import make_token


class TestSignInAndUp:

    @pytest.mark.asyncio
    async def test_sign_in(self, fake_db, player):
        result = await auth_service.sign_in(fake_db, player.email, player.password)

        assert result.error is None
        assert result.data.user.id == player.id
        assert result.data.refreshed is False
        assert result.data.access_token in fake_db.auth.access_tokens

    @pytest.mark.asyncio
    async def test_wrong_password(self, fake_db, player):
        result = await auth_service.sign_in(fake_db, player.email, "nope")

        assert isinstance(result.error, AuthenticationError)
        assert result.error.message == "Invalid login credentials"

    @pytest.mark.asyncio
    async def test_unverified_account_message_is_verbatim_and_not_retried(self, fake_db):
        signed_up = await auth_service.sign_up(
            fake_db, "new@example.com", "secret123", "newbie", redirect_to="http://localhost:8000/auth/callback"
        )
        assert signed_up.error is None
        fake_db.auth.calls.clear()

        result = await auth_service.sign_in(fake_db, "new@example.com", "secret123")

        assert result.error.message == "Email not confirmed"
        assert fake_db.auth.calls == ["sign_in_with_password"]

    @pytest.mark.asyncio
    async def test_sign_up_sends_username_and_redirect(self, fake_db):
        result = await auth_service.sign_up(
            fake_db, "new@example.com", "secret123", "newbie", redirect_to="http://localhost:8000/auth/callback"
        )

        options = fake_db.auth.last_sign_up["options"]
        assert options["data"] == {"username": "newbie"}
        assert options["email_redirect_to"] == "http://localhost:8000/auth/callback"
        assert fake_db.tables["users"][result.data.id]["username"] == "newbie"

    @pytest.mark.asyncio
    async def test_sign_in_retries_transport_errors(self, fake_db, player):
        fake_db.auth.failures = [httpx.ConnectError("refused")]

        result = await auth_service.sign_in(fake_db, player.email, player.password)

        assert result.error is None
        assert fake_db.auth.calls == ["sign_in_with_password", "sign_in_with_password"]


class TestSessions:

    @pytest.mark.asyncio
    async def test_valid_session(self, fake_db, player):
        session = fake_db.auth.issue_session(player.id)

        result = await auth_service.get_session(fake_db, session.access_token, session.refresh_token)

        assert result.error is None
        assert result.data.user.id == player.id
        assert result.data.access_token == session.access_token
        assert result.data.refreshed is False

    @pytest.mark.asyncio
    async def test_expired_session_is_refreshed(self, fake_db, player):
        session = fake_db.auth.issue_session(player.id)
        expired = make_token(player.id, expires_in=-60)

        result = await auth_service.get_session(fake_db, expired, session.refresh_token)

        assert result.error is None
        assert result.data.refreshed is True
        assert result.data.access_token != expired
        assert fake_db.auth.calls == ["refresh_session"]

    @pytest.mark.asyncio
    async def test_expired_session_without_refresh_token(self, fake_db, player):
        result = await auth_service.get_session(fake_db, make_token(player.id, expires_in=-60))

        assert isinstance(result.error, AuthenticationError)
        assert fake_db.auth.calls == []

    @pytest.mark.asyncio
    async def test_revoked_session(self, fake_db, player):
        result = await auth_service.get_session(fake_db, make_token(player.id))

        assert isinstance(result.error, AuthenticationError)

    @pytest.mark.asyncio
    async def test_outage_is_not_an_authentication_error(self, fake_db, player):
        session = fake_db.auth.issue_session(player.id)
        fake_db.auth.failures = [httpx.ConnectError("refused")] * 3

        result = await auth_service.get_session(fake_db, session.access_token, session.refresh_token)

        assert isinstance(result.error, RemoteServiceError)

    @pytest.mark.asyncio
    async def test_sign_out_revokes_token(self, fake_db, player):
        session = fake_db.auth.issue_session(player.id)

        result = await auth_service.sign_out(fake_db, session.access_token, session.refresh_token)

        assert result.ok
        assert session.access_token not in fake_db.auth.access_tokens
        assert fake_db.auth.calls == ["set_session", "sign_out"]

    @pytest.mark.asyncio
    async def test_exchange_code(self, fake_db, player):
        code = fake_db.auth.issue_code(player.id)

        result = await auth_service.exchange_code_for_session(fake_db, code)
        reused = await auth_service.exchange_code_for_session(fake_db, code)

        assert result.data.user.id == player.id
        assert isinstance(reused.error, AuthenticationError)


class TestUserService:

    @pytest.mark.asyncio
    async def test_get_user_profile(self, fake_db, player):
        result = await user_service.get_user(fake_db, player.id)

        assert result.data.username == "player_one"
        assert result.data.wallet_balance == 25.5

    @pytest.mark.asyncio
    async def test_get_missing_user(self, fake_db):
        result = await user_service.get_user(fake_db, "missing")

        assert isinstance(result.error, NotFoundError)

    @pytest.mark.asyncio
    async def test_email_registered(self, fake_db, player):
        taken = await user_service.email_registered(fake_db, player.email)
        free = await user_service.email_registered(fake_db, "free@example.com")

        assert taken.data is True
        assert free.data is False
