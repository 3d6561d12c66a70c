"""Tests for the OAuth redirect login and session handling."""

from __future__ import annotations

from urllib.parse import urlencode

import httpx
import pytest

from conftest import FakeApi
from emotion_wellbeing.auth import SESSION_KEY, AuthManager
from emotion_wellbeing.exceptions import AuthError


def _manager(settings, store, api: FakeApi | None = None, opened=None, notices=None):
    return AuthManager(
        store,
        settings=settings,
        transport=api.transport if api else None,
        opener=(opened.append if opened is not None else (lambda url: None)),
        notifier=(notices.append if notices is not None else (lambda msg: None)),
    )


class TestCompleteLogin:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["abc", "eyJhbGciOiJIUzI1NiJ9.payload.sig", "a b+c"])
    async def test_persists_bearer_prefixed_token(self, settings, store, token):
        auth = _manager(settings, store)
        uri = f"emotionwellbeing://auth-success?{urlencode({'token': token})}"

        outcome = await auth.complete_login(uri)

        assert outcome.success is True
        assert await store.get_string(SESSION_KEY) == f"Bearer {token}"
        session = await auth.get_session()
        assert session is not None
        assert session.authorization == f"Bearer {token}"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "uri",
        [
            "emotionwellbeing://auth-success",
            "emotionwellbeing://auth-success?token=",
            "emotionwellbeing://auth-success?other=1",
        ],
    )
    async def test_missing_token_fails_and_persists_nothing(self, settings, store, uri):
        auth = _manager(settings, store)

        outcome = await auth.complete_login(uri)

        assert outcome.success is False
        assert outcome.reason == "token missing"
        assert await store.get_string(SESSION_KEY) is None
        assert await auth.get_session() is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "uri",
        [
            "https://auth-success?token=abc",
            "emotionwellbeing://elsewhere?token=abc",
        ],
    )
    async def test_foreign_redirect_is_ignored(self, settings, store, uri):
        auth = _manager(settings, store)

        outcome = await auth.complete_login(uri)

        assert outcome.success is False
        assert await store.get_string(SESSION_KEY) is None


class TestSession:
    @pytest.mark.asyncio
    async def test_no_session_by_default(self, settings, store):
        assert await _manager(settings, store).get_session() is None

    @pytest.mark.asyncio
    async def test_clear_session(self, settings, store):
        auth = _manager(settings, store)
        await auth.complete_login("emotionwellbeing://auth-success?token=xyz")

        assert await auth.clear_session() is True
        assert await auth.get_session() is None
        assert await auth.clear_session() is False


class TestBeginLogin:
    @pytest.mark.asyncio
    async def test_opens_authorization_url(self, settings, store):
        api = FakeApi({"/auth/authorize": (200, {"auth_url": "https://accounts.example/o/auth"})})
        opened: list[str] = []
        notices: list[str] = []

        await _manager(settings, store, api, opened, notices).begin_login()

        assert opened == ["https://accounts.example/o/auth"]
        assert notices == []
        request = api.requests[0]
        assert request.url.params["platform"] == "mobile"
        assert request.url.params["provider"] == "google"

    @pytest.mark.asyncio
    async def test_server_error_notifies_once(self, settings, store):
        api = FakeApi({"/auth/authorize": (503, {"detail": "down"})})
        opened: list[str] = []
        notices: list[str] = []

        await _manager(settings, store, api, opened, notices).begin_login()

        assert opened == []
        assert notices == ["Server error: 503"]
        assert len(api.requests) == 1

    @pytest.mark.asyncio
    async def test_connection_failure_notifies(self, settings, store):
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        api = FakeApi({"/auth/authorize": boom})
        notices: list[str] = []

        await _manager(settings, store, api, [], notices).begin_login()

        assert len(notices) == 1
        assert notices[0].startswith("Connection failed:")

    @pytest.mark.asyncio
    async def test_missing_auth_url_raises(self, settings, store):
        api = FakeApi({"/auth/authorize": (200, {"unexpected": True})})

        with pytest.raises(AuthError):
            await _manager(settings, store, api).authorization_url()
