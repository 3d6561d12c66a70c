"""OAuth redirect login and session persistence.

Flow
~~~~
1. :meth:`AuthManager.begin_login` asks the auth service for an authorization
   URL (``GET /auth/authorize?platform=mobile&provider=google``) and opens it in
   an external browser.
2. The provider redirects back to ``emotionwellbeing://auth-success?token=...``;
   the deep-link handler passes that URI to :meth:`AuthManager.complete_login`.
3. The token is stored as ``"Bearer <token>"`` under ``jwt_token`` in the
   application's preference store and read back on every launch.

Sessions are never expired or refreshed; :meth:`AuthManager.clear_session` is
the only way out.
"""

from __future__ import annotations

import sys
import webbrowser
from typing import Callable
from urllib.parse import parse_qs, urlsplit

import httpx
import structlog

from emotion_wellbeing.config import Settings, get_settings
from emotion_wellbeing.exceptions import AuthError
from emotion_wellbeing.models import LoginOutcome, Session
from emotion_wellbeing.storage.repository import PreferenceStore

logger = structlog.get_logger(__name__)

SESSION_KEY = "jwt_token"
TOKEN_MISSING = "token missing"

Notifier = Callable[[str], None]
UrlOpener = Callable[[str], object]


def _print_notice(message: str) -> None:
    print(message, file=sys.stderr)


class AuthManager:
    """Starts the OAuth flow, captures the redirect token, and owns the session.

    Usage::

        auth = AuthManager(PreferenceRepository())
        await auth.begin_login()
        outcome = await auth.complete_login("emotionwellbeing://auth-success?token=abc")
        session = await auth.get_session()
    """

    def __init__(
        self,
        store: PreferenceStore,
        *,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        opener: UrlOpener = webbrowser.open,
        notifier: Notifier = _print_notice,
    ) -> None:
        self._store = store
        self._settings = settings or get_settings()
        self._transport = transport
        self._opener = opener
        self._notify = notifier

    # ── Authorization request ─────────────────────────────────

    async def authorization_url(self) -> str:
        """Fetch the provider consent URL from the auth service.

        Raises :class:`AuthError` on a non-200 answer, a transport failure, or
        a body without ``auth_url``.
        """
        params = {
            "platform": self._settings.auth_platform,
            "provider": self._settings.auth_provider,
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.auth_base_url,
                timeout=self._settings.request_timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get("/auth/authorize", params=params)
        except httpx.HTTPError as exc:
            logger.error("auth.authorize_transport_error", error=str(exc))
            raise AuthError(str(exc)) from exc

        if resp.status_code != 200:
            logger.error("auth.authorize_failed", status=resp.status_code, body=resp.text)
            raise AuthError(f"Server error: {resp.status_code}", status_code=resp.status_code)

        try:
            return str(resp.json()["auth_url"])
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("auth.authorize_bad_payload", error=str(exc))
            raise AuthError(f"Malformed authorization response: {exc}") from exc

    async def begin_login(self) -> None:
        """Open the consent page; failures only produce a user-visible notice."""
        try:
            url = await self.authorization_url()
        except AuthError as exc:
            if exc.status_code is not None:
                self._notify(f"Server error: {exc.status_code}")
            else:
                self._notify(f"Connection failed: {exc}")
            return

        logger.info("auth.redirect", provider=self._settings.auth_provider)
        self._opener(url)

    # ── Redirect callback ─────────────────────────────────────

    def _is_callback(self, redirect_uri: str) -> bool:
        parts = urlsplit(redirect_uri)
        return (
            parts.scheme == self._settings.callback_scheme.lower()
            and (parts.hostname or "") == self._settings.callback_host.lower()
        )

    async def complete_login(self, redirect_uri: str) -> LoginOutcome:
        """Persist the token carried by a deep-link redirect.

        Only URIs addressed to the configured callback scheme/host with a
        non-empty ``token`` query parameter succeed; anything else leaves the
        store untouched.
        """
        if not self._is_callback(redirect_uri):
            logger.warning("auth.unexpected_redirect")
            return LoginOutcome(success=False, reason=TOKEN_MISSING)

        token = parse_qs(urlsplit(redirect_uri).query).get("token", [""])[0]
        if not token:
            logger.warning("auth.token_missing")
            return LoginOutcome(success=False, reason=TOKEN_MISSING)

        await self._store.put_string(SESSION_KEY, f"Bearer {token}")
        logger.info("auth.token_saved")
        return LoginOutcome(success=True)

    # ── Session ───────────────────────────────────────────────

    async def get_session(self) -> Session | None:
        value = await self._store.get_string(SESSION_KEY)
        if not value:
            return None
        return Session(token=value)

    async def clear_session(self) -> bool:
        removed = await self._store.remove(SESSION_KEY)
        logger.info("auth.session_cleared", removed=removed)
        return removed
