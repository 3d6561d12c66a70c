"""Shared HTTP plumbing for the remote API clients."""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel

from emotion_wellbeing.exceptions import HttpError, NetworkError, PayloadError

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseApiClient:
    """Owns one :class:`httpx.AsyncClient` bound to a service base URL.

    Subclasses issue requests through :meth:`_get` and turn responses into
    models with :meth:`_parse`, which maps every failure onto the package's
    error taxonomy.  No retries are attempted.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the underlying connection pool."""
        await self._client.aclose()

    # ── Internal request wrapper ──────────────────────────────

    async def _get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """GET ``path``; transport failures become :class:`NetworkError`."""
        try:
            resp = await self._client.get(path, headers=headers, params=params)
        except httpx.HTTPError as exc:
            logger.error("http.transport_error", path=path, error=str(exc))
            raise NetworkError(f"{path}: {exc}") from exc
        logger.debug("http.response", path=path, status=resp.status_code)
        return resp

    @staticmethod
    def _parse(resp: httpx.Response, model: type[ModelT], endpoint: str) -> ModelT:
        """Validate a success response into ``model``.

        Raises :class:`HttpError` outside the 2xx range and
        :class:`PayloadError` when the body is not the expected JSON shape.
        """
        if not resp.is_success:
            raise HttpError(resp.status_code, endpoint)
        try:
            return model.model_validate(resp.json())
        except ValueError as exc:
            logger.error("http.bad_payload", endpoint=endpoint, error=str(exc))
            raise PayloadError(f"{endpoint}: {exc}") from exc
