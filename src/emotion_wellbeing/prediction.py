"""Client for the remote wellbeing scoring service."""

from __future__ import annotations

import httpx
import structlog

from emotion_wellbeing.collectors.base import BaseApiClient
from emotion_wellbeing.config import Settings, get_settings
from emotion_wellbeing.models import PredictionRequest, PredictionResult

logger = structlog.get_logger(__name__)

PREDICT_PATH = "/predict_test"


class PredictionClient(BaseApiClient):
    """Submits the three derived scalars and returns the wellbeing report."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        super().__init__(
            settings.predict_base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def predict(self, request: PredictionRequest) -> PredictionResult:
        """``GET /predict_test``; raises :class:`HttpError` outside 2xx."""
        resp = await self._get(PREDICT_PATH, params=request.to_query())
        result = self._parse(resp, PredictionResult, PREDICT_PATH)
        logger.info(
            "prediction.received",
            emotion=result.predicted_emotion,
            wellbeing_score=result.wellbeing_score,
        )
        return result
