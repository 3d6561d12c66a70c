"""Fitness API collector — step/heart-rate/calorie series and sleep sessions.

Both reads are authenticated with the stored bearer session::

    GET {fitness_base}/api/fitness/data    → FitnessDataset
    GET {fitness_base}/api/fitness/sleep   → SleepDataset
"""

from __future__ import annotations

import asyncio

import httpx
import structlog

from emotion_wellbeing.collectors.base import BaseApiClient
from emotion_wellbeing.config import Settings, get_settings
from emotion_wellbeing.exceptions import MetricsFetchError
from emotion_wellbeing.models import FitnessDataset, Session, SleepDataset

logger = structlog.get_logger(__name__)

FITNESS_PATH = "/api/fitness/data"
SLEEP_PATH = "/api/fitness/sleep"


class MetricsFetcher(BaseApiClient):
    """Reads the fitness and sleep datasets for the signed-in user.

    Usage::

        async with MetricsFetcher() as fetcher:
            fitness, sleep = await fetcher.fetch_all(session)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        super().__init__(
            self._settings.fitness_base_url,
            timeout=self._settings.request_timeout,
            transport=transport,
        )

    @staticmethod
    def _auth(session: Session) -> dict[str, str]:
        return {"Authorization": session.authorization}

    # ── Single reads ──────────────────────────────────────────

    async def fetch_fitness(self, session: Session) -> FitnessDataset:
        resp = await self._get(FITNESS_PATH, headers=self._auth(session))
        return self._parse(resp, FitnessDataset, FITNESS_PATH)

    async def fetch_sleep(self, session: Session) -> SleepDataset:
        resp = await self._get(SLEEP_PATH, headers=self._auth(session))
        return self._parse(resp, SleepDataset, SLEEP_PATH)

    # ── Combined read ─────────────────────────────────────────

    async def fetch_all(self, session: Session) -> tuple[FitnessDataset, SleepDataset]:
        """Issue both reads and succeed only if both do.

        The reads run one after the other unless ``parallel_fetch`` is set.
        On failure the raised :class:`MetricsFetchError` carries both status
        codes, including the one from the request that succeeded.
        """
        headers = self._auth(session)
        if self._settings.parallel_fetch:
            fitness_resp, sleep_resp = await asyncio.gather(
                self._get(FITNESS_PATH, headers=headers),
                self._get(SLEEP_PATH, headers=headers),
            )
        else:
            fitness_resp = await self._get(FITNESS_PATH, headers=headers)
            sleep_resp = await self._get(SLEEP_PATH, headers=headers)

        if not (fitness_resp.is_success and sleep_resp.is_success):
            logger.warning(
                "metrics.fetch_failed",
                fitness_status=fitness_resp.status_code,
                sleep_status=sleep_resp.status_code,
            )
            raise MetricsFetchError(fitness_resp.status_code, sleep_resp.status_code)

        fitness = self._parse(fitness_resp, FitnessDataset, FITNESS_PATH)
        sleep = self._parse(sleep_resp, SleepDataset, SLEEP_PATH)
        logger.info(
            "metrics.fetched",
            steps_points=len(fitness.steps_data.point),
            sleep_sessions=len(sleep.sleep_sessions.session),
        )
        return fitness, sleep
