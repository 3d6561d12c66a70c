"""Refresh-cycle orchestrator — session → metrics → usage → prediction.

One :meth:`WellbeingPipeline.run` call is one refresh cycle.  It walks

    IDLE → AUTHENTICATING → FETCHING_METRICS → AGGREGATING → PREDICTING → READY

and ends in ``READY`` or in the absorbing ``FAILED`` state, whose reason is the
single message shown instead of the results.  No step is retried and no
exception escapes :meth:`run`; a new cycle always restarts at ``IDLE``.
"""

from __future__ import annotations

import asyncio

import structlog

from emotion_wellbeing.auth import AuthManager
from emotion_wellbeing.collectors.fitness import MetricsFetcher
from emotion_wellbeing.config import Settings, get_settings
from emotion_wellbeing.exceptions import HttpError, MetricsFetchError
from emotion_wellbeing.metrics import derive_prediction_request
from emotion_wellbeing.models import PipelineResult, PipelineState, Session
from emotion_wellbeing.prediction import PredictionClient
from emotion_wellbeing.storage.repository import PreferenceRepository, PreferenceStore
from emotion_wellbeing.usage import JsonFileUsageStatsProvider, UsageAggregator, UsageStatsProvider

logger = structlog.get_logger(__name__)


class WellbeingPipeline:
    """Drives one refresh cycle and hands its result to the presentation layer.

    Parameters
    ----------
    auth : AuthManager
        Session lookup and redirect-token capture.
    fetcher : MetricsFetcher
        Fitness and sleep reads.
    usage : UsageAggregator
        Top-N foreground usage over the trailing window.
    predictor : PredictionClient
        Remote wellbeing scoring.
    window_hours : int
        Usage measurement window (default 24).
    """

    def __init__(
        self,
        auth: AuthManager,
        fetcher: MetricsFetcher,
        usage: UsageAggregator,
        predictor: PredictionClient,
        *,
        window_hours: int = 24,
    ) -> None:
        self._auth = auth
        self._fetcher = fetcher
        self._usage = usage
        self._predictor = predictor
        self._window_hours = window_hours

    @property
    def auth(self) -> AuthManager:
        return self._auth

    # ── State helpers ─────────────────────────────────────────

    @staticmethod
    def _advance(result: PipelineResult, state: PipelineState) -> None:
        result.state = state
        result.transitions.append(state)
        logger.info("pipeline.transition", state=state.value)

    @classmethod
    def _fail(cls, result: PipelineResult, reason: str) -> PipelineResult:
        result.error = reason
        cls._advance(result, PipelineState.FAILED)
        logger.warning("pipeline.failed", reason=reason)
        return result

    # ── Run ───────────────────────────────────────────────────

    async def run(self, redirect_uri: str | None = None) -> PipelineResult:
        """Execute one refresh cycle.

        ``redirect_uri`` completes a pending login in the same cycle when no
        session is stored yet.  Without it, an anonymous run stops in
        ``AUTHENTICATING`` with ``login_required`` set.
        """
        result = PipelineResult()
        try:
            return await self._run(result, redirect_uri)
        except Exception as exc:
            logger.exception("pipeline.unhandled_error", error=str(exc))
            return self._fail(result, f"Exception: {exc}")

    async def _run(self, result: PipelineResult, redirect_uri: str | None) -> PipelineResult:
        session = await self._auth.get_session()
        if session is None:
            self._advance(result, PipelineState.AUTHENTICATING)
            if redirect_uri is None:
                result.login_required = True
                return result
            session = await self._authenticate(result, redirect_uri)
            if session is None:
                return result

        self._advance(result, PipelineState.FETCHING_METRICS)
        try:
            result.fitness, result.sleep = await self._fetcher.fetch_all(session)
        except MetricsFetchError as exc:
            return self._fail(result, str(exc))

        self._advance(result, PipelineState.AGGREGATING)
        result.usage = await asyncio.to_thread(self._usage.collect_usage, self._window_hours)
        result.request = derive_prediction_request(result.fitness, result.sleep, result.usage)

        self._advance(result, PipelineState.PREDICTING)
        try:
            result.prediction = await self._predictor.predict(result.request)
        except HttpError as exc:
            return self._fail(result, f"Prediction API Error: {exc.status_code}")

        self._advance(result, PipelineState.READY)
        return result

    async def _authenticate(self, result: PipelineResult, redirect_uri: str) -> Session | None:
        outcome = await self._auth.complete_login(redirect_uri)
        if not outcome.success:
            self._fail(result, outcome.reason)
            return None
        return await self._auth.get_session()

    async def close(self) -> None:
        await self._fetcher.close()
        await self._predictor.close()


def create_pipeline(
    settings: Settings | None = None,
    *,
    store: PreferenceStore | None = None,
    usage_provider: UsageStatsProvider | None = None,
) -> WellbeingPipeline:
    """Wire a pipeline from settings with the default collaborators.

    The SQLite preference store and the JSON usage export are used unless
    replacements are given.
    """
    settings = settings or get_settings()
    store = store or PreferenceRepository(settings.preference_namespace, settings.database_url)
    provider = usage_provider or JsonFileUsageStatsProvider(settings.usage_export_path)
    return WellbeingPipeline(
        auth=AuthManager(store, settings=settings),
        fetcher=MetricsFetcher(settings),
        usage=UsageAggregator(provider, top_n=settings.usage_top_n),
        predictor=PredictionClient(settings),
        window_hours=settings.usage_window_hours,
    )
