"""Reduce raw per-application usage to a ranked top-N list of minutes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import structlog

from emotion_wellbeing.exceptions import PermissionUnavailable
from emotion_wellbeing.models import UsageRecord
from emotion_wellbeing.usage.providers import UsageStatsProvider

logger = structlog.get_logger(__name__)

MS_PER_MINUTE = 60_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UsageAggregator:
    """Collects foreground usage over a trailing window.

    Missing usage access is not an error: the provider is asked to open its
    permission settings and an empty list is returned.  Any other provider
    failure is logged and handled the same way.
    """

    def __init__(
        self,
        provider: UsageStatsProvider,
        *,
        top_n: int = 5,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._provider = provider
        self._top_n = top_n
        self._clock = clock

    def collect_usage(self, window_hours: int = 24) -> list[UsageRecord]:
        end = self._clock()
        start = end - timedelta(hours=window_hours)

        try:
            stats = self._provider.query_usage(start, end)
        except PermissionUnavailable as exc:
            logger.info("usage.permission_unavailable", reason=str(exc))
            stats = []
        except Exception:
            logger.exception("usage.provider_error", provider=type(self._provider).__name__)
            stats = []

        if not stats:
            self._provider.open_permission_settings()
            return []

        ranked = sorted(stats, key=lambda s: s.total_time_in_foreground_ms, reverse=True)
        records = [
            UsageRecord(
                package_name=s.package_name,
                app_name=self._provider.resolve_label(s),
                foreground_ms=s.total_time_in_foreground_ms,
                minutes=s.total_time_in_foreground_ms // MS_PER_MINUTE,
            )
            for s in ranked[: self._top_n]
        ]
        logger.info("usage.collected", apps=len(records), window_hours=window_hours)
        return records
