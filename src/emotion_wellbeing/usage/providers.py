"""Usage-statistics capability and its concrete bindings.

The host platform's usage API is an external collaborator; the core only sees
:class:`UsageStatsProvider`.  Two bindings ship with the package:

* :class:`StaticUsageStatsProvider` — records supplied in memory.
* :class:`JsonFileUsageStatsProvider` — records exported to a JSON file by an
  OS-side helper.  A missing file means access has not been granted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import structlog
from pydantic import TypeAdapter

from emotion_wellbeing.exceptions import PermissionUnavailable
from emotion_wellbeing.models import AppUsageStat

logger = structlog.get_logger(__name__)

_STATS_ADAPTER = TypeAdapter(list[AppUsageStat])


class UsageStatsProvider(ABC):
    """Per-application foreground usage reported by the host."""

    @abstractmethod
    def query_usage(self, start: datetime, end: datetime) -> list[AppUsageStat]:
        """Return raw usage records for ``[start, end]``.

        Raises :class:`PermissionUnavailable` when usage access is not granted.
        """

    def open_permission_settings(self) -> None:
        """Send the user to wherever usage access is granted."""
        logger.warning("usage.permission_settings_requested", provider=type(self).__name__)

    def resolve_label(self, stat: AppUsageStat) -> str:
        """Human-readable application name, falling back to the package name."""
        return stat.app_label or stat.package_name


class StaticUsageStatsProvider(UsageStatsProvider):
    def __init__(
        self,
        stats: list[AppUsageStat] | None = None,
        *,
        on_permission_missing: Callable[[], None] | None = None,
    ) -> None:
        self._stats = list(stats or [])
        self._on_permission_missing = on_permission_missing
        self.permission_requests = 0

    def query_usage(self, start: datetime, end: datetime) -> list[AppUsageStat]:
        return list(self._stats)

    def open_permission_settings(self) -> None:
        self.permission_requests += 1
        if self._on_permission_missing is not None:
            self._on_permission_missing()
        else:
            super().open_permission_settings()


class JsonFileUsageStatsProvider(UsageStatsProvider):
    """Reads a JSON array of :class:`AppUsageStat` objects.

    Records carrying ``last_time_used`` outside the requested window are
    dropped; records without it are assumed to belong to the window.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def query_usage(self, start: datetime, end: datetime) -> list[AppUsageStat]:
        if not self.path.exists():
            raise PermissionUnavailable(f"No usage export at {self.path}")
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise PermissionUnavailable(f"Usage export unreadable: {exc}") from exc
        try:
            stats = _STATS_ADAPTER.validate_json(raw)
        except ValueError as exc:
            logger.error("usage.bad_export", path=str(self.path), error=str(exc))
            return []
        return [s for s in stats if _in_window(s.last_time_used, start, end)]

    def open_permission_settings(self) -> None:
        logger.warning(
            "usage.permission_settings_requested",
            hint="export usage statistics to the configured path",
            path=str(self.path),
        )


def _in_window(ts: datetime | None, start: datetime, end: datetime) -> bool:
    if ts is None:
        return True
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return start <= ts <= end
