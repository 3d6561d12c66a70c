"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import httpx
import pytest

from emotion_wellbeing.auth import AuthManager
from emotion_wellbeing.collectors.fitness import MetricsFetcher
from emotion_wellbeing.config import Settings
from emotion_wellbeing.models import AppUsageStat
from emotion_wellbeing.pipeline import WellbeingPipeline
from emotion_wellbeing.prediction import PredictionClient
from emotion_wellbeing.storage.repository import MemoryPreferenceStore
from emotion_wellbeing.usage import StaticUsageStatsProvider, UsageAggregator, UsageStatsProvider

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


# ── Fake remote API ───────────────────────────────────────────


Route = tuple[int, Any] | Callable[[httpx.Request], httpx.Response]


class FakeApi:
    """Answers requests by URL path and records every request it sees."""

    def __init__(self, routes: dict[str, Route] | None = None) -> None:
        self.routes: dict[str, Route] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"detail": "not found"})
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


# ── Payload builders ──────────────────────────────────────────


def fitness_payload(steps: list[int | None]) -> dict[str, Any]:
    def series(source: str, points: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "minStartTimeNs": "1700000000000000000",
            "maxEndTimeNs": "1700086400000000000",
            "dataSourceId": source,
            "point": points,
        }

    step_points = [
        {"dataTypeName": "com.google.step_count.delta", "value": [{"intVal": n}] if n is not None else []}
        for n in steps
    ]
    return {
        "steps_data": series("derived:com.google.step_count.delta", step_points),
        "heart_rate_data": series("derived:com.google.heart_rate.bpm", [{"value": [{"fpVal": 71.5}]}]),
        "calories_data": series("derived:com.google.calories.expended", []),
    }


def sleep_payload(total_minutes: int, sessions: int = 1) -> dict[str, Any]:
    return {
        "sleep_sessions": {
            "session": [
                {
                    "id": f"s{i}",
                    "name": "Night",
                    "startTimeMillis": "1700000000000",
                    "endTimeMillis": "1700025200000",
                    "activityType": 72,
                    "application": {"packageName": "com.example.sleep"},
                }
                for i in range(sessions)
            ],
            "deletedSession": [],
            "nextPageToken": "",
        },
        "sleep_summary": {
            "total_sleep_minutes": total_minutes,
            "deep_sleep_minutes": total_minutes // 4,
            "light_sleep_minutes": total_minutes // 2,
        },
    }


PREDICTION_PAYLOAD: dict[str, Any] = {
    "predicted_emotion": "calm",
    "confidence_score": 0.875,
    "wellbeing_score": 78,
    "wellbeing_breakdown": {
        "sleep": 82.0,
        "activity": 75.5,
        "phys_health": 70.0,
        "music_mood": 64.0,
        "digital_wellness": 58.0,
    },
    "recommendations": [
        {
            "category": "Sleep",
            "text": "Keep a consistent bedtime.",
            "priority": 1,
            "impact_score": 0.8,
            "time_to_implement": "1 week",
        },
        {
            "category": "Digital",
            "text": "Mute social apps after 22:00.",
            "priority": 2,
            "impact_score": 0.6,
            "time_to_implement": "today",
        },
    ],
    "risk_factors": ["late screen time"],
    "positive_factors": ["regular activity"],
    "next_check_in": "tomorrow",
}


def usage_stat(name: str, minutes: int) -> AppUsageStat:
    return AppUsageStat(
        package_name=f"com.example.{name.lower()}",
        app_label=name,
        total_time_in_foreground_ms=minutes * 60_000,
    )


# ── Fixtures ──────────────────────────────────────────────────


@pytest.fixture
def settings() -> Settings:
    return Settings(
        auth_base_url="http://auth.test",
        fitness_base_url="http://fitness.test",
        predict_base_url="http://predict.test",
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
def store() -> MemoryPreferenceStore:
    return MemoryPreferenceStore()


@pytest.fixture
def fitness_api() -> FakeApi:
    return FakeApi({
        "/api/fitness/data": (200, fitness_payload([5000, 3000])),
        "/api/fitness/sleep": (200, sleep_payload(420)),
    })


@pytest.fixture
def predict_api() -> FakeApi:
    return FakeApi({"/predict_test": (200, PREDICTION_PAYLOAD)})


@pytest.fixture
def auth_api() -> FakeApi:
    return FakeApi({"/auth/authorize": (200, {"auth_url": "https://accounts.example/o/auth"})})


@pytest.fixture
def usage_provider() -> StaticUsageStatsProvider:
    return StaticUsageStatsProvider([usage_stat("A", 30), usage_stat("B", 20)])


@pytest.fixture
def make_pipeline(settings, store, auth_api, fitness_api, predict_api, usage_provider):
    """Factory so tests can tweak the fakes before wiring the pipeline."""

    def _make(provider: UsageStatsProvider | None = None) -> WellbeingPipeline:
        return WellbeingPipeline(
            auth=AuthManager(
                store,
                settings=settings,
                transport=auth_api.transport,
                opener=lambda url: None,
                notifier=lambda msg: None,
            ),
            fetcher=MetricsFetcher(settings, transport=fitness_api.transport),
            usage=UsageAggregator(provider or usage_provider, clock=lambda: FIXED_NOW),
            predictor=PredictionClient(settings, transport=predict_api.transport),
        )

    return _make
