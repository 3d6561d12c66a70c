"""Shared Pydantic models used across the client.

Field names of the remote payloads are kept exactly as the fitness and
prediction services send them, so the models validate raw JSON directly.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

# ── Enums ─────────────────────────────────────────────────────


class SessionState(str, Enum):
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class PipelineState(str, Enum):
    """Lifecycle of a single refresh cycle."""
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    FETCHING_METRICS = "fetching_metrics"
    AGGREGATING = "aggregating"
    PREDICTING = "predicting"
    READY = "ready"
    FAILED = "failed"


# ── Session ───────────────────────────────────────────────────


class Session(BaseModel):
    """A persisted bearer credential.  Never expired or refreshed."""
    token: str
    state: SessionState = SessionState.AUTHENTICATED

    @property
    def authorization(self) -> str:
        """Value for the ``Authorization`` header (already ``Bearer``-prefixed)."""
        return self.token


class LoginOutcome(BaseModel):
    success: bool
    reason: str = ""


# ── Fitness dataset ───────────────────────────────────────────


class ValueData(BaseModel):
    fpVal: float | None = None
    intVal: int | None = None


class PointData(BaseModel):
    startTimeNanos: str | None = None
    endTimeNanos: str | None = None
    dataTypeName: str | None = None
    originDataSourceId: str | None = None
    value: list[ValueData] | None = None


class FitnessMetricData(BaseModel):
    """One named series: a time-bounded collection of points."""
    minStartTimeNs: str = ""
    maxEndTimeNs: str = ""
    dataSourceId: str = ""
    point: list[PointData] = Field(default_factory=list)


class FitnessDataset(BaseModel):
    steps_data: FitnessMetricData = Field(default_factory=FitnessMetricData)
    heart_rate_data: FitnessMetricData = Field(default_factory=FitnessMetricData)
    calories_data: FitnessMetricData = Field(default_factory=FitnessMetricData)


# ── Sleep dataset ─────────────────────────────────────────────


class ApplicationInfo(BaseModel):
    packageName: str | None = None


class SleepSession(BaseModel):
    id: str | None = None
    name: str | None = None
    description: str | None = None
    startTimeMillis: str | None = None
    endTimeMillis: str | None = None
    modifiedTimeMillis: str | None = None
    application: ApplicationInfo | None = None
    activityType: int | None = None


class SleepSessions(BaseModel):
    session: list[SleepSession] = Field(default_factory=list)
    deletedSession: list[SleepSession] = Field(default_factory=list)
    nextPageToken: str = ""


class SleepSummary(BaseModel):
    total_sleep_minutes: int = 0
    deep_sleep_minutes: int = 0
    light_sleep_minutes: int = 0


class SleepDataset(BaseModel):
    sleep_sessions: SleepSessions = Field(default_factory=SleepSessions)
    sleep_summary: SleepSummary | None = None


# ── Usage ─────────────────────────────────────────────────────


class AppUsageStat(BaseModel):
    """Raw per-application record as reported by the host platform."""
    package_name: str
    total_time_in_foreground_ms: int = 0
    app_label: str | None = None
    last_time_used: datetime | None = None


class UsageRecord(BaseModel):
    """Foreground usage of one application over the measurement window."""
    package_name: str
    app_name: str
    foreground_ms: int
    minutes: int


# ── Prediction ────────────────────────────────────────────────


class PredictionRequest(BaseModel):
    sleep_hours: float
    steps_count: int
    social_time: int

    def to_query(self) -> dict[str, float | int]:
        return {
            "sleepHours": self.sleep_hours,
            "stepsCount": self.steps_count,
            "socialTime": self.social_time,
        }


class WellbeingBreakdown(BaseModel):
    sleep: float
    activity: float
    phys_health: float
    music_mood: float
    digital_wellness: float


class Recommendation(BaseModel):
    category: str
    text: str
    priority: int
    impact_score: float
    time_to_implement: str


class PredictionResult(BaseModel):
    """Structured wellbeing report returned by the scoring service."""
    predicted_emotion: str
    confidence_score: float  # 0..1
    wellbeing_score: int
    wellbeing_breakdown: WellbeingBreakdown
    recommendations: list[Recommendation] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    positive_factors: list[str] = Field(default_factory=list)
    next_check_in: str | None = None


# ── Pipeline result ───────────────────────────────────────────


class PipelineResult(BaseModel):
    """Everything one refresh cycle produced, handed to the presentation layer."""
    state: PipelineState = PipelineState.IDLE
    transitions: list[PipelineState] = Field(default_factory=lambda: [PipelineState.IDLE])
    login_required: bool = False
    fitness: FitnessDataset | None = None
    sleep: SleepDataset | None = None
    usage: list[UsageRecord] = Field(default_factory=list)
    request: PredictionRequest | None = None
    prediction: PredictionResult | None = None
    error: str | None = None
