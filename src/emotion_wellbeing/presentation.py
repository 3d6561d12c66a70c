"""Presentation adapter — map a pipeline result to display-ready fields.

The rendering surface (local web shell, terminal) only consumes
:class:`DashboardScreen`.  Chart drawing itself is left to the surface; the
bar chart is delivered as labels and values.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from emotion_wellbeing.models import (
    FitnessDataset,
    PipelineResult,
    PipelineState,
    PredictionResult,
    SleepDataset,
    UsageRecord,
)

USAGE_SERIES_LABEL = "Usage (mins)"
NO_USAGE_TEXT = "Digital Wellbeing: No data (maybe permission not granted)"
_BAR_WIDTH = 30


class BarChart(BaseModel):
    series_label: str = USAGE_SERIES_LABEL
    labels: list[str] = Field(default_factory=list)
    values: list[int] = Field(default_factory=list)


class Section(BaseModel):
    title: str
    lines: list[str] = Field(default_factory=list)


class DashboardScreen(BaseModel):
    """Either an error line or the ordered result sections."""
    state: PipelineState
    error: str | None = None
    sections: list[Section] = Field(default_factory=list)
    chart: BarChart | None = None


# ── Sections ──────────────────────────────────────────────────


def fitness_section(data: FitnessDataset | None) -> Section:
    if data is None:
        return Section(title="Fitness", lines=["Loading fitness data..."])
    return Section(
        title="Fitness",
        lines=[
            f"Steps Source: {data.steps_data.dataSourceId}",
            f"Steps Points: {len(data.steps_data.point)}",
            f"Heart Rate Source: {data.heart_rate_data.dataSourceId}",
            f"Heart Points: {len(data.heart_rate_data.point)}",
            f"Calories Source: {data.calories_data.dataSourceId}",
            f"Calories Points: {len(data.calories_data.point)}",
        ],
    )


def sleep_section(data: SleepDataset | None) -> Section:
    if data is None:
        return Section(title="Sleep Summary", lines=["Loading sleep data..."])
    summary = data.sleep_summary
    lines = []
    if summary is not None:
        lines += [
            f"Total Sleep: {summary.total_sleep_minutes} mins",
            f"Deep Sleep: {summary.deep_sleep_minutes} mins",
            f"Light Sleep: {summary.light_sleep_minutes} mins",
        ]
    lines.append(f"Sessions: {len(data.sleep_sessions.session)}")
    return Section(title="Sleep Summary", lines=lines)


def usage_section(usage: list[UsageRecord]) -> tuple[Section, BarChart | None]:
    if not usage:
        return Section(title="Top Apps Today", lines=[NO_USAGE_TEXT]), None
    section = Section(
        title="Top Apps Today",
        lines=[f"{r.app_name}: {r.minutes} mins" for r in usage],
    )
    chart = BarChart(labels=[r.app_name for r in usage], values=[r.minutes for r in usage])
    return section, chart


def prediction_section(prediction: PredictionResult) -> Section:
    b = prediction.wellbeing_breakdown
    lines = [
        f"Mood: {prediction.predicted_emotion}",
        f"Confidence: {prediction.confidence_score * 100:.2f}%",
        f"Wellbeing Score: {prediction.wellbeing_score}",
        f"Sleep Score: {b.sleep}",
        f"Activity Score: {b.activity}",
        f"Music Mood: {b.music_mood}",
        f"Digital Wellness: {b.digital_wellness}",
    ]
    lines += [f"{rec.category}: {rec.text}" for rec in prediction.recommendations]
    return Section(title="Wellbeing", lines=lines)


# ── Screen ────────────────────────────────────────────────────


def build_screen(result: PipelineResult) -> DashboardScreen:
    if result.error is not None:
        return DashboardScreen(state=result.state, error=f"Error: {result.error}")
    if result.login_required:
        return DashboardScreen(
            state=result.state,
            sections=[Section(title="Login", lines=["Sign in to load your wellbeing report."])],
        )

    usage, chart = usage_section(result.usage)
    sections = [fitness_section(result.fitness), sleep_section(result.sleep), usage]
    if result.prediction is not None:
        sections.append(prediction_section(result.prediction))
    return DashboardScreen(state=result.state, sections=sections, chart=chart)


def render_text(screen: DashboardScreen) -> str:
    """Plain-text, top-to-bottom rendering for terminals."""
    if screen.error is not None:
        return screen.error + "\n"

    out: list[str] = []
    for section in screen.sections:
        out.append(f"== {section.title} ==")
        out.extend(section.lines)
        out.append("")

    if screen.chart is not None and screen.chart.values:
        peak = max(screen.chart.values) or 1
        width = max(len(label) for label in screen.chart.labels)
        out.append(f"-- {screen.chart.series_label} --")
        for label, value in zip(screen.chart.labels, screen.chart.values):
            bar = "#" * round(_BAR_WIDTH * value / peak)
            out.append(f"{label.ljust(width)} | {bar} {value}")
        out.append("")
    return "\n".join(out)
