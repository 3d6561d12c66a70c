"""Usage sub-package — host usage statistics and their top-N aggregation."""

from emotion_wellbeing.usage.aggregator import UsageAggregator
from emotion_wellbeing.usage.providers import (
    JsonFileUsageStatsProvider,
    StaticUsageStatsProvider,
    UsageStatsProvider,
)

__all__ = [
    "JsonFileUsageStatsProvider",
    "StaticUsageStatsProvider",
    "UsageAggregator",
    "UsageStatsProvider",
]
