"""
Reporting Package.

Presentation helpers for leaderboard views.

Modules:
- leaderboard_report: filters, tier categories, recognition, progress, INR formatting
"""

from reporting.leaderboard_report import (
    METRIC_TARGETS,
    MetricProgress,
    Recognition,
    TierCategory,
    filter_members,
    format_inr,
    metric_progress,
    monthly_recognition,
    summarize_tiers,
)


__all__ = [
    "METRIC_TARGETS",
    "MetricProgress",
    "Recognition",
    "TierCategory",
    "filter_members",
    "format_inr",
    "metric_progress",
    "monthly_recognition",
    "summarize_tiers",
]
