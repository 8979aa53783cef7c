from finance_dashboard.insights.adapter import (
    DEFAULT_INSIGHT_THRESHOLD,
    InsightAdapter,
    InsightGenerator,
    InsightRecord,
    InvalidInsightError,
    parse_insight,
)

__all__ = [
    "DEFAULT_INSIGHT_THRESHOLD",
    "InsightAdapter",
    "InsightGenerator",
    "InsightRecord",
    "InvalidInsightError",
    "parse_insight",
]
