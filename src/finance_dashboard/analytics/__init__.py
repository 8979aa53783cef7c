from finance_dashboard.analytics.aggregation import (
    summarize,
    category_distribution,
    balance_trend,
    trend_is_positive,
    top_expenses,
    category_ranking,
    build_dashboard,
)
from finance_dashboard.analytics.listing import (
    filter_transactions,
    group_by_category,
    group_net_total,
)
from finance_dashboard.analytics.models import (
    Summaries,
    CategoryTotal,
    CategoryShare,
    BalancePoint,
    DashboardViews,
)

__all__ = [
    "summarize",
    "category_distribution",
    "balance_trend",
    "trend_is_positive",
    "top_expenses",
    "category_ranking",
    "build_dashboard",
    "filter_transactions",
    "group_by_category",
    "group_net_total",
    "Summaries",
    "CategoryTotal",
    "CategoryShare",
    "BalancePoint",
    "DashboardViews",
]
