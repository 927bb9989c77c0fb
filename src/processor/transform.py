"""Data transformation module for the analytics dashboard.

Takes a settled ``NormalizedReport`` and produces the derived views the
presentation layer plots: the combined user-growth/revenue series, the
plan-share pie slices, and a flat chart payload dict.  Also exposes the
daily series as a pandas DataFrame for export.

Payload keys:
    kpis        — headline numbers (only when both API sources loaded)
    growth      — combined user-growth / revenue records
    plans       — pie slices {name, value}
    daily       — daily series records
    overview    — overview bar chart records
    conversion  — conversion bar chart records
    errors      — failed sources, in fetch order
"""

import pandas as pd

from src.schema.models import NormalizedReport, StatisticReport

DAILY_COLUMNS = ["date", "visits", "signUps", "upgrades"]


# ---------------------------------------------------------------------------
# Combined growth
# ---------------------------------------------------------------------------

def combined_growth(statistic: StatisticReport | None) -> list[dict]:
    """Pair each user-growth point with the revenue at the same index.

    Both series come from the same backend for the same period, so they
    are zipped by position; no month matching is done.  Every key of the
    growth point is kept, with "revenue" taken from the revenue series.
    A shorter revenue series pads with 0, a longer one is truncated.  The
    QA validator warns when the two series disagree.
    """
    if statistic is None:
        return []
    revenue = statistic.revenue_series
    records = []
    for index, point in enumerate(statistic.user_growth):
        record = point.to_dict()
        record["revenue"] = revenue[index].revenue if index < len(revenue) else 0
        records.append(record)
    return records


# ---------------------------------------------------------------------------
# Chart payload
# ---------------------------------------------------------------------------

def _kpis(report: NormalizedReport) -> dict | None:
    if report.statistic is None or report.revenue is None:
        return None
    return {
        "filterYear": report.statistic.filter_year,
        "totalRevenueForYear": report.revenue.total_revenue_for_year,
        "totalUsers": report.statistic.total_users,
        "currentMonthRevenue": report.revenue.current_month_revenue,
        "revenueGrowthRatePercentage": report.revenue.revenue_growth_rate_percentage,
    }


def plan_slices(report: NormalizedReport) -> list[dict]:
    """Pie slices of the sold-plan breakdown, labelled "<package> (<interval>)"."""
    if report.revenue is None:
        return []
    return [
        {"name": share.label, "value": share.percentage}
        for share in report.revenue.sold_plans
    ]


def build_chart_payload(report: NormalizedReport) -> dict:
    """Flatten a report into the dict the dashboard's charts bind to.

    Sections whose source failed are present but empty (``None`` for the
    KPI block), so each chart can render independently of the others.
    """
    return {
        "kpis": _kpis(report),
        "growth": combined_growth(report.statistic),
        "plans": plan_slices(report),
        "daily": [p.to_dict() for p in report.daily],
        "overview": [p.to_dict() for p in report.overview],
        "conversion": [p.to_dict() for p in report.conversion],
        "errors": list(report.errors),
    }


# ---------------------------------------------------------------------------
# DataFrame export
# ---------------------------------------------------------------------------

def daily_frame(report: NormalizedReport) -> pd.DataFrame:
    """Return the daily series as a DataFrame (one row per day)."""
    rows = [p.to_dict() for p in report.daily]
    return pd.DataFrame(rows, columns=DAILY_COLUMNS)
