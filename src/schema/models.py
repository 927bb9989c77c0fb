"""Report models - the contract between the loaders and the presentation layer.

Defines the normalized shape every data source is folded into: metric
points for the bar charts, the daily series for the line chart, the two
API payloads, and the ``NormalizedReport`` that ties them together.  Also
holds the spreadsheet layout (the declarative offset table driving the
row extractor) and the tagged load state.

All report types are frozen; a new load cycle builds new instances.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Section(Enum):
    """Which summary block of the spreadsheet a cell belongs to."""
    OVERVIEW = "overview"
    CONVERSION = "conversion"


class ParserType(Enum):
    """How to turn a raw cell into a number."""
    NUMBER = "number"            # Plain numeric coercion, blank -> 0
    DURATION = "duration"        # "5 phút 30 giây" -> 330
    PERCENTAGE = "percentage"    # "45.2%" -> 45.2


class LoadPhase(Enum):
    LOADING = "loading"
    SETTLED = "settled"


# ---------------------------------------------------------------------------
# Chart-ready records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MetricPoint:
    """A single labelled value in the overview or conversion block."""
    metric: str
    value: float

    def to_dict(self) -> dict:
        return {"metric": self.metric, "value": self.value}

    @classmethod
    def from_dict(cls, d: dict) -> "MetricPoint":
        return cls(metric=d["metric"], value=d.get("value", 0))


@dataclass(frozen=True)
class DailyPoint:
    """One row of the daily series."""
    date: str
    visits: float = 0
    sign_ups: float = 0
    upgrades: float = 0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "visits": self.visits,
            "signUps": self.sign_ups,
            "upgrades": self.upgrades,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DailyPoint":
        return cls(
            date=str(d["date"]),
            visits=d.get("visits", 0),
            sign_ups=d.get("signUps", 0),
            upgrades=d.get("upgrades", 0),
        )


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------

def _data_points(d: dict | None) -> list[dict]:
    """Pull ``dataPoints`` out of a ``{dataPoints: [...]}`` chart block."""
    if not isinstance(d, dict):
        return []
    points = d.get("dataPoints")
    if not isinstance(points, list):
        return []
    return [p for p in points if isinstance(p, dict)]


@dataclass(frozen=True)
class UserGrowthPoint:
    """One month of the user-growth series; unknown keys ride along in
    ``extra``."""
    month: str
    total_users: float = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d: dict[str, Any] = dict(self.extra)
        d.update({"month": self.month, "totalUsers": self.total_users})
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "UserGrowthPoint":
        return cls(
            month=str(d.get("month") or ""),
            total_users=d.get("totalUsers") or 0,
            extra={k: v for k, v in d.items()
                   if k not in ("month", "totalUsers")},
        )


@dataclass(frozen=True)
class RevenuePoint:
    month: str
    revenue: float = 0

    def to_dict(self) -> dict:
        return {"month": self.month, "revenue": self.revenue}

    @classmethod
    def from_dict(cls, d: dict) -> "RevenuePoint":
        return cls(month=str(d.get("month") or ""), revenue=d.get("revenue") or 0)


@dataclass(frozen=True)
class PlanShare:
    """Share of sold plans for one package / billing interval."""
    package_name: str
    pricing_option_interval: str
    percentage: float = 0

    @property
    def label(self) -> str:
        return f"{self.package_name} ({self.pricing_option_interval})"

    def to_dict(self) -> dict:
        return {
            "packageName": self.package_name,
            "pricingOptionInterval": self.pricing_option_interval,
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PlanShare":
        return cls(
            package_name=str(d.get("packageName", "")),
            pricing_option_interval=str(d.get("pricingOptionInterval", "")),
            percentage=d.get("percentage") or 0,
        )


_STATISTIC_KEYS = {"filterYear", "totalUsers", "userGrowthOverTime", "totalRevenue"}
_REVENUE_KEYS = {
    "totalRevenueForYear",
    "currentMonthRevenue",
    "revenueGrowthRatePercentage",
    "soldPlansPercentageChart",
}


@dataclass(frozen=True)
class StatisticReport:
    """Payload of the statistics endpoint.

    ``user_growth`` and ``revenue_series`` come from the same backend for
    the same period and are paired by position, see
    ``src.processor.transform.combined_growth``.
    """
    filter_year: int | str | None = None
    total_users: float = 0
    user_growth: tuple[UserGrowthPoint, ...] = ()
    revenue_series: tuple[RevenuePoint, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d: dict[str, Any] = dict(self.extra)
        d.update({
            "filterYear": self.filter_year,
            "totalUsers": self.total_users,
            "userGrowthOverTime": {
                "dataPoints": [p.to_dict() for p in self.user_growth],
            },
            "totalRevenue": {
                "dataPoints": [p.to_dict() for p in self.revenue_series],
            },
        })
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "StatisticReport":
        return cls(
            filter_year=d.get("filterYear"),
            total_users=d.get("totalUsers") or 0,
            user_growth=tuple(
                UserGrowthPoint.from_dict(p)
                for p in _data_points(d.get("userGrowthOverTime"))
            ),
            revenue_series=tuple(
                RevenuePoint.from_dict(p)
                for p in _data_points(d.get("totalRevenue"))
            ),
            extra={k: v for k, v in d.items() if k not in _STATISTIC_KEYS},
        )


@dataclass(frozen=True)
class RevenueReport:
    """Payload of the revenue endpoint."""
    total_revenue_for_year: float = 0
    current_month_revenue: float = 0
    revenue_growth_rate_percentage: float = 0
    sold_plans: tuple[PlanShare, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d: dict[str, Any] = dict(self.extra)
        d.update({
            "totalRevenueForYear": self.total_revenue_for_year,
            "currentMonthRevenue": self.current_month_revenue,
            "revenueGrowthRatePercentage": self.revenue_growth_rate_percentage,
            "soldPlansPercentageChart": {
                "dataPoints": [p.to_dict() for p in self.sold_plans],
            },
        })
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "RevenueReport":
        return cls(
            total_revenue_for_year=d.get("totalRevenueForYear") or 0,
            current_month_revenue=d.get("currentMonthRevenue") or 0,
            revenue_growth_rate_percentage=d.get("revenueGrowthRatePercentage") or 0,
            sold_plans=tuple(
                PlanShare.from_dict(p)
                for p in _data_points(d.get("soldPlansPercentageChart"))
            ),
            extra={k: v for k, v in d.items() if k not in _REVENUE_KEYS},
        )


# ---------------------------------------------------------------------------
# NormalizedReport — top-level container
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NormalizedReport:
    """Everything the dashboard renders, built once per load cycle.

    ``overview`` and ``conversion`` always hold three points (zero-valued
    when the spreadsheet failed).  ``errors`` lists the failed sources in
    fetch order: spreadsheet, statistic, revenue.
    """
    overview: tuple[MetricPoint, ...]
    conversion: tuple[MetricPoint, ...]
    daily: tuple[DailyPoint, ...] = ()
    statistic: StatisticReport | None = None
    revenue: RevenueReport | None = None
    errors: tuple[str, ...] = ()

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def to_dict(self) -> dict:
        return {
            "overview": [p.to_dict() for p in self.overview],
            "conversion": [p.to_dict() for p in self.conversion],
            "daily": [p.to_dict() for p in self.daily],
            "statistic": self.statistic.to_dict() if self.statistic else None,
            "revenue": self.revenue.to_dict() if self.revenue else None,
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "NormalizedReport":
        return cls(
            overview=tuple(MetricPoint.from_dict(p) for p in d.get("overview", [])),
            conversion=tuple(MetricPoint.from_dict(p) for p in d.get("conversion", [])),
            daily=tuple(DailyPoint.from_dict(p) for p in d.get("daily", [])),
            statistic=StatisticReport.from_dict(d["statistic"]) if d.get("statistic") else None,
            revenue=RevenueReport.from_dict(d["revenue"]) if d.get("revenue") else None,
            errors=tuple(d.get("errors", [])),
        )


# ---------------------------------------------------------------------------
# Load state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LoadState:
    """Tagged load state: ``Loading`` or ``Settled(report)``.

    Build with ``LoadState.loading()`` / ``LoadState.settled(report)``.
    """
    phase: LoadPhase
    report: NormalizedReport | None = None

    @classmethod
    def loading(cls) -> "LoadState":
        return cls(phase=LoadPhase.LOADING)

    @classmethod
    def settled(cls, report: NormalizedReport) -> "LoadState":
        return cls(phase=LoadPhase.SETTLED, report=report)

    @property
    def is_settled(self) -> bool:
        return self.phase is LoadPhase.SETTLED


# ---------------------------------------------------------------------------
# Spreadsheet layout — the declarative offset table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CellField:
    """One fixed cell of the summary blocks."""
    section: Section
    metric: str          # Label shown on the chart axis
    row: int             # 0-based row index into the grid
    col: int             # 0-based column index
    parser: ParserType = ParserType.NUMBER

    def to_dict(self) -> dict:
        return {
            "section": self.section.value,
            "metric": self.metric,
            "row": self.row,
            "col": self.col,
            "parser": self.parser.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CellField":
        return cls(
            section=Section(d["section"]),
            metric=d["metric"],
            row=int(d["row"]),
            col=int(d["col"]),
            parser=ParserType(d.get("parser", "number")),
        )


@dataclass(frozen=True)
class DailyColumns:
    """Column offsets of the daily series rows."""
    date: int = 0
    visits: int = 1
    sign_ups: int = 2
    upgrades: int = 3

    def to_dict(self) -> dict:
        return {"date": self.date, "visits": self.visits,
                "signUps": self.sign_ups, "upgrades": self.upgrades}

    @classmethod
    def from_dict(cls, d: dict) -> "DailyColumns":
        return cls(
            date=d.get("date", 0),
            visits=d.get("visits", 1),
            sign_ups=d.get("signUps", 2),
            upgrades=d.get("upgrades", 3),
        )


@dataclass(frozen=True)
class SheetLayout:
    """Where each value lives in the first worksheet."""
    name: str
    fields: tuple[CellField, ...]
    daily_start_row: int = 15
    daily_columns: DailyColumns = field(default_factory=DailyColumns)

    def section_fields(self, section: Section) -> list[CellField]:
        return [f for f in self.fields if f.section is section]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
            "daily": {
                "start_row": self.daily_start_row,
                "columns": self.daily_columns.to_dict(),
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SheetLayout":
        daily = d.get("daily", {})
        return cls(
            name=d.get("name", "custom"),
            fields=tuple(CellField.from_dict(f) for f in d.get("fields", [])),
            daily_start_row=daily.get("start_row", 15),
            daily_columns=DailyColumns.from_dict(daily.get("columns", {})),
        )
