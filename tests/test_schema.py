"""Tests for the report schema package: models, layout, config, loader,
and formatting helpers."""

import dataclasses

import pytest
import yaml

from src.schema import (
    REVENUE,
    SOURCES,
    SPREADSHEET,
    STATISTIC,
    CellField,
    LoadPhase,
    LoadState,
    MetricPoint,
    NormalizedReport,
    ParserType,
    PlanShare,
    RevenueReport,
    Section,
    SheetLayout,
    SourceConfig,
    StatisticReport,
    build_default_layout,
    format_currency,
    format_number,
    format_percentage,
    load_config,
    load_layout,
    save_config,
    save_layout,
)


# ---------------------------------------------------------------------------
# API payload models
# ---------------------------------------------------------------------------

class TestStatisticReport:
    def test_from_dict(self):
        stat = StatisticReport.from_dict({
            "filterYear": 2025,
            "totalUsers": 42,
            "userGrowthOverTime": {"dataPoints": [{"month": "T1", "totalUsers": 5}]},
            "totalRevenue": {"dataPoints": [{"month": "T1", "revenue": 9}]},
            "generatedAt": "2025-07-31",
        })
        assert stat.filter_year == 2025
        assert stat.user_growth[0].total_users == 5
        assert stat.revenue_series[0].revenue == 9
        assert stat.extra == {"generatedAt": "2025-07-31"}

    def test_missing_series(self):
        stat = StatisticReport.from_dict({"totalUsers": None})
        assert stat.total_users == 0
        assert stat.user_growth == ()
        assert stat.revenue_series == ()

    def test_malformed_points_skipped(self):
        stat = StatisticReport.from_dict({
            "userGrowthOverTime": {"dataPoints": ["bad", {"month": "T1"}]},
            "totalRevenue": "nope",
        })
        assert len(stat.user_growth) == 1
        assert stat.user_growth[0].total_users == 0
        assert stat.revenue_series == ()

    def test_null_month_is_blank(self):
        stat = StatisticReport.from_dict({
            "userGrowthOverTime": {"dataPoints": [{"month": None, "totalUsers": 1}]},
            "totalRevenue": {"dataPoints": [{"month": None, "revenue": 2}]},
        })
        assert stat.user_growth[0].month == ""
        assert stat.revenue_series[0].month == ""

    def test_growth_point_extra_round_trip(self):
        point = {"month": "T1", "totalUsers": 3, "newUsers": 1}
        stat = StatisticReport.from_dict({"userGrowthOverTime": {"dataPoints": [point]}})
        assert stat.user_growth[0].extra == {"newUsers": 1}
        assert stat.user_growth[0].to_dict() == point

    def test_to_dict_keeps_extra(self):
        d = {"filterYear": 2025, "totalUsers": 1,
             "userGrowthOverTime": {"dataPoints": []},
             "totalRevenue": {"dataPoints": []},
             "note": "x"}
        assert StatisticReport.from_dict(d).to_dict() == d


class TestRevenueReport:
    def test_from_dict(self):
        rev = RevenueReport.from_dict({
            "totalRevenueForYear": 100,
            "currentMonthRevenue": 10,
            "revenueGrowthRatePercentage": 2.5,
            "soldPlansPercentageChart": {"dataPoints": [
                {"packageName": "Pro", "pricingOptionInterval": "year",
                 "percentage": 100},
            ]},
        })
        assert rev.revenue_growth_rate_percentage == 2.5
        assert rev.sold_plans == (PlanShare("Pro", "year", 100),)

    def test_plan_label(self):
        assert PlanShare("Pro", "month", 50).label == "Pro (month)"


# ---------------------------------------------------------------------------
# NormalizedReport
# ---------------------------------------------------------------------------

class TestNormalizedReport:
    def test_frozen(self):
        report = NormalizedReport(overview=(), conversion=())
        with pytest.raises(dataclasses.FrozenInstanceError):
            report.errors = ("x",)

    def test_to_dict_absent_sources(self):
        report = NormalizedReport(
            overview=(MetricPoint("Total Visits", 0),), conversion=(),
            errors=("e",),
        )
        d = report.to_dict()
        assert d["statistic"] is None
        assert d["revenue"] is None
        assert d["errors"] == ["e"]
        assert d["overview"] == [{"metric": "Total Visits", "value": 0}]

    def test_from_dict(self):
        report = NormalizedReport.from_dict({
            "overview": [{"metric": "a", "value": 1}],
            "conversion": [],
            "daily": [{"date": "d", "visits": 1, "signUps": 2, "upgrades": 3}],
            "statistic": {"totalUsers": 3},
            "errors": ["x"],
        })
        assert report.daily[0].sign_ups == 2
        assert report.statistic.total_users == 3
        assert report.revenue is None
        assert report.has_errors


class TestLoadState:
    def test_loading(self):
        state = LoadState.loading()
        assert state.phase is LoadPhase.LOADING
        assert state.report is None
        assert not state.is_settled

    def test_settled(self):
        report = NormalizedReport(overview=(), conversion=())
        state = LoadState.settled(report)
        assert state.is_settled
        assert state.report is report


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

class TestDefaultLayout:
    def test_offsets(self):
        layout = build_default_layout()
        cells = {(f.section, f.row, f.col): f.parser for f in layout.fields}
        assert cells == {
            (Section.OVERVIEW, 2, 3): ParserType.NUMBER,
            (Section.OVERVIEW, 3, 3): ParserType.DURATION,
            (Section.OVERVIEW, 4, 3): ParserType.PERCENTAGE,
            (Section.CONVERSION, 9, 3): ParserType.NUMBER,
            (Section.CONVERSION, 10, 3): ParserType.NUMBER,
            (Section.CONVERSION, 11, 3): ParserType.PERCENTAGE,
        }
        assert layout.daily_start_row == 15

    def test_three_fields_per_section(self):
        layout = build_default_layout()
        assert len(layout.section_fields(Section.OVERVIEW)) == 3
        assert len(layout.section_fields(Section.CONVERSION)) == 3

    def test_dict_round_trip(self):
        layout = build_default_layout()
        assert SheetLayout.from_dict(layout.to_dict()) == layout

    def test_unknown_parser_rejected(self):
        with pytest.raises(ValueError):
            CellField.from_dict({"section": "overview", "metric": "x",
                                 "row": 0, "col": 0, "parser": "money"})


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestSourceConfig:
    def test_defaults(self):
        config = SourceConfig()
        assert config.url_for(SPREADSHEET) == "http://localhost:5173/data.xlsx"
        assert config.url_for(STATISTIC) == "http://localhost:5173/statistic.json"
        assert config.url_for(REVENUE) == "http://localhost:5173/revenue.json"
        assert config.timeout is None

    def test_source_order(self):
        assert SOURCES == (SPREADSHEET, STATISTIC, REVENUE)

    def test_slashes_joined_once(self):
        config = SourceConfig(base_url="http://x/api/", statistic_path="stats")
        assert config.url_for(STATISTIC) == "http://x/api/stats"

    def test_absolute_path_passes_through(self):
        config = SourceConfig(revenue_path="https://api.example.com/revenue")
        assert config.url_for(REVENUE) == "https://api.example.com/revenue"

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            SourceConfig().url_for("weather")

    def test_from_dict_partial(self):
        config = SourceConfig.from_dict({
            "base_url": "http://server",
            "paths": {"revenue": "/api/revenue"},
            "timeout": 5,
        })
        assert config.revenue_path == "/api/revenue"
        assert config.statistic_path == "/statistic.json"
        assert config.timeout == 5

    def test_from_dict_unknown_source(self):
        with pytest.raises(ValueError):
            SourceConfig.from_dict({"paths": {"weather": "/w.json"}})


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

class TestLoader:
    def test_layout_round_trip(self, tmp_path):
        path = tmp_path / "cfg" / "layout.yaml"
        layout = build_default_layout()
        save_layout(layout, path)
        assert load_layout(path) == layout

    def test_layout_yaml_is_readable(self, tmp_path):
        path = tmp_path / "layout.yaml"
        save_layout(build_default_layout(), path)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["fields"][1]["parser"] == "duration"
        assert data["daily"]["start_row"] == 15

    def test_config_round_trip(self, tmp_path):
        path = tmp_path / "sources.yaml"
        config = SourceConfig(base_url="http://server", timeout=3.0,
                              headers={"X-Token": "abc"})
        save_config(config, path)
        assert load_config(path) == config

    def test_empty_config_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == SourceConfig()


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

class TestFormatting:
    def test_currency(self):
        assert format_currency(1234567) == "1.234.567 ₫"

    def test_currency_non_number(self):
        assert format_currency(None) == "0 ₫"
        assert format_currency("12") == "0 ₫"

    def test_number_integral(self):
        assert format_number(1500) == "1.500"
        assert format_number(1500.0) == "1.500"

    def test_number_fraction(self):
        assert format_number(1234.5) == "1.234,5"

    def test_number_digits(self):
        assert format_number(3, digits=2) == "3,00"

    def test_percentage(self):
        assert format_percentage(12.346) == "12,35%"
        assert format_percentage(7, digits=1) == "7,0%"

    def test_small_values(self):
        assert format_number(0) == "0"
        assert format_currency(-500) == "-500 ₫"
