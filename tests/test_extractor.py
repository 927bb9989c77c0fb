"""Tests for the spreadsheet row extractor."""

import pytest

from src.processor.extractor import (
    PARSERS,
    SheetSections,
    empty_sections,
    extract_daily,
    extract_sheet,
    get_cell,
    get_row,
)
from src.schema.layout import build_default_layout
from src.schema.models import (
    CellField,
    DailyColumns,
    DailyPoint,
    MetricPoint,
    ParserType,
    Section,
    SheetLayout,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _make_grid(summary=None, daily=None, padding=0):
    """Build a RawGrid shaped like the analytics workbook.

    ``summary`` maps row index -> column-3 text; ``daily`` is a list of
    rows placed from index 15 onward.
    """
    summary = summary or {}
    rows = [("",) * 4 for _ in range(15)]
    for index, text in summary.items():
        rows[index] = ("", "", "", text)
    for row in daily or []:
        rows.append(tuple(row))
    rows.extend(() for _ in range(padding))
    return tuple(rows)


@pytest.fixture
def full_grid():
    return _make_grid(
        summary={
            2: "1000",
            3: "2 phút 15 giây",
            4: "45.2%",
            9: "120",
            10: "30",
            11: "25%",
        },
        daily=[
            ("2025-06-19", "100", "5", "1"),
            ("2025-06-20", "120", "7", "2"),
            ("", "999", "9", "9"),
            ("2025-06-21", "abc", "", "3"),
        ],
        padding=3,
    )


# ---------------------------------------------------------------------------
# Grid access
# ---------------------------------------------------------------------------

class TestGridAccess:
    def test_row_in_range(self):
        assert get_row((("a",), ("b",)), 1) == ("b",)

    def test_row_out_of_range(self):
        assert get_row((("a",),), 5) == ()

    def test_negative_row(self):
        assert get_row((("a",),), -1) == ()

    def test_none_row(self):
        assert get_row((None,), 0) == ()

    def test_cell_out_of_range(self):
        assert get_cell(("a",), 3) is None


# ---------------------------------------------------------------------------
# Summary sections
# ---------------------------------------------------------------------------

class TestSummarySections:
    def test_overview_example(self):
        grid = _make_grid(summary={2: "1000", 3: "2 phút 15 giây", 4: "45.2%"})
        sections = extract_sheet(grid)
        assert [p.metric for p in sections.overview] == [
            "Total Visits", "Avg. Duration (s)", "Bounce Rate (%)",
        ]
        assert [p.value for p in sections.overview] == [
            1000, 135, pytest.approx(45.2),
        ]

    def test_conversion(self, full_grid):
        sections = extract_sheet(full_grid)
        assert sections.conversion == (
            MetricPoint("Sign-ups", 120),
            MetricPoint("Upgrades", 30),
            MetricPoint("Conversion Rate (%)", 25.0),
        )

    def test_malformed_cells_zero(self):
        grid = _make_grid(summary={2: "n/a", 3: "about 2 minutes", 4: "?"})
        values = [p.value for p in extract_sheet(grid).overview]
        assert values == [0, 0, 0]

    def test_always_three_points(self):
        sections = extract_sheet(())
        assert len(sections.overview) == 3
        assert len(sections.conversion) == 3
        assert all(p.value == 0 for p in sections.overview + sections.conversion)

    def test_short_grid_keeps_present_rows(self):
        grid = (("",), ("",), ("", "", "", "500"), ("", "", "", "1 phút 0 giây"))
        sections = extract_sheet(grid)
        assert [p.value for p in sections.overview] == [500, 60, 0]
        assert [p.value for p in sections.conversion] == [0, 0, 0]
        assert sections.daily == ()

    def test_ragged_rows(self):
        grid = ((), (), ("", ""), ("x",))
        sections = extract_sheet(grid)
        assert [p.value for p in sections.overview] == [0, 0, 0]


# ---------------------------------------------------------------------------
# Daily series
# ---------------------------------------------------------------------------

class TestDailySeries:
    def test_non_blank_rows_only(self, full_grid):
        daily = extract_sheet(full_grid).daily
        assert [p.date for p in daily] == ["2025-06-19", "2025-06-20", "2025-06-21"]

    def test_values_coerced(self, full_grid):
        daily = extract_sheet(full_grid).daily
        assert daily[0] == DailyPoint("2025-06-19", 100, 5, 1)
        assert daily[2] == DailyPoint("2025-06-21", 0, 0, 3)

    def test_grid_shorter_than_daily_offset(self):
        grid = tuple(("x", "1", "2", "3") for _ in range(15))
        assert extract_sheet(grid).daily == ()

    def test_row_fifteen_is_first_daily_row(self):
        grid = _make_grid(daily=[("d1", "1", "1", "1")])
        assert len(grid) == 16
        assert [p.date for p in extract_sheet(grid).daily] == ["d1"]

    def test_date_only_row(self):
        grid = _make_grid(daily=[("d1",)])
        assert extract_sheet(grid).daily == (DailyPoint("d1", 0, 0, 0),)

    def test_to_dict_keys(self, full_grid):
        record = extract_sheet(full_grid).daily[0].to_dict()
        assert record == {"date": "2025-06-19", "visits": 100,
                          "signUps": 5, "upgrades": 1}


# ---------------------------------------------------------------------------
# Layout-driven extraction
# ---------------------------------------------------------------------------

class TestLayoutDriven:
    def test_every_parser_registered(self):
        assert set(PARSERS) == set(ParserType)

    def test_custom_layout(self):
        layout = SheetLayout(
            name="moved",
            fields=(
                CellField(Section.OVERVIEW, "Visits", 0, 1, ParserType.NUMBER),
                CellField(Section.CONVERSION, "Rate", 1, 0, ParserType.PERCENTAGE),
            ),
            daily_start_row=2,
            daily_columns=DailyColumns(date=1, visits=0, sign_ups=2, upgrades=3),
        )
        grid = (("", "77"), ("9.5%",), ("40", "d1", "4", "1"))
        sections = extract_sheet(grid, layout)
        assert sections.overview == (MetricPoint("Visits", 77),)
        assert sections.conversion == (MetricPoint("Rate", 9.5),)
        assert sections.daily == (DailyPoint("d1", 40, 4, 1),)

    def test_default_layout_used(self, full_grid):
        assert extract_sheet(full_grid) == extract_sheet(full_grid, build_default_layout())

    def test_extract_daily_directly(self, full_grid):
        assert len(extract_daily(full_grid, build_default_layout())) == 3


# ---------------------------------------------------------------------------
# Defaults and idempotence
# ---------------------------------------------------------------------------

class TestDefaultsAndIdempotence:
    def test_empty_sections(self):
        sections = empty_sections()
        assert isinstance(sections, SheetSections)
        assert [p.metric for p in sections.conversion] == [
            "Sign-ups", "Upgrades", "Conversion Rate (%)",
        ]
        assert all(p.value == 0 for p in sections.overview)
        assert sections.daily == ()

    def test_idempotent(self, full_grid):
        assert extract_sheet(full_grid) == extract_sheet(full_grid)

    def test_grid_not_mutated(self, full_grid):
        before = [tuple(r) for r in full_grid]
        extract_sheet(full_grid)
        assert [tuple(r) for r in full_grid] == before
