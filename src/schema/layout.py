"""Analytics workbook — canonical layout of the first worksheet.

The worksheet is a hand-maintained report, not a table: summary values
sit in fixed cells of column D and the daily series starts at row 16
(0-based index 15).  Row 0 is not a header row.  Indices count from the
top-left of the used range, which is A1 for the exported workbook.

    row 2  / col 3  Total Visits          e.g. "1000"
    row 3  / col 3  Avg. Duration         e.g. "2 phút 15 giây"
    row 4  / col 3  Bounce Rate           e.g. "45.2%"
    row 9  / col 3  Sign-ups
    row 10 / col 3  Upgrades
    row 11 / col 3  Conversion Rate       e.g. "3.1%"
    row 15+         date | visits | sign-ups | upgrades

If the editors move a block, update the offsets here (or ship a YAML
layout and pass it with ``--layout``).
"""

from .models import (
    CellField,
    DailyColumns,
    ParserType,
    Section,
    SheetLayout,
)

_OVERVIEW = Section.OVERVIEW
_CONVERSION = Section.CONVERSION

SUMMARY_COLUMN = 3
DAILY_START_ROW = 15


def build_default_layout() -> SheetLayout:
    """Build the layout of the analytics workbook as it ships today."""
    col = SUMMARY_COLUMN
    return SheetLayout(
        name="analytics_workbook",
        fields=(
            CellField(_OVERVIEW, "Total Visits", 2, col, ParserType.NUMBER),
            CellField(_OVERVIEW, "Avg. Duration (s)", 3, col, ParserType.DURATION),
            CellField(_OVERVIEW, "Bounce Rate (%)", 4, col, ParserType.PERCENTAGE),
            CellField(_CONVERSION, "Sign-ups", 9, col, ParserType.NUMBER),
            CellField(_CONVERSION, "Upgrades", 10, col, ParserType.NUMBER),
            CellField(_CONVERSION, "Conversion Rate (%)", 11, col, ParserType.PERCENTAGE),
        ),
        daily_start_row=DAILY_START_ROW,
        daily_columns=DailyColumns(date=0, visits=1, sign_ups=2, upgrades=3),
    )
