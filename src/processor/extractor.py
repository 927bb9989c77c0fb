"""Spreadsheet row extractor.

Maps the fixed cells of a RawGrid onto the overview, conversion, and
daily sections of the report.  Positions come from a ``SheetLayout``
(see ``src.schema.layout``); a single loop walks the layout's offset
table, so moving a block in the workbook means editing the table, not
this code.

Rows or columns past the end of the grid read as blank cells and
produce zero-valued metrics.

Usage::

    from src.processor.extractor import extract_sheet

    sections = extract_sheet(grid)
    sections.overview     # (MetricPoint, MetricPoint, MetricPoint)
    sections.daily        # (DailyPoint, ...)
"""

from dataclasses import dataclass

from src.schema.layout import build_default_layout
from src.schema.models import (
    DailyPoint,
    MetricPoint,
    ParserType,
    Section,
    SheetLayout,
)

from .ingestion import coerce_number, parse_duration, parse_percentage


PARSERS = {
    ParserType.NUMBER: coerce_number,
    ParserType.DURATION: parse_duration,
    ParserType.PERCENTAGE: parse_percentage,
}


@dataclass(frozen=True)
class SheetSections:
    """The three report fields the spreadsheet feeds."""
    overview: tuple[MetricPoint, ...]
    conversion: tuple[MetricPoint, ...]
    daily: tuple[DailyPoint, ...] = ()


# ---------------------------------------------------------------------------
# Grid access
# ---------------------------------------------------------------------------

def get_row(grid, index):
    """Return row ``index`` or an empty row when it does not exist."""
    if index < 0 or index >= len(grid):
        return ()
    return grid[index] or ()


def get_cell(row, index):
    """Return cell ``index`` of a row, None when the row is shorter."""
    if index < 0 or index >= len(row):
        return None
    return row[index]


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    return False


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def _metric(grid, cell_field) -> MetricPoint:
    raw = get_cell(get_row(grid, cell_field.row), cell_field.col)
    return MetricPoint(cell_field.metric, PARSERS[cell_field.parser](raw))


def extract_daily(grid, layout: SheetLayout) -> tuple[DailyPoint, ...]:
    """Build one DailyPoint per row with a non-blank date cell."""
    cols = layout.daily_columns
    points = []
    for index in range(layout.daily_start_row, len(grid)):
        row = get_row(grid, index)
        date = get_cell(row, cols.date)
        if _is_blank(date):
            continue
        points.append(DailyPoint(
            date=str(date),
            visits=coerce_number(get_cell(row, cols.visits)),
            sign_ups=coerce_number(get_cell(row, cols.sign_ups)),
            upgrades=coerce_number(get_cell(row, cols.upgrades)),
        ))
    return tuple(points)


def extract_sheet(grid, layout: SheetLayout | None = None) -> SheetSections:
    """Extract the overview, conversion, and daily sections from a grid.

    Args:
        grid: RawGrid (sequence of rows of cell values); may be any length.
        layout: Offset table; defaults to ``build_default_layout()``.

    Returns:
        SheetSections.  Never raises on short or ragged grids.
    """
    if layout is None:
        layout = build_default_layout()
    return SheetSections(
        overview=tuple(
            _metric(grid, f) for f in layout.section_fields(Section.OVERVIEW)
        ),
        conversion=tuple(
            _metric(grid, f) for f in layout.section_fields(Section.CONVERSION)
        ),
        daily=extract_daily(grid, layout),
    )


def empty_sections(layout: SheetLayout | None = None) -> SheetSections:
    """Zero-valued sections used when the spreadsheet could not be loaded."""
    return extract_sheet((), layout)
