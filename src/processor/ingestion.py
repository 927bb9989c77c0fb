"""Data ingestion module for the analytics dashboard.

Handles reading and cleaning the raw spreadsheet input:
- Scalar parsers for the loosely formatted cells editors type by hand
  ("2 phút 15 giây", "45.2%", "1000", blanks)
- Workbook reader turning .xlsx bytes into a RawGrid of display text

Every parser is total: malformed, blank, or non-string input yields 0,
never an exception.
"""

import datetime
import io
import math
import re
import zipfile
from xml.etree.ElementTree import ParseError

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException


class SourceError(ValueError):
    """A source answered but its payload is unusable."""


# ---------------------------------------------------------------------------
# Value parsers
# ---------------------------------------------------------------------------

DEFAULT_MINUTE_UNIT = "phút"
DEFAULT_SECOND_UNIT = "giây"

_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_duration(value, minute_unit=DEFAULT_MINUTE_UNIT,
                   second_unit=DEFAULT_SECOND_UNIT):
    """Parse a localized "<m> <minute-unit> <s> <second-unit>" duration.

    Examples:
        "5 phút 30 giây"  -> 330
        "2phút 15giây"    -> 135
        "phút giây"       -> 0
        None / 42         -> 0
    """
    if not isinstance(value, str):
        return 0
    pattern = (
        rf"(\d+)\s*{re.escape(minute_unit)}\s*(\d+)\s*{re.escape(second_unit)}"
    )
    match = re.search(pattern, value, re.ASCII)
    if not match:
        return 0
    return int(match.group(1)) * 60 + int(match.group(2))


def parse_percentage(value):
    """Parse a percentage string into percentage points.

    Only the first "%" is dropped; the number is read from the start of
    the remaining text, so trailing words are ignored.

    Examples:
        "12.5%"        -> 12.5
        "45.2% giảm"   -> 45.2
        "-3%"          -> -3.0
        "", "N/A"      -> 0
        0.452          -> 0      (non-strings are not percentages)
        "1e999%"       -> 0      (infinities count as malformed)
    """
    if not isinstance(value, str):
        return 0.0
    match = _FLOAT_PREFIX.match(value.replace("%", "", 1))
    if not match:
        return 0.0
    result = float(match.group(1))
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def coerce_number(value):
    """Coerce a cell to a number, falling back to 0.

    Examples:
        "1000"    -> 1000.0
        " 12.5 "  -> 12.5
        42        -> 42.0
        ""        -> 0
        "1,000"   -> 0       (grouped text is not a number)
        None/NaN  -> 0
        "Infinity" -> 0      (infinities count as malformed)
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return 0.0
        return float(value)
    if not isinstance(value, str):
        return 0.0
    s = value.strip()
    if not s or "_" in s:
        return 0.0
    try:
        result = float(s)
    except ValueError:
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


# ---------------------------------------------------------------------------
# Workbook reading
# ---------------------------------------------------------------------------

def _percent_decimals(number_format):
    """Decimal places of a percent format such as '0.00%'."""
    head = number_format.split("%", 1)[0]
    if "." not in head:
        return 0
    return sum(1 for ch in head.split(".", 1)[1] if ch in "0#")


def cell_text(value, number_format="General"):
    """Render a cell value the way the sheet displays it.

    Integral numbers lose their ".0", percent-formatted numbers get their
    "%" back, dates become ISO strings, blanks become "".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (int, float)):
        if number_format and "%" in number_format:
            decimals = _percent_decimals(number_format)
            return f"{value * 100:.{decimals}f}%"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return str(value)


def _trim(row):
    end = len(row)
    while end and row[end - 1] == "":
        end -= 1
    return tuple(row[:end])


_WORKBOOK_ERRORS = (
    InvalidFileException,
    zipfile.BadZipFile,
    ParseError,
    KeyError,
    OSError,
    TypeError,
    ValueError,
)


def _used_origin(rows, top, left):
    """Top-left corner of the used range, 1-based.

    The declared dimension can only widen the range, never cut cells that
    hold values.
    """
    for index, row in enumerate(rows, start=1):
        if any(row):
            top = min(top, index)
            break
    starts = [next(i for i, text in enumerate(row, start=1) if text)
              for row in rows if any(row)]
    if starts:
        left = min(left, min(starts))
    return top, left


def read_grid(data):
    """Read the first worksheet of an .xlsx payload into a RawGrid.

    Row 0 / column 0 of the grid is the top-left corner of the sheet's
    used range: the declared dimension, grown to cover every cell that
    holds a value.  A sheet whose row 1 is blank therefore starts at sheet
    row 2.  Stale dimension tags written by some exporters are ignored
    when sizing the sheet.  Trailing blank cells are dropped from each row.

    Raises:
        SourceError: If the bytes are not a workbook or it has no sheets.
    """
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except _WORKBOOK_ERRORS as exc:
        raise SourceError(f"Unreadable workbook: {exc}") from exc

    try:
        if not wb.worksheets:
            raise SourceError("Workbook has no worksheets")
        ws = wb.worksheets[0]
        top, left = ws.min_row or 1, ws.min_column or 1
        ws.reset_dimensions()
        rows = [
            _trim([
                cell_text(getattr(c, "value", None),
                          getattr(c, "number_format", "General"))
                for c in row
            ])
            for row in ws.iter_rows(min_row=1)
        ]
    except SourceError:
        raise
    except _WORKBOOK_ERRORS as exc:
        raise SourceError(f"Unreadable worksheet: {exc}") from exc
    finally:
        wb.close()

    top, left = _used_origin(rows, top, left)
    return tuple(row[left - 1:] for row in rows[top - 1:])
