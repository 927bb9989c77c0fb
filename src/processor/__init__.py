"""Data processor module for the analytics dashboard."""

from .aggregator import (
    DashboardLoader,
    ERROR_MESSAGES,
    fold_outcomes,
    load_report,
    load_report_sync,
)
from .extractor import (
    SheetSections,
    empty_sections,
    extract_sheet,
)
from .ingestion import (
    SourceError,
    cell_text,
    coerce_number,
    parse_duration,
    parse_percentage,
    read_grid,
)
from .transform import (
    build_chart_payload,
    combined_growth,
    daily_frame,
)
