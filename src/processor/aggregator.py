"""Source aggregator — loads the three dashboard sources into one report.

A load cycle fans out three independent fetches on one event loop:

    spreadsheet  GET data.xlsx       -> RawGrid -> overview/conversion/daily
    statistic    GET statistic.json  -> {"data": ...} -> StatisticReport
    revenue      GET revenue.json    -> {"data": ...} -> RevenueReport

and folds the outcomes only once all three have resolved.  A source that
fails (transport error, non-2xx status, unreadable payload) is recorded
as a fixed message in ``NormalizedReport.errors`` and leaves its fields
at their defaults; it never affects the other two.

Usage::

    from src.processor.aggregator import load_report

    report = await load_report(SourceConfig(base_url="http://localhost:5173"))
    report.errors        # () when every source loaded
"""

import asyncio
import logging

import httpx

from src.schema.config import REVENUE, SOURCES, SPREADSHEET, STATISTIC, SourceConfig
from src.schema.models import (
    LoadState,
    NormalizedReport,
    RevenueReport,
    SheetLayout,
    StatisticReport,
)

from .extractor import empty_sections, extract_sheet
from .ingestion import SourceError, read_grid

logger = logging.getLogger(__name__)


SPREADSHEET_ERROR = "Không thể tải dữ liệu từ file Excel."
STATISTIC_ERROR = "Không thể tải dữ liệu thống kê"
REVENUE_ERROR = "Không thể tải dữ liệu doanh thu"

ERROR_MESSAGES = {
    SPREADSHEET: SPREADSHEET_ERROR,
    STATISTIC: STATISTIC_ERROR,
    REVENUE: REVENUE_ERROR,
}

# Failures recorded in the report; anything else propagates.
# ValueError covers JSON decoding errors and SourceError.
SOURCE_FAILURES = (httpx.HTTPError, httpx.InvalidURL, ValueError)


# ---------------------------------------------------------------------------
# Fetchers
# ---------------------------------------------------------------------------

async def _get(client: httpx.AsyncClient, url: str) -> httpx.Response:
    response = await client.get(url)
    response.raise_for_status()
    return response


async def fetch_spreadsheet(client: httpx.AsyncClient, url: str):
    """Download the workbook and read its first sheet into a RawGrid."""
    response = await _get(client, url)
    return read_grid(response.content)


async def fetch_envelope(client: httpx.AsyncClient, url: str) -> dict:
    """Download a ``{"data": {...}}`` envelope and return its ``data``."""
    response = await _get(client, url)
    body = response.json()
    if not isinstance(body, dict) or "data" not in body:
        raise SourceError(f"{url}: response has no 'data' field")
    data = body["data"]
    if not isinstance(data, dict):
        raise SourceError(f"{url}: 'data' is not an object")
    return data


async def fetch_statistic(client: httpx.AsyncClient, url: str) -> StatisticReport:
    return StatisticReport.from_dict(await fetch_envelope(client, url))


async def fetch_revenue(client: httpx.AsyncClient, url: str) -> RevenueReport:
    return RevenueReport.from_dict(await fetch_envelope(client, url))


# ---------------------------------------------------------------------------
# Fold
# ---------------------------------------------------------------------------

def _failed(source: str, outcome, errors: list[str]) -> bool:
    """Record ``outcome`` as a failure of ``source`` if it is one."""
    if not isinstance(outcome, BaseException):
        return False
    if not isinstance(outcome, SOURCE_FAILURES):
        raise outcome
    logger.warning("Failed to load %s: %s", source, outcome)
    errors.append(ERROR_MESSAGES[source])
    return True


def fold_outcomes(sheet, statistic, revenue,
                  layout: SheetLayout | None = None) -> NormalizedReport:
    """Fold the three per-source outcomes into one report.

    Each argument is either the source's value (a RawGrid, a
    StatisticReport, a RevenueReport) or the exception its fetch raised.
    Slots are positional, so the order the fetches finished in does not
    matter.

    Raises:
        Exception: Any outcome exception that is not a source failure
            (e.g. a TypeError from a bug) is re-raised.
    """
    errors: list[str] = []

    if _failed(SPREADSHEET, sheet, errors):
        sections = empty_sections(layout)
    else:
        sections = extract_sheet(sheet, layout)

    if _failed(STATISTIC, statistic, errors):
        statistic = None
    if _failed(REVENUE, revenue, errors):
        revenue = None

    return NormalizedReport(
        overview=sections.overview,
        conversion=sections.conversion,
        daily=sections.daily,
        statistic=statistic,
        revenue=revenue,
        errors=tuple(errors),
    )


# ---------------------------------------------------------------------------
# Load cycle
# ---------------------------------------------------------------------------

def make_client(config: SourceConfig) -> httpx.AsyncClient:
    """Build the HTTP client used for one load cycle."""
    return httpx.AsyncClient(
        timeout=config.timeout,
        headers=config.headers,
        follow_redirects=True,
    )


async def _run_cycle(client, config, layout) -> NormalizedReport:
    fetchers = {
        SPREADSHEET: fetch_spreadsheet,
        STATISTIC: fetch_statistic,
        REVENUE: fetch_revenue,
    }
    outcomes = await asyncio.gather(
        *(fetchers[s](client, config.url_for(s)) for s in SOURCES),
        return_exceptions=True,
    )
    return fold_outcomes(*outcomes, layout=layout)


async def load_report(config: SourceConfig | None = None,
                      layout: SheetLayout | None = None,
                      client: httpx.AsyncClient | None = None) -> NormalizedReport:
    """Run one load cycle and return the settled report.

    Args:
        config: Endpoints; defaults to ``SourceConfig()``.
        layout: Worksheet layout; defaults to the canonical layout.
        client: Optional client to reuse (it is not closed here).
    """
    if config is None:
        config = SourceConfig()
    if client is not None:
        return await _run_cycle(client, config, layout)
    async with make_client(config) as owned:
        return await _run_cycle(owned, config, layout)


def load_report_sync(config: SourceConfig | None = None,
                     layout: SheetLayout | None = None) -> NormalizedReport:
    """Blocking wrapper around ``load_report`` for scripts and the CLI."""
    return asyncio.run(load_report(config, layout))


class DashboardLoader:
    """Holds the dashboard's current ``LoadState`` across refreshes.

    Refreshes are serialised: a refresh started while another is running
    waits for it, then runs its own full cycle.  Each cycle replaces the
    state with a fresh ``Settled`` report.
    """

    def __init__(self, config: SourceConfig | None = None,
                 layout: SheetLayout | None = None,
                 client: httpx.AsyncClient | None = None):
        self.config = config or SourceConfig()
        self.layout = layout
        self.client = client
        self._state = LoadState.loading()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> LoadState:
        return self._state

    async def refresh(self) -> NormalizedReport:
        async with self._lock:
            self._state = LoadState.loading()
            report = await load_report(self.config, self.layout, self.client)
            self._state = LoadState.settled(report)
            return report
