"""Source configuration — where the three dashboard inputs are fetched from.

Defaults mirror the dev server that hosts the dashboard: the workbook and
both JSON endpoints are served from the same origin.
"""

from dataclasses import dataclass, field
from typing import Any

SPREADSHEET = "spreadsheet"
STATISTIC = "statistic"
REVENUE = "revenue"

# Fetch order; errors are reported in this order too.
SOURCES = (SPREADSHEET, STATISTIC, REVENUE)


@dataclass
class SourceConfig:
    """Endpoints and HTTP options for one load cycle."""
    base_url: str = "http://localhost:5173"
    spreadsheet_path: str = "/data.xlsx"
    statistic_path: str = "/statistic.json"
    revenue_path: str = "/revenue.json"
    timeout: float | None = None       # None = wait as long as the server does
    headers: dict[str, str] = field(default_factory=dict)

    def path_for(self, source: str) -> str:
        paths = {
            SPREADSHEET: self.spreadsheet_path,
            STATISTIC: self.statistic_path,
            REVENUE: self.revenue_path,
        }
        if source not in paths:
            raise ValueError(
                f"Unknown source '{source}'. "
                f"Valid sources: {', '.join(SOURCES)}"
            )
        return paths[source]

    def url_for(self, source: str) -> str:
        """Resolve a source to a full URL; absolute paths pass through."""
        path = self.path_for(source)
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "base_url": self.base_url,
            "paths": {
                SPREADSHEET: self.spreadsheet_path,
                STATISTIC: self.statistic_path,
                REVENUE: self.revenue_path,
            },
        }
        if self.timeout is not None:
            d["timeout"] = self.timeout
        if self.headers:
            d["headers"] = dict(self.headers)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "SourceConfig":
        defaults = cls()
        paths = d.get("paths", {})
        unknown = set(paths) - set(SOURCES)
        if unknown:
            raise ValueError(
                f"Unknown source(s) in config: {', '.join(sorted(unknown))}"
            )
        return cls(
            base_url=d.get("base_url", defaults.base_url),
            spreadsheet_path=paths.get(SPREADSHEET, defaults.spreadsheet_path),
            statistic_path=paths.get(STATISTIC, defaults.statistic_path),
            revenue_path=paths.get(REVENUE, defaults.revenue_path),
            timeout=d.get("timeout"),
            headers=dict(d.get("headers", {})),
        )
