"""Report schema package — typed models shared by loaders and presentation.

Provides the contract between the data processor and the dashboard:

- models.py: Report dataclasses (NormalizedReport, MetricPoint, etc.) and
  the spreadsheet layout types
- layout.py: The canonical worksheet layout (offset table)
- config.py: Endpoint configuration
- design_system.py: Value formatting functions (currency, number, percentage)
- loader.py: YAML serialization/deserialization
"""

from .config import REVENUE, SOURCES, SPREADSHEET, STATISTIC, SourceConfig
from .design_system import (
    format_currency,
    format_number,
    format_percentage,
)
from .layout import build_default_layout
from .loader import load_config, load_layout, save_config, save_layout
from .models import (
    CellField,
    DailyColumns,
    DailyPoint,
    LoadPhase,
    LoadState,
    MetricPoint,
    NormalizedReport,
    ParserType,
    PlanShare,
    RevenuePoint,
    RevenueReport,
    Section,
    SheetLayout,
    StatisticReport,
    UserGrowthPoint,
)

__all__ = [
    # Models
    "CellField",
    "DailyColumns",
    "DailyPoint",
    "LoadPhase",
    "LoadState",
    "MetricPoint",
    "NormalizedReport",
    "ParserType",
    "PlanShare",
    "RevenuePoint",
    "RevenueReport",
    "Section",
    "SheetLayout",
    "StatisticReport",
    "UserGrowthPoint",
    # Layout / config
    "build_default_layout",
    "SourceConfig",
    "SOURCES",
    "SPREADSHEET",
    "STATISTIC",
    "REVENUE",
    # Loader
    "load_config",
    "load_layout",
    "save_config",
    "save_layout",
    # Formatting
    "format_currency",
    "format_number",
    "format_percentage",
]
