"""Config loader — YAML serialization for SheetLayout and SourceConfig.

Provides round-trip save/load so the workbook layout and the endpoint
settings can be reviewed, version-controlled, and edited as YAML.
"""

from pathlib import Path

import yaml

from .config import SourceConfig
from .models import SheetLayout


def _dump(data: dict, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def _load(path: str | Path) -> dict:
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


def save_layout(layout: SheetLayout, path: str | Path) -> None:
    """Serialize a SheetLayout to a YAML file."""
    _dump(layout.to_dict(), path)


def load_layout(path: str | Path) -> SheetLayout:
    """Deserialize a SheetLayout from a YAML file."""
    return SheetLayout.from_dict(_load(path))


def save_config(config: SourceConfig, path: str | Path) -> None:
    """Serialize a SourceConfig to a YAML file."""
    _dump(config.to_dict(), path)


def load_config(path: str | Path) -> SourceConfig:
    """Deserialize a SourceConfig from a YAML file."""
    return SourceConfig.from_dict(_load(path))
