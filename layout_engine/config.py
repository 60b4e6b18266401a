"""
Layout Engine - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the layout engine.

- Width to packing-unit table and row capacity
- Drop indicator threshold
- Local preference storage backend

Values can come from defaults, environment variables
(LAYOUT_*, .env supported) or a YAML file.

============================================================
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from core.exceptions import ConfigurationError, LayoutValidationError
from .types import WidgetWidth


# ============================================================
# LAYOUT CONFIGURATION
# ============================================================

DEFAULT_WIDTH_UNITS: Dict[WidgetWidth, float] = {
    WidgetWidth.ONE_THIRD: 1.0,
    WidgetWidth.ONE_HALF: 1.5,
    WidgetWidth.FULL: 3.0,
}

DEFAULT_ROW_CAPACITY = 3.0


@dataclass
class LayoutConfig:
    """
    Grid packing configuration.
    """

    width_units: Dict[WidgetWidth, float] = field(default_factory=lambda: dict(DEFAULT_WIDTH_UNITS))
    """Packing units consumed by each width."""

    row_capacity: float = DEFAULT_ROW_CAPACITY
    """Units available per grid row."""

    def validate(self) -> None:
        missing = [w.value for w in WidgetWidth if w not in self.width_units]
        if missing:
            raise ConfigurationError(
                f"width_units is missing widths: {', '.join(missing)}",
                config_key="width_units",
            )
        for width, units in self.width_units.items():
            if units <= 0:
                raise ConfigurationError(
                    f"width_units[{width.value}] must be positive",
                    config_key="width_units",
                    actual_value=units,
                )
        if self.row_capacity <= 0:
            raise ConfigurationError(
                "row_capacity must be positive",
                config_key="row_capacity",
                actual_value=self.row_capacity,
            )


# ============================================================
# DRAG CONFIGURATION
# ============================================================

@dataclass
class DragConfig:
    """
    Drag gesture configuration.
    """

    drop_threshold_ratio: float = 0.4
    """Fraction of the hovered item's width that counts as before / after."""

    def validate(self) -> None:
        if not 0 < self.drop_threshold_ratio <= 0.5:
            raise ConfigurationError(
                "drop_threshold_ratio must be in (0, 0.5]",
                config_key="drop_threshold_ratio",
                actual_value=self.drop_threshold_ratio,
            )


# ============================================================
# PERSISTENCE CONFIGURATION
# ============================================================

STORAGE_BACKENDS = ("memory", "file", "disabled")


@dataclass
class PersistenceConfig:
    """
    Local preference storage configuration.
    """

    backend: str = "memory"
    """One of memory, file, disabled."""

    directory: str = ".layout_prefs"
    """Directory used by the file backend."""

    holdings_columns_key: str = "holdings-table-columns"
    """Storage key for holdings table column preferences."""

    dashboard_widgets_key: str = "dashboard-widgets"
    """Storage key for dashboard widget order and widths."""

    def validate(self) -> None:
        if self.backend not in STORAGE_BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend: {self.backend}",
                config_key="backend",
                actual_value=self.backend,
            )


# ============================================================
# MASTER CONFIGURATION
# ============================================================

@dataclass
class LayoutEngineConfig:
    """
    Master configuration for the layout engine.
    """

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    """Grid packing configuration."""

    drag: DragConfig = field(default_factory=DragConfig)
    """Drag gesture configuration."""

    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    """Preference storage configuration."""

    log_level: str = "INFO"
    """Root log level."""

    log_format: str = "text"
    """text or json."""

    def validate(self) -> "LayoutEngineConfig":
        self.layout.validate()
        self.drag.validate()
        self.persistence.validate()
        return self

    @classmethod
    def for_testing(cls) -> "LayoutEngineConfig":
        """Get configuration for testing."""
        return cls(
            persistence=PersistenceConfig(backend="memory"),
            log_level="DEBUG",
        )

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "LayoutEngineConfig":
        """
        Load configuration from LAYOUT_* environment variables.

        Unset variables keep their defaults.
        """
        if dotenv:
            load_dotenv()

        config = cls()

        capacity = os.getenv("LAYOUT_ROW_CAPACITY")
        if capacity:
            config.layout.row_capacity = _to_float("LAYOUT_ROW_CAPACITY", capacity)

        threshold = os.getenv("LAYOUT_DROP_THRESHOLD")
        if threshold:
            config.drag.drop_threshold_ratio = _to_float("LAYOUT_DROP_THRESHOLD", threshold)

        config.persistence.backend = os.getenv("LAYOUT_STORAGE_BACKEND", config.persistence.backend)
        config.persistence.directory = os.getenv("LAYOUT_STORAGE_DIR", config.persistence.directory)
        config.log_level = os.getenv("LOG_LEVEL", config.log_level)
        config.log_format = os.getenv("LOG_FORMAT", config.log_format)

        return config.validate()

    @classmethod
    def from_yaml(cls, path: Path) -> "LayoutEngineConfig":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        config = cls()

        # Load layout config
        if "layout" in data:
            lc = data["layout"] or {}
            if "width_units" in lc:
                config.layout.width_units = _parse_width_units(lc["width_units"])
            if "row_capacity" in lc:
                config.layout.row_capacity = _to_float("layout.row_capacity", lc["row_capacity"])

        # Load drag config
        if "drag" in data:
            dc = data["drag"] or {}
            if "drop_threshold_ratio" in dc:
                config.drag.drop_threshold_ratio = _to_float(
                    "drag.drop_threshold_ratio", dc["drop_threshold_ratio"]
                )

        # Load persistence config
        if "persistence" in data:
            pc = data["persistence"] or {}
            config.persistence = PersistenceConfig(
                backend=pc.get("backend", "memory"),
                directory=pc.get("directory", ".layout_prefs"),
                holdings_columns_key=pc.get("holdings_columns_key", "holdings-table-columns"),
                dashboard_widgets_key=pc.get("dashboard_widgets_key", "dashboard-widgets"),
            )

        # Load logging
        if "logging" in data:
            lg = data["logging"] or {}
            config.log_level = lg.get("level", config.log_level)
            config.log_format = lg.get("format", config.log_format)

        return config.validate()


def _to_float(key: str, raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key} must be a number", config_key=key, actual_value=raw, cause=e)


def _parse_width_units(raw: Any) -> Dict[WidgetWidth, float]:
    if not isinstance(raw, dict):
        raise ConfigurationError("width_units must be a mapping", config_key="width_units", actual_value=raw)
    units: Dict[WidgetWidth, float] = {}
    for key, value in raw.items():
        try:
            units[WidgetWidth.parse(str(key))] = float(value)
        except (LayoutValidationError, TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid width_units entry {key}: {value}",
                config_key="width_units",
                cause=e,
            )
    return units


_config: Optional[LayoutEngineConfig] = None


def get_config() -> LayoutEngineConfig:
    """Process-wide configuration, loaded from the environment on first use."""
    global _config
    if _config is None:
        _config = LayoutEngineConfig.from_env()
    return _config
