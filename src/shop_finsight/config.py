# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Shop FinSight.

This module is responsible for:
- loading the application configuration from a TOML file,
- providing defaults when no configuration file exists,
- exposing typed dataclasses used by the rest of the application.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .currency import SUPPORTED_CURRENCIES
from .db import DatabaseConfig
from .engine import (
    DEFAULT_HIGH_VALUE_THRESHOLD,
    DEFAULT_INACTIVE_DAYS,
    DEFAULT_LOW_PERFORMANCE_THRESHOLD,
)
from .periods import NAMED_RANGES

DEFAULT_CONFIG_FILENAME = "shop_finsight_config.toml"
DEFAULT_DB_PATH = "data/db/shop_finsight.sqlite"
DISPLAY_MODES = ("table", "csv", "json", "both")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ReportsConfig:
    """
    Default parameters for report generation.

    When set, ``default_range`` overrides the default range of every report.
    When None, each report uses the default range of its catalog entry.
    """

    default_range: Optional[str]
    high_value_threshold: float
    inactive_days: int
    low_performance_threshold: float


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Shop FinSight.

    This aggregates:
    - the business name and currency,
    - the database configuration (where records are stored),
    - report defaults (date range and thresholds),
    - display options for tables and exports,
    - the logging level.
    """

    business_name: str
    currency: str
    database: DatabaseConfig
    reports: ReportsConfig
    display_mode: str
    decimals: int
    output_dir: Path
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _as_float(value: Any, key: str, path: Path) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{key}' in {path}. Expected a number."
        ) from exc
    if result < 0:
        raise ValueError(f"Invalid value for '{key}' in {path}. Must be >= 0.")
    return result


def _as_int(value: Any, key: str, path: Path) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid value for '{key}' in {path}. Expected an integer.")
    try:
        result = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{key}' in {path}. Expected an integer."
        ) from exc
    if result < 0:
        raise ValueError(f"Invalid value for '{key}' in {path}. Must be >= 0.")
    return result


def default_app_config(base_dir: Optional[Path] = None) -> AppConfig:
    """
    Return the configuration used when no TOML file is available.

    Relative paths (database file, output directory) are resolved against
    ``base_dir``, the current working directory by default.
    """
    if base_dir is None:
        base_dir = Path.cwd()

    return AppConfig(
        business_name="My Business",
        currency="USD",
        database=DatabaseConfig(
            engine="sqlite", path=(base_dir / DEFAULT_DB_PATH).resolve()
        ),
        reports=ReportsConfig(
            default_range=None,
            high_value_threshold=DEFAULT_HIGH_VALUE_THRESHOLD,
            inactive_days=DEFAULT_INACTIVE_DAYS,
            low_performance_threshold=DEFAULT_LOW_PERFORMANCE_THRESHOLD,
        ),
        display_mode="table",
        decimals=2,
        output_dir=(base_dir / "reports").resolve(),
        log_level="WARNING",
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Shop FinSight application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [business]
        Business name and currency (one of the supported currency codes).

    [database]
        Database engine and SQLite file path.

    [reports]
        Default date range (last7days, last30days, last90days, thisMonth,
        lastYear) and the thresholds used by the exception reports.

    [display]
        Output mode for reports (table, csv, json, both), number of decimals
        in tables and the export directory.

    [logging]
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    All sections are optional. All file paths in the TOML are resolved
    relative to the directory of the TOML file itself.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. When omitted,
        ``shop_finsight_config.toml`` in the working directory is used if it
        exists, otherwise ``default_app_config()`` is returned.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.

    Raises
    ------
    FileNotFoundError
        If an explicit ``config_path`` does not exist.
    ValueError
        If the file cannot be parsed or contains invalid values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILENAME).resolve()
        if not config_file.is_file():
            return default_app_config()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent
    defaults = default_app_config(base_dir)

    # 1) Business section
    business_section = _section(raw, "business")
    business_name = str(business_section.get("name") or defaults.business_name)
    currency = str(business_section.get("currency") or defaults.currency).upper()
    if currency not in SUPPORTED_CURRENCIES:
        allowed = ", ".join(SUPPORTED_CURRENCIES)
        raise ValueError(
            f"Unsupported currency {currency!r} in {config_file}. "
            f"Expected one of: {allowed}."
        )

    # 2) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or DEFAULT_DB_PATH
    database_config = DatabaseConfig(
        engine=db_engine, path=(base_dir / str(db_path_raw)).resolve()
    )

    # 3) Reports section
    reports_section = _section(raw, "reports")
    default_range = reports_section.get("default_range")
    if default_range is not None and default_range not in NAMED_RANGES:
        allowed = ", ".join(NAMED_RANGES)
        raise ValueError(
            f"Invalid value for 'reports.default_range' in {config_file}. "
            f"Expected one of: {allowed}."
        )

    reports = ReportsConfig(
        default_range=default_range,
        high_value_threshold=_as_float(
            reports_section.get(
                "high_value_threshold", defaults.reports.high_value_threshold
            ),
            "reports.high_value_threshold",
            config_file,
        ),
        inactive_days=_as_int(
            reports_section.get("inactive_days", defaults.reports.inactive_days),
            "reports.inactive_days",
            config_file,
        ),
        low_performance_threshold=_as_float(
            reports_section.get(
                "low_performance_threshold",
                defaults.reports.low_performance_threshold,
            ),
            "reports.low_performance_threshold",
            config_file,
        ),
    )

    # 4) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", defaults.display_mode))
    if display_mode not in DISPLAY_MODES:
        allowed = ", ".join(DISPLAY_MODES)
        raise ValueError(
            f"Invalid value for 'display.mode' in {config_file}. "
            f"Expected one of: {allowed}."
        )
    try:
        decimals = int(display_section.get("decimals", defaults.decimals))
    except (TypeError, ValueError):
        decimals = defaults.decimals
    output_dir_raw = display_section.get("output_dir") or "reports"
    output_dir = (base_dir / str(output_dir_raw)).resolve()

    # 5) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level") or defaults.log_level).upper()
    if log_level not in LOG_LEVELS:
        allowed = ", ".join(LOG_LEVELS)
        raise ValueError(
            f"Invalid value for 'logging.level' in {config_file}. "
            f"Expected one of: {allowed}."
        )

    return AppConfig(
        business_name=business_name,
        currency=currency,
        database=database_config,
        reports=reports,
        display_mode=display_mode,
        decimals=decimals,
        output_dir=output_dir,
        log_level=log_level,
    )
