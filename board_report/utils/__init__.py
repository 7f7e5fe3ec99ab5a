"""Utility modules for configuration, number parsing and aggregation."""

from .config import (
    DEFAULT_BOARD_CONFIG,
    BoardConfig,
    ColumnAliases,
    ConfigurationError,
    Settings,
    get_monday_api_key,
    get_settings,
)
from .numbers import (
    parse_european_number,
    parse_formula_value,
    parse_numbers_value,
    round_total,
)
from .aggregator import aggregate, build_row, classify
from .export import export_to_csv, export_to_json, report_to_dataframe, summary_dataframe

__all__ = [
    # Config
    "DEFAULT_BOARD_CONFIG",
    "BoardConfig",
    "ColumnAliases",
    "ConfigurationError",
    "Settings",
    "get_monday_api_key",
    "get_settings",
    # Number parsing
    "parse_european_number",
    "parse_formula_value",
    "parse_numbers_value",
    "round_total",
    # Aggregation
    "aggregate",
    "build_row",
    "classify",
    # Export
    "export_to_csv",
    "export_to_json",
    "report_to_dataframe",
    "summary_dataframe",
]
