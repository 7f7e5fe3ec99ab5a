"""
monday.com board report.

Collects every item in the configured board groups, hydrates their columns
in batches, buckets them by business type (B2C / B2B / Other) and returns
totals plus raw rows.
"""

__version__ = "0.1.0"

# Expose key classes at package level for convenience
from .pipeline import (
    MondayBoardAggregator,
    build_report,
    build_report_sync,
    get_aggregator,
)
from .clients.monday import MondayClient, MondayError
from .models.report import Report, ReportResponse, Row
from .utils.config import DEFAULT_BOARD_CONFIG, BoardConfig, ColumnAliases, Settings

__all__ = [
    # Pipeline
    "MondayBoardAggregator",
    "build_report",
    "build_report_sync",
    "get_aggregator",
    # Monday.com
    "MondayClient",
    "MondayError",
    # Models
    "Report",
    "ReportResponse",
    "Row",
    # Configuration
    "DEFAULT_BOARD_CONFIG",
    "BoardConfig",
    "ColumnAliases",
    "Settings",
]
