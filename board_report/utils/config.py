"""
Configuration management for the board report service.

Secrets and tuning knobs come from environment variables (and a project
.env) via Pydantic settings. Board, group and column ids are deploy-time
constants grouped in a BoardConfig that is passed explicitly to the
pipeline.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory (parent of board_report/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class ConfigurationError(Exception):
    """Raised when a required secret or setting is missing."""


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # API Keys
    monday_api_key: Optional[str] = Field(
        default=None,
        alias="MONDAY_API_KEY",
        description="monday.com API token used for every upstream call",
    )
    client_secret: Optional[str] = Field(
        default=None,
        alias="CLIENT_SECRET",
        description="Shared secret callers send as Bearer token or x-api-key",
    )

    # monday.com API
    monday_api_url: str = Field(
        default="https://api.monday.com/v2",
        alias="MONDAY_API_URL",
    )
    monday_api_version: str = Field(
        default="2024-10",
        alias="MONDAY_API_VERSION",
    )
    monday_timeout: float = Field(
        default=30.0,
        gt=0,
        alias="MONDAY_TIMEOUT",
        description="Timeout in seconds for a single GraphQL request",
    )
    monday_max_retries: int = Field(
        default=10,
        ge=0,
        le=100,
        alias="MONDAY_MAX_RETRIES",
        description="Retries allowed per request while rate limited",
    )
    monday_max_concurrent: int = Field(
        default=4,
        ge=1,
        le=8,
        alias="MONDAY_MAX_CONCURRENT",
        description="Hydration batches in flight at once",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


def get_settings() -> Settings:
    """Get application settings (fresh instance each time)."""
    return Settings()


def get_monday_api_key(settings: Settings) -> str:
    """
    Retrieve the monday.com API key.

    Raises:
        ConfigurationError: If the key is not configured
    """
    key = settings.monday_api_key
    if not key:
        raise ConfigurationError("MONDAY_API_KEY missing")
    return key


# =============================================================================
# BOARD CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class ColumnAliases:
    """Column ids on the board, keyed by the report field they feed."""
    type: str
    sum_eur: str
    installation_date: Optional[str] = None
    savikaina_eur: Optional[str] = None
    profit_pct: Optional[str] = None
    household_type: Optional[str] = None
    installer: Optional[str] = None
    sale_type: Optional[str] = None

    def column_ids(self) -> list[str]:
        """All configured column ids, without duplicates, in field order."""
        ids = [
            self.type,
            self.sum_eur,
            self.installation_date,
            self.savikaina_eur,
            self.profit_pct,
            self.household_type,
            self.installer,
            self.sale_type,
        ]
        return list(dict.fromkeys(i for i in ids if i))


@dataclass(frozen=True)
class BoardConfig:
    """Everything needed to build one report for one board."""
    board_id: int
    columns: ColumnAliases
    group_ids: tuple[str, ...] = ()
    accepted_types: tuple[str, ...] = ("B2C", "B2B")
    include_subitems: bool = False
    page_limit: int = 500
    batch_size: int = 100
    column_rules: tuple[tuple[str, tuple[str, ...]], ...] = ()


DEFAULT_BOARD_CONFIG = BoardConfig(
    board_id=1645436514,
    group_ids=("new_group50055", "new_group89286"),
    columns=ColumnAliases(
        type="status6",
        sum_eur="formula_mkmp4x00",
        installation_date="date8",
    ),
)
