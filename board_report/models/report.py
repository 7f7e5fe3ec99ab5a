"""
Pydantic models for the board report payload.

Shape returned by the endpoint:
    {fetched_at, b2c: Report, b2b: Report, other: Report}
where Report = {meta: {type, total_items, total_sum_eur}, items: [Row, ...]}
"""

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

OTHER_TYPE = "Other"


class Row(BaseModel):
    """
    One classified item.

    Optional fields are only serialized when their column is configured,
    so they are left unset (not None) when absent.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str
    installation_date: Optional[dt.date] = None
    sum_eur: float

    savikaina_eur: Optional[float] = None
    profit_pct: Optional[float] = None
    household_type: Optional[str] = None
    installer: Optional[str] = None
    sale_type: Optional[str] = None


class ReportMeta(BaseModel):
    type: str
    total_items: int = Field(ge=0)
    total_sum_eur: float


class Report(BaseModel):
    """Totals and rows for one business-type bucket."""

    meta: ReportMeta
    items: list[Row] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "meta": self.meta.model_dump(mode="json"),
            "items": [row.model_dump(mode="json", exclude_unset=True) for row in self.items],
        }


class ReportResponse(BaseModel):
    """All buckets of one run, keyed by bucket type."""

    fetched_at: dt.datetime
    reports: dict[str, Report]

    @staticmethod
    def key_for(bucket_type: str) -> str:
        """Payload key of a bucket: "B2C" -> "b2c", "Other" -> "other"."""
        return bucket_type.lower()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"fetched_at": self.fetched_at.isoformat()}
        for bucket_type, report in self.reports.items():
            payload[self.key_for(bucket_type)] = report.to_dict()
        return payload


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str
    details: Optional[Any] = None
