"""
Export functionality for board reports.

Flattens a report into a pandas DataFrame (one line per row) and renders
CSV or JSON.
"""

import io
import json
from typing import Optional

import pandas as pd

from ..models.report import ReportResponse

BASE_COLUMNS = ["id", "name", "type", "installation_date", "sum_eur"]


def report_to_dataframe(response: ReportResponse) -> pd.DataFrame:
    """
    Convert all buckets of a report to a DataFrame.

    Columns are the base row fields followed by any optional fields present.
    """
    rows = []
    for report in response.reports.values():
        rows.extend(report.to_dict()["items"])

    if not rows:
        return pd.DataFrame(columns=BASE_COLUMNS)

    df = pd.DataFrame(rows)
    extra = [col for col in df.columns if col not in BASE_COLUMNS]
    return df.reindex(columns=BASE_COLUMNS + extra)


def summary_dataframe(response: ReportResponse) -> pd.DataFrame:
    """One line per bucket with its totals."""
    return pd.DataFrame(
        [report.meta.model_dump() for report in response.reports.values()],
        columns=["type", "total_items", "total_sum_eur"],
    )


def export_to_csv(df: pd.DataFrame) -> bytes:
    """
    Export DataFrame to CSV format.

    Returns:
        CSV data as bytes (empty for an empty frame)
    """
    if df is None or df.empty:
        return b""

    csv_buffer = io.StringIO()
    df.to_csv(csv_buffer, index=False, encoding="utf-8")
    return csv_buffer.getvalue().encode("utf-8")


def export_to_json(response: ReportResponse, indent: Optional[int] = 2) -> str:
    """Render the endpoint payload as JSON text."""
    return json.dumps(response.to_payload(), indent=indent, ensure_ascii=False)
