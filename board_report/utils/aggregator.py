"""
Classification and aggregation of hydrated items.

Each record is bucketed by the label of the type column (exact,
case-sensitive match against the accepted labels, anything else is
"Other"), turned into a Row and totaled per bucket.
"""

import datetime as dt
import logging
from typing import Any, Iterable, Optional, Sequence

from ..models.column_values import ItemRecord
from ..models.report import OTHER_TYPE, Report, ReportMeta, Row
from .config import ColumnAliases
from .numbers import parse_formula_value, round_total

logger = logging.getLogger(__name__)

DEFAULT_ACCEPTED_TYPES = ("B2C", "B2B")


# =============================================================================
# VALUE COERCION
# =============================================================================

def classify(label: Any, accepted_types: Sequence[str] = DEFAULT_ACCEPTED_TYPES) -> str:
    """Return the bucket for a type label."""
    if isinstance(label, str) and label in accepted_types:
        return label
    return OTHER_TYPE


def to_amount(value: Any) -> Optional[float]:
    """
    Coerce a plain column value to an amount.

    Numbers columns arrive as floats (already defaulted to 0.0); formula
    columns arrive as display text and may mean "no value".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return parse_formula_value(str(value))


def to_text(value: Any) -> Optional[str]:
    """Coerce a plain column value to display text."""
    if value is None:
        return None
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or None
    if isinstance(value, dt.date):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def to_date(value: Any) -> Optional[dt.date]:
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return dt.date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


# =============================================================================
# ROWS
# =============================================================================

def build_row(
    record: ItemRecord,
    columns: ColumnAliases,
    accepted_types: Sequence[str] = DEFAULT_ACCEPTED_TYPES,
) -> Optional[Row]:
    """
    Build the output row for one record.

    Returns:
        The Row, or None when the amount column holds no value
    """
    values = record.values
    sum_eur = to_amount(values.get(columns.sum_eur))
    if sum_eur is None:
        return None

    fields: dict[str, Any] = {
        "id": record.id,
        "name": record.name,
        "type": classify(values.get(columns.type), accepted_types),
        "installation_date": (
            to_date(values.get(columns.installation_date))
            if columns.installation_date else None
        ),
        "sum_eur": sum_eur,
    }

    if columns.savikaina_eur:
        fields["savikaina_eur"] = to_amount(values.get(columns.savikaina_eur))
    if columns.profit_pct:
        fields["profit_pct"] = to_amount(values.get(columns.profit_pct))
    if columns.household_type:
        fields["household_type"] = to_text(values.get(columns.household_type))
    if columns.installer:
        fields["installer"] = to_text(values.get(columns.installer))
    if columns.sale_type:
        fields["sale_type"] = to_text(values.get(columns.sale_type))

    return Row(**fields)


def bucket_report(bucket_type: str, rows: list[Row]) -> Report:
    """Wrap a bucket's rows with its totals."""
    return Report(
        meta=ReportMeta(
            type=bucket_type,
            total_items=len(rows),
            total_sum_eur=round_total(row.sum_eur for row in rows),
        ),
        items=rows,
    )


def aggregate(
    records: Iterable[ItemRecord],
    columns: ColumnAliases,
    accepted_types: Sequence[str] = DEFAULT_ACCEPTED_TYPES,
) -> dict[str, Report]:
    """
    Classify records into buckets and total each bucket.

    Every accepted type and "Other" get a report, even when empty.
    Rows keep discovery order within their bucket.
    """
    buckets: dict[str, list[Row]] = {t: [] for t in accepted_types}
    buckets.setdefault(OTHER_TYPE, [])

    skipped = 0
    for record in records:
        row = build_row(record, columns, accepted_types)
        if row is None:
            skipped += 1
            continue
        buckets[row.type].append(row)

    if skipped:
        logger.info(f"Excluded {skipped} item(s) without a value in {columns.sum_eur}")

    return {bucket_type: bucket_report(bucket_type, rows) for bucket_type, rows in buckets.items()}
