"""Pydantic models for column values and report payloads."""

from .column_values import (
    ColumnKind,
    ColumnValue,
    DateValue,
    DropdownValue,
    FormulaValue,
    ItemRecord,
    NumbersValue,
    StatusValue,
    TextValue,
    decode_column_value,
    decode_item,
)
from .report import OTHER_TYPE, ErrorResponse, Report, ReportMeta, ReportResponse, Row

__all__ = [
    "ColumnKind",
    "ColumnValue",
    "DateValue",
    "DropdownValue",
    "FormulaValue",
    "ItemRecord",
    "NumbersValue",
    "StatusValue",
    "TextValue",
    "decode_column_value",
    "decode_item",
    "OTHER_TYPE",
    "ErrorResponse",
    "Report",
    "ReportMeta",
    "ReportResponse",
    "Row",
]
