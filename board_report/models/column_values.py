"""
Pydantic models for monday.com column values.

A column value's shape depends on its column type. The details query
selects the `type` tag together with one inline fragment per kind; the tag
picks the model, and each model knows how to reduce itself to a plain value.
"""

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..utils.numbers import parse_numbers_value


class ColumnKind(str, Enum):
    """Column types with a dedicated decoder."""
    FORMULA = "formula"
    STATUS = "status"
    DATE = "date"
    NUMBERS = "numbers"
    DROPDOWN = "dropdown"


# =============================================================================
# MODELS
# =============================================================================

class BaseColumnValue(BaseModel):
    """Fields shared by every column value."""

    id: str
    text: Optional[str] = None

    def plain(self) -> Any:
        """Reduce to the value used downstream."""
        return self.text


class FormulaValue(BaseColumnValue):
    """Formula column; only the rendered display text is available."""

    type: Literal["formula"] = "formula"
    display_value: Optional[str] = None

    def plain(self) -> Optional[str]:
        return self.display_value


class StatusValue(BaseColumnValue):
    type: Literal["status", "color"] = "status"
    label: Optional[str] = None

    def plain(self) -> Optional[str]:
        return self.label


class DateValue(BaseColumnValue):
    type: Literal["date"] = "date"
    date: Optional[dt.date] = None

    @field_validator("date", mode="before")
    @classmethod
    def lenient_date(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return dt.date.fromisoformat(v.strip()[:10])
            except ValueError:
                return None
        return v

    def plain(self) -> Optional[dt.date]:
        return self.date


class NumbersValue(BaseColumnValue):
    """
    Numbers column.

    Reduces to a float: the native number, else the parsed text, else 0.0.
    """

    type: Literal["numbers"] = "numbers"
    number: Optional[float] = None

    @field_validator("number", mode="before")
    @classmethod
    def lenient_number(cls, v: Any) -> Any:
        if v is None:
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None

    def plain(self) -> float:
        return parse_numbers_value(self.number, self.text)


class DropdownOption(BaseModel):
    label: Optional[str] = None


class DropdownValue(BaseColumnValue):
    type: Literal["dropdown"] = "dropdown"
    values: list[DropdownOption] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def null_values_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def plain(self) -> list[str]:
        return [option.label for option in self.values if option.label]


class TextValue(BaseColumnValue):
    """Any other column type, read through its text field."""

    type: Optional[str] = None


ColumnValue = Union[
    FormulaValue, StatusValue, DateValue, NumbersValue, DropdownValue, TextValue
]

DECODERS: dict[str, type[BaseColumnValue]] = {
    ColumnKind.FORMULA.value: FormulaValue,
    ColumnKind.STATUS.value: StatusValue,
    "color": StatusValue,  # pre-2023 name of the status type
    ColumnKind.DATE.value: DateValue,
    ColumnKind.NUMBERS.value: NumbersValue,
    ColumnKind.DROPDOWN.value: DropdownValue,
}


def decode_column_value(raw: dict) -> ColumnValue:
    """Pick the model from the raw value's type tag and validate it."""
    model = DECODERS.get(str(raw.get("type") or ""), TextValue)
    return model.model_validate(raw)


# =============================================================================
# ITEM RECORDS
# =============================================================================

@dataclass
class ItemRecord:
    """One hydrated item (or flattened sub-item) with plain column values."""
    id: str
    name: str
    values: dict[str, Any] = field(default_factory=dict)
    parent_id: Optional[str] = None

    @property
    def is_subitem(self) -> bool:
        return self.parent_id is not None


def decode_item(raw: dict, parent_id: Optional[str] = None) -> ItemRecord:
    """Decode a raw API item into an ItemRecord, dropping the type tags."""
    values = {}
    for raw_value in raw.get("column_values") or []:
        column_value = decode_column_value(raw_value)
        values[column_value.id] = column_value.plain()

    return ItemRecord(
        id=str(raw["id"]),
        name=raw.get("name") or "",
        values=values,
        parent_id=parent_id,
    )


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
]
