"""Tests for classification and per-bucket totals."""

import datetime as dt

import pytest

from board_report.models.column_values import ItemRecord
from board_report.utils.aggregator import aggregate, build_row, classify, to_amount, to_text
from board_report.utils.config import ColumnAliases

from .conftest import DATE_COL, EUR_COL, TYPE_COL


def record(item_id, label, amount, when=None, **extra):
    values = {TYPE_COL: label, EUR_COL: amount, DATE_COL: when}
    values.update(extra)
    return ItemRecord(id=item_id, name=f"Item {item_id}", values=values)


def test_classify_exact_labels():
    assert classify("B2C") == "B2C"
    assert classify("B2B") == "B2B"


@pytest.mark.parametrize("label", ["b2c", "B2C ", "Private", "", None, ["B2C"]])
def test_classify_unknown_labels_as_other(label):
    assert classify(label) == "Other"


def test_classify_custom_accepted_types():
    assert classify("Retail", accepted_types=("Retail",)) == "Retail"
    assert classify("B2C", accepted_types=("Retail",)) == "Other"


def test_to_amount_policies():
    assert to_amount(0.0) == 0.0
    assert to_amount(15) == 15.0
    assert to_amount("1.234,50") == 1234.5
    assert to_amount("No result") is None
    assert to_amount("") is None
    assert to_amount(None) is None


def test_to_text_joins_lists():
    assert to_text(["Flat", "House"]) == "Flat, House"
    assert to_text([]) is None
    assert to_text(" Jonas ") == "Jonas"
    assert to_text(dt.date(2024, 1, 2)) == "2024-01-02"


def test_formula_without_value_excludes_row(columns):
    assert build_row(record("1", "B2C", "No result"), columns) is None
    assert build_row(record("2", "B2C", ""), columns) is None
    assert build_row(record("3", "B2C", None), columns) is None


def test_numbers_zero_keeps_row(columns):
    row = build_row(record("1", "B2B", 0.0), columns)
    assert row is not None
    assert row.sum_eur == 0.0


def test_row_fields(columns):
    row = build_row(record("1", "B2C", "1.234,56", dt.date(2024, 6, 1)), columns)

    assert row.id == "1"
    assert row.name == "Item 1"
    assert row.type == "B2C"
    assert row.installation_date == dt.date(2024, 6, 1)
    assert row.sum_eur == 1234.56


def test_optional_fields_only_when_configured(columns):
    row = build_row(record("1", "B2C", "10,00"), columns)
    assert "savikaina_eur" not in row.model_dump(exclude_unset=True)

    rich = ColumnAliases(
        type=TYPE_COL,
        sum_eur=EUR_COL,
        savikaina_eur="cost",
        profit_pct="profit",
        household_type="household",
        installer="installer",
        sale_type="sale",
    )
    row = build_row(
        record(
            "1", "B2C", "10,00",
            cost="6,50", profit=35.0, household=["House"], installer="Jonas", sale="No result",
        ),
        rich,
    )

    dumped = row.model_dump(exclude_unset=True)
    assert dumped["savikaina_eur"] == 6.5
    assert dumped["profit_pct"] == 35.0
    assert dumped["household_type"] == "House"
    assert dumped["installer"] == "Jonas"
    assert dumped["sale_type"] == "No result"
    assert "installation_date" in dumped


def test_aggregate_buckets_and_totals(columns):
    records = [
        record("1", "B2C", "10,005"),
        record("2", "B2C", "20,00"),
        record("3", "B2B", "1.000,00"),
        record("4", "Private", "5,00"),
        record("5", "B2B", "No result"),
    ]

    reports = aggregate(records, columns)

    assert list(reports) == ["B2C", "B2B", "Other"]
    assert reports["B2C"].meta.total_items == 2
    assert reports["B2C"].meta.total_sum_eur == 30.01
    assert reports["B2B"].meta.total_items == 1
    assert reports["B2B"].meta.total_sum_eur == 1000.0
    assert [r.id for r in reports["Other"].items] == ["4"]


def test_unknown_label_is_never_lost(columns):
    reports = aggregate([record("9", None, 12.0)], columns)
    assert reports["Other"].meta.total_items == 1
    assert reports["Other"].items[0].type == "Other"


def test_empty_buckets_are_reported(columns):
    reports = aggregate([], columns)
    for bucket_type in ("B2C", "B2B", "Other"):
        assert reports[bucket_type].meta.total_items == 0
        assert reports[bucket_type].meta.total_sum_eur == 0.0


def test_aggregation_is_idempotent(columns):
    records = [
        record("1", "B2C", "1,10"),
        record("2", "B2B", 3.3),
        record("3", "x", "2,20"),
    ]

    first = aggregate(records, columns)
    second = aggregate(records, columns)

    assert {k: v.model_dump() for k, v in first.items()} == {
        k: v.model_dump() for k, v in second.items()
    }


def test_discovery_order_within_bucket(columns):
    records = [record(str(i), "B2C", f"{i},00") for i in (3, 1, 2)]
    assert [r.id for r in aggregate(records, columns)["B2C"].items] == ["3", "1", "2"]
