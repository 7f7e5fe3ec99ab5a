"""
Number normalization for monday.com column values.

Formula columns return display strings, usually in European notation
("1.234,56", "1 234,56"); numbers columns return a native value plus text.
The two sources have different missing-value policies:

- formula: "" / None / "No result" / unparseable -> None (row excluded)
- numbers: native value, else parsed text, else 0.0 (row kept)
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

# Characters used as thousands separators: dot, whitespace, NBSP, narrow NBSP
_THOUSANDS_RE = re.compile(r"[.\s\u00a0\u202f]")

NO_RESULT = "No result"


def parse_european_number(raw: Any) -> Optional[float]:
    """
    Parse a European-formatted number.

    Examples:
        "1.234.567,89" -> 1234567.89
        "123,45"       -> 123.45
        "1 234,5"      -> 1234.5
        ""             -> None
    """
    if raw is None:
        return None

    text = str(raw).strip()
    if not text or text == NO_RESULT:
        return None

    cleaned = _THOUSANDS_RE.sub("", text).replace(",", ".", 1)

    try:
        value = float(cleaned)
    except ValueError:
        return None

    return value if math.isfinite(value) else None


def parse_formula_value(display_value: Optional[str]) -> Optional[float]:
    """Formula path: missing or unparseable means no value."""
    return parse_european_number(display_value)


def parse_numbers_value(number: Any, text: Optional[str] = None) -> float:
    """
    Numbers path: prefer the native value, fall back to text, default 0.0.
    """
    if number is not None and number != "":
        try:
            return float(number)
        except (TypeError, ValueError):
            pass

    parsed = parse_european_number(text)
    return parsed if parsed is not None else 0.0


def round_total(values: Iterable[float], places: int = 2) -> float:
    """
    Sum amounts and round half-up to the given decimal places.

    Each float contributes its shortest decimal representation, so
    [10.005, 20.00] sums to exactly 30.005 and rounds to 30.01.
    """
    total = sum((Decimal(repr(float(v))) for v in values), Decimal("0"))
    quantum = Decimal(1).scaleb(-places)
    return float(total.quantize(quantum, rounding=ROUND_HALF_UP))
