import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

import polars as pl


def clean_text(df: pl.DataFrame, col_name: str) -> pl.DataFrame:
    return df.with_columns(
        pl.col(col_name)
        # 1. Manual replacements (escaped quotes & newlines)
        .str.replace_all(r'\\"', '"')
        .str.replace_all(r"[\n\r]+", " ")
        # 2. Squash repeated whitespace and trim
        .str.replace_all(r"\s+", " ")
        .str.strip_chars()
    )


def clean_text_string(text: str) -> str:
    """
    Applies text cleaning operations to a single string.
    Matches the logic of the `clean_text` DataFrame function.
    """
    if not isinstance(text, str):
        return text

    text = text.replace('\\"', '"')
    text = re.sub(r"[\n\r]+", " ", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def first_present(record: Any, fields: Iterable[str]) -> str | None:
    """
    Resolves an entity name from an ordered chain of candidate fields.

    Args:
        record: A Track model or any mapping with the same keys.
        fields: Candidate field names, highest priority first.

    Returns:
        The first non-empty value, or None if every candidate is empty.
    """
    for field in fields:
        if isinstance(record, Mapping):
            value = record.get(field)
        else:
            value = getattr(record, field, None)
        if value:
            return value
    return None


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer, ties toward positive infinity."""
    return math.floor(value + 0.5)


def round_fixed(value: float, places: int) -> float:
    """
    Rounds to a fixed number of decimal places using the exact binary value
    of the input, so 0.0625 becomes 0.063 rather than 0.062.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def safe_mean(total: float, count: int) -> float:
    """Mean of an accumulated total, 0 for an empty population."""
    if not count:
        return 0
    return total / count
