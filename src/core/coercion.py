"""Field coercion for loosely-typed spreadsheet and scraped values.

Every "maybe numeric, maybe dirty" cell in the system goes through
``to_number``. It never raises: anything it cannot read becomes ``None``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

# Longest tokens first so "us$" wins over "$"
CURRENCY_TOKENS: tuple[str, ...] = ("us$", "c$", "cad", "usd", "cdn", "$")

DEFAULT_UNIT_TOKENS: tuple[str, ...] = (
    r"square\s*feet",
    r"sq\.?\s*f(?:ee)?t?\.?",
    r"ft²",
)

_CURRENCY_RE = re.compile("|".join(re.escape(t) for t in CURRENCY_TOKENS))
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?(?:e[+-]?\d+)?")


def _unit_pattern(units: Iterable[str]) -> re.Pattern[str] | None:
    units = tuple(units)
    if not units:
        return None
    return re.compile("|".join(units))


_DEFAULT_UNIT_RE = _unit_pattern(DEFAULT_UNIT_TOKENS)


def to_number(value: Any, units: Iterable[str] | None = None) -> float | None:
    """Parse a loosely formatted value into a float.

    Handles currency prefixes ("$450,000", "C$ 1.2", "450000 CAD"), thousands
    separators, percent signs and trailing unit text ("1,234 sqft").

    Args:
        value: Raw cell value (None, number or string).
        units: Regex fragments of unit text to strip before parsing.
            Defaults to square-feet variants.

    Returns:
        The first signed decimal found, or None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = str(value).strip().lower()
    if not text or not any(ch.isdigit() for ch in text):
        return None

    unit_re = _DEFAULT_UNIT_RE if units is None else _unit_pattern(units)
    if unit_re is not None:
        text = unit_re.sub("", text)
    text = _CURRENCY_RE.sub("", text).replace(",", "").replace("%", "")

    match = _NUMBER_RE.search(text)
    if not match:
        return None
    try:
        number = float(match.group(0))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def to_text(value: Any) -> str:
    """Trimmed string form of a cell, "" for None/NaN."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def is_blank(value: Any) -> bool:
    return to_text(value) == ""


def pick_first(row: Mapping[str, Any], aliases: Iterable[str]) -> Any:
    """Return the first non-blank value among ``aliases`` in ``row``."""
    for alias in aliases:
        if alias in row and not is_blank(row[alias]):
            return row[alias]
    return None


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half away from zero (``round`` in Python rounds half to even)."""
    factor = 10 ** ndigits
    return math.copysign(math.floor(abs(value) * factor + 0.5) / factor, value)
