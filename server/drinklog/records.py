"""
Record shapes for the persisted drink log.

The stored document is loosely typed JSON: date -> member -> entry. Entries
are normalized into MemberEntry only when they are aggregated.
"""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from typing import Any, Dict

DayRecord = Dict[str, Any]
Document = Dict[str, DayRecord]

DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

BEVERAGES = ("baijiu", "beer", "red", "qingdao")

# Servings of each beverage expressed in beers.
BEER_EQUIVALENTS = {
    "baijiu": 3.0,
    "beer": 1.0,
    "red": 4.125,
    "qingdao": 0.775,
}

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def clamp_finite(value: float) -> float:
    """Keep sums and products of huge quantities representable in JSON."""
    if math.isnan(value):
        return 0.0
    return max(-sys.float_info.max, min(sys.float_info.max, value))


def is_date_key(value: Any) -> bool:
    return isinstance(value, str) and DATE_KEY_PATTERN.match(value) is not None


def coerce_quantity(value: Any) -> float:
    """
    Leniently turn a stored quantity into a number.

    Numbers pass through, strings contribute their leading decimal number
    ("2.5 bottles" -> 2.5) and anything else, including NaN and infinities,
    counts as zero.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return 0.0
        number = float(match.group(1))
    else:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


@dataclass(frozen=True)
class MemberEntry:
    baijiu: float = 0.0
    beer: float = 0.0
    red: float = 0.0
    qingdao: float = 0.0

    @classmethod
    def from_raw(cls, raw: Any) -> "MemberEntry":
        if not isinstance(raw, dict):
            return cls()
        return cls(**{name: coerce_quantity(raw.get(name)) for name in BEVERAGES})

    @property
    def beer_equivalent(self) -> float:
        total = 0.0
        for name in BEVERAGES:
            total = clamp_finite(total + getattr(self, name) * BEER_EQUIVALENTS[name])
        return total
