"""
Summary statistics over a drink log document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from drinklog.records import BEVERAGES, Document, MemberEntry, clamp_finite


@dataclass
class BeverageTotals:
    baijiu: float = 0.0
    beer: float = 0.0
    red: float = 0.0
    qingdao: float = 0.0
    totalBeer: float = 0.0

    def add(self, entry: MemberEntry) -> None:
        for name in BEVERAGES:
            setattr(self, name, clamp_finite(getattr(self, name) + getattr(entry, name)))
        self.totalBeer = clamp_finite(self.totalBeer + entry.beer_equivalent)

    def as_dict(self) -> dict:
        return {
            "baijiu": self.baijiu,
            "beer": self.beer,
            "red": self.red,
            "qingdao": self.qingdao,
            "totalBeer": self.totalBeer,
        }


@dataclass
class MemberTotals(BeverageTotals):
    dates: set[str] = field(default_factory=set)

    def as_dict(self) -> dict:
        payload = super().as_dict()
        payload["days"] = len(self.dates)
        return payload


@dataclass
class DerivedStats:
    totalDays: int = 0
    lastUpdated: Optional[str] = None
    memberStats: Dict[str, MemberTotals] = field(default_factory=dict)
    wineStats: BeverageTotals = field(default_factory=BeverageTotals)

    def as_dict(self) -> dict:
        return {
            "totalDays": self.totalDays,
            "lastUpdated": self.lastUpdated,
            "memberStats": {
                member: totals.as_dict() for member, totals in self.memberStats.items()
            },
            "wineStats": self.wineStats.as_dict(),
        }


def summarize(doc: Document) -> DerivedStats:
    """
    Accumulate per-member and overall totals for every entry in the document.

    Quantities are coerced through MemberEntry, so missing or non-numeric
    fields count as zero. lastUpdated is the greatest date key.
    """
    stats = DerivedStats(totalDays=len(doc))
    for date in sorted(doc):
        day = doc[date]
        if not isinstance(day, dict):
            continue
        for member, raw in day.items():
            entry = MemberEntry.from_raw(raw)
            totals = stats.memberStats.setdefault(member, MemberTotals())
            totals.add(entry)
            totals.dates.add(date)
            stats.wineStats.add(entry)
    if doc:
        stats.lastUpdated = max(doc)
    return stats
