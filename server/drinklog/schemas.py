"""
Pydantic schemas for the drink log API.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel


class SaveRequest(BaseModel):
    date: Optional[str] = None
    data: Optional[Any] = None


class ImportRequest(BaseModel):
    data: Optional[Any] = None


class HealthResponse(BaseModel):
    status: Literal["healthy"]
    timestamp: str
    service: str


class LoadResponse(BaseModel):
    success: bool = True
    timestamp: str
    data: dict


class SaveResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str
    date: str


class ImportResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str
    imported: int


class BeverageTotals(BaseModel):
    baijiu: float
    beer: float
    red: float
    qingdao: float
    totalBeer: float


class MemberTotals(BeverageTotals):
    days: int


class StatsPayload(BaseModel):
    totalDays: int
    lastUpdated: Optional[str] = None
    memberStats: dict[str, MemberTotals]
    wineStats: BeverageTotals


class StatsResponse(BaseModel):
    success: bool = True
    timestamp: str
    stats: StatsPayload
