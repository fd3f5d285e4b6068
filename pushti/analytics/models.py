# -*- coding: utf-8 -*-
"""Analytics — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..profiles.models import HealthLog


class ViewMode(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class ChartPoint(BaseModel):
    label: str
    start: str = Field(..., description="First day of the bucket, YYYY-MM-DD")
    calories: float = 0.0
    steps: int = 0
    water: float = 0.0
    workout: float = 0.0
    sleep: float = 0.0


class ChartResponse(BaseModel):
    profile_id: str
    mode: ViewMode
    anchor: str
    start: str
    end: str
    points: List[ChartPoint]


class CalorieTrend(BaseModel):
    today_calories: float = 0.0
    yesterday_calories: float = 0.0
    trend_percentage: float = 0.0


class BmiSummary(BaseModel):
    bmi: Optional[float] = None
    status: Optional[str] = Field(None, description="underweight|normal|overweight|obese")
    needs_to_lose_weight: bool = False


class DashboardResponse(BaseModel):
    profile_id: str
    today: str
    calories: CalorieTrend
    recent_health_log: Optional[HealthLog] = None
    bmi: BmiSummary
