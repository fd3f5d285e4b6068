# -*- coding: utf-8 -*-
"""AI gateway — request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from ..profiles.models import CalorieLogItem, ExerciseSuggestion, LocalizedText


class CalorieEstimate(BaseModel):
    items: List[CalorieLogItem] = Field(default_factory=list)
    total_calories: Optional[float] = Field(None, ge=0)


class FoodCheckRequest(BaseModel):
    food_name: str = Field(..., min_length=1, max_length=200)


class FoodCheckResult(BaseModel):
    is_allowed: bool = Field(..., validation_alias=AliasChoices("is_allowed", "isAllowed", "allowed"))
    recommendation: LocalizedText
    reason: LocalizedText


class RecentHealthLog(BaseModel):
    water: float = 0
    steps: int = 0
    sleep_hours: float = 0


class ExercisePlanResponse(BaseModel):
    suggestion: ExerciseSuggestion
    checklist: List[str] = Field(default_factory=list)
    all_done: bool = False
    needs_to_lose_weight: bool = False
