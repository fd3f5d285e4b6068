# -*- coding: utf-8 -*-
"""Profiles — Pydantic models."""

from __future__ import annotations

from datetime import date as calendar_date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class LocalizedText(BaseModel):
    bn: str = ""
    en: str = ""

    @model_validator(mode="before")
    @classmethod
    def _coerce_plain_text(cls, value: Any) -> Any:
        """Models sometimes answer with a bare string instead of {bn, en}."""
        if isinstance(value, str):
            return {"bn": value, "en": value}
        return value


class MealPlan(BaseModel):
    breakfast: LocalizedText
    lunch: LocalizedText
    dinner: LocalizedText
    snacks: LocalizedText


class FoodSuggestions(BaseModel):
    recommended_foods: List[LocalizedText] = Field(default_factory=list)
    budget_friendly_foods: List[LocalizedText] = Field(default_factory=list)
    foods_to_avoid: List[LocalizedText] = Field(default_factory=list)
    daily_meal_plan: MealPlan


class Exercise(BaseModel):
    name: LocalizedText
    duration_minutes: float = Field(0, ge=0)


class ExerciseSuggestion(BaseModel):
    summary: LocalizedText
    exercises: List[Exercise] = Field(default_factory=list)


class HealthTip(BaseModel):
    suggestion: str
    explanation: str
    context: Optional[str] = None


class LocalizedHealthTip(BaseModel):
    bn: HealthTip
    en: HealthTip


class CalorieLogItem(BaseModel):
    name: LocalizedText
    calories: float = Field(0.0, ge=0)


class CalorieLog(BaseModel):
    id: str
    food_text: str
    items: List[CalorieLogItem] = Field(default_factory=list)
    total_calories: float = Field(0.0, ge=0)
    date: str = Field(..., description="ISO8601 timestamp")


class HealthLog(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    water: float = Field(0, ge=0, description="ml")
    steps: int = Field(0, ge=0)
    workout_minutes: float = Field(0, ge=0)
    sleep_hours: float = Field(0, ge=0, le=24)


class ProfileFields(BaseModel):
    """Demographic/health inputs. Cached AI outputs are derived from these."""

    name: str = Field(..., min_length=1, max_length=200)
    age: int = Field(..., ge=0, le=150)
    height: float = Field(..., gt=0, description="cm")
    weight: float = Field(..., gt=0, description="kg")
    health_info: str = Field("", max_length=4000)
    disliked_foods: str = Field("", max_length=4000)


PROFILE_FIELD_NAMES = tuple(ProfileFields.model_fields.keys())
CACHED_AI_FIELDS = ("food_suggestions", "exercise_suggestion", "health_tip")


class UserProfile(ProfileFields):
    id: str
    calorie_logs: List[CalorieLog] = Field(default_factory=list)
    health_logs: List[HealthLog] = Field(default_factory=list)
    food_suggestions: Optional[FoodSuggestions] = None
    exercise_suggestion: Optional[ExerciseSuggestion] = None
    health_tip: Optional[LocalizedHealthTip] = None
    exercise_checklist: List[str] = Field(default_factory=list)
    last_exercise_check_date: str = ""

    def fields(self) -> ProfileFields:
        return ProfileFields.model_validate(self.model_dump(include=set(PROFILE_FIELD_NAMES)))

    def all_exercises_done(self) -> bool:
        suggestion = self.exercise_suggestion
        if suggestion is None or not suggestion.exercises:
            return False
        return all(ex.name.en in self.exercise_checklist for ex in suggestion.exercises)


class ProfileDataPatch(BaseModel):
    """Partial update of the data a profile owns.

    Only fields the caller set are applied, so `null` clears a cached value.
    Demographic fields are deliberately absent: they go through
    `ProfileStore.update_profile`, which invalidates cached AI outputs.
    """

    calorie_logs: Optional[List[CalorieLog]] = None
    health_logs: Optional[List[HealthLog]] = None
    food_suggestions: Optional[FoodSuggestions] = None
    exercise_suggestion: Optional[ExerciseSuggestion] = None
    health_tip: Optional[LocalizedHealthTip] = None
    exercise_checklist: Optional[List[str]] = None
    last_exercise_check_date: Optional[str] = None

    @field_validator("health_logs")
    @classmethod
    def _one_log_per_day(cls, logs: Optional[List[HealthLog]]) -> Optional[List[HealthLog]]:
        if not logs:
            return logs
        seen = set()
        for log in logs:
            try:
                calendar_date.fromisoformat(log.date)
            except ValueError:
                raise ValueError(f"health log date must be YYYY-MM-DD, got {log.date!r}") from None
            if len(log.date) != 10:
                raise ValueError(f"health log date must be YYYY-MM-DD, got {log.date!r}")
            if log.date in seen:
                raise ValueError(f"duplicate health log for {log.date}")
            seen.add(log.date)
        return logs

    def changes(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            # Lists are owned collections; never-null on the profile.
            if value is None and name in {"calorie_logs", "health_logs", "exercise_checklist"}:
                value = []
            if value is None and name == "last_exercise_check_date":
                value = ""
            out[name] = value
        return out


# ---- API payloads ----


class ProfilesResponse(BaseModel):
    profiles: List[UserProfile]
    active_profile_id: Optional[str] = None


class CalorieLogCreateRequest(BaseModel):
    food_text: str = Field(..., min_length=3, max_length=2000)
    date: Optional[str] = Field(None, description="YYYY-MM-DD or ISO8601; defaults to now")


class HealthLogUpsertRequest(BaseModel):
    water: float = Field(0, ge=0)
    steps: int = Field(0, ge=0)
    workout_minutes: float = Field(0, ge=0)
    sleep_hours: float = Field(0, ge=0, le=24)


class ExerciseCheckRequest(BaseModel):
    name: str = Field(..., min_length=1, description="English exercise name")
    done: bool = True


class ExerciseChecklistResponse(BaseModel):
    checklist: List[str]
    last_exercise_check_date: str = ""
    all_done: bool = False
