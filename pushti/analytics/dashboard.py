# -*- coding: utf-8 -*-
"""Dashboard figures: calorie trend, recent health log and BMI."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from ..profiles.models import CalorieLog, HealthLog, UserProfile
from .aggregator import parse_log_day
from .models import BmiSummary, CalorieTrend, DashboardResponse


def _calories_on(logs: Iterable[CalorieLog], day: date) -> float:
    return sum(float(log.total_calories or 0.0) for log in logs if parse_log_day(log.date) == day)


def calorie_trend(calorie_logs: Iterable[CalorieLog], today: date) -> CalorieTrend:
    logs = list(calorie_logs)
    today_kcal = _calories_on(logs, today)
    yesterday_kcal = _calories_on(logs, today - timedelta(days=1))

    if yesterday_kcal > 0:
        trend = (today_kcal - yesterday_kcal) / yesterday_kcal * 100.0
    elif today_kcal > 0:
        trend = 100.0
    else:
        trend = 0.0

    return CalorieTrend(
        today_calories=round(today_kcal, 1),
        yesterday_calories=round(yesterday_kcal, 1),
        trend_percentage=round(trend, 1),
    )


def recent_health_log(health_logs: Iterable[HealthLog], today: date) -> Optional[HealthLog]:
    """Today's log if present, otherwise yesterday's."""
    by_day = {}
    for log in health_logs:
        day = parse_log_day(log.date)
        if day is not None:
            by_day[day] = log
    return by_day.get(today) or by_day.get(today - timedelta(days=1))


def bmi(height_cm: float, weight_kg: float) -> Optional[float]:
    if not height_cm or not weight_kg or height_cm <= 0 or weight_kg <= 0:
        return None
    meters = height_cm / 100.0
    return weight_kg / (meters * meters)


def bmi_status(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    if value < 18.5:
        return "underweight"
    if value < 25:
        return "normal"
    if value < 30:
        return "overweight"
    return "obese"


def bmi_summary(profile: UserProfile) -> BmiSummary:
    value = bmi(profile.height, profile.weight)
    return BmiSummary(
        bmi=round(value, 1) if value is not None else None,
        status=bmi_status(value),
        needs_to_lose_weight=bool(value is not None and value >= 25),
    )


def build_dashboard(profile: UserProfile, today: date) -> DashboardResponse:
    return DashboardResponse(
        profile_id=profile.id,
        today=today.isoformat(),
        calories=calorie_trend(profile.calorie_logs, today),
        recent_health_log=recent_health_log(profile.health_logs, today),
        bmi=bmi_summary(profile),
    )
