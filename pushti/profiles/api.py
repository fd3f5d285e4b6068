# -*- coding: utf-8 -*-
"""Profiles — API endpoints (profiles, daily logs, exercise checklist)."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..ai import AIConfigError, AIGateway, AIGatewayError
from ..analytics.aggregator import parse_log_day
from ..deps import ai_http_error, get_active_profile, get_ai_gateway, get_profile_store, today
from .models import (
    CalorieLog,
    CalorieLogCreateRequest,
    ExerciseCheckRequest,
    ExerciseChecklistResponse,
    HealthLog,
    HealthLogUpsertRequest,
    ProfileDataPatch,
    ProfileFields,
    ProfilesResponse,
    UserProfile,
)
from .store import ProfileStore

router = APIRouter(prefix="/api/profiles", tags=["Profiles"])
logs_router = APIRouter(prefix="/api/logs", tags=["Logs"])
exercise_router = APIRouter(prefix="/api/exercise", tags=["Exercise"])


def _profiles_response(store: ProfileStore) -> ProfilesResponse:
    return ProfilesResponse(profiles=store.profiles, active_profile_id=store.active_profile_id)


def _day_or_400(value: str) -> date:
    day = parse_log_day(value)
    if day is None:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")
    return day


def _logged_at(value: Optional[str]) -> Optional[str]:
    """Timestamp for a calorie log; a bare day gets the current local time of day."""
    if not value:
        return None
    day = _day_or_400(value)
    if len(value.strip()) > 10:
        return value.strip()
    now = datetime.now().astimezone()
    return datetime.combine(day, now.timetz()).isoformat(timespec="milliseconds")


# ---- profiles ----


@router.get("", response_model=ProfilesResponse, summary="List profiles")
async def list_profiles(store: ProfileStore = Depends(get_profile_store)):
    return _profiles_response(store)


@router.post("", response_model=UserProfile, summary="Create a profile (onboarding)")
async def create_profile(
    request: ProfileFields,
    activate: bool = Query(default=True, description="Make the new profile active"),
    store: ProfileStore = Depends(get_profile_store),
):
    profile = store.add_profile(request)
    if activate:
        store.switch_profile(profile.id)
    return profile


@router.delete("", response_model=ProfilesResponse, summary="Clear all profiles and logs")
async def clear_profiles(store: ProfileStore = Depends(get_profile_store)):
    store.clear_all()
    return _profiles_response(store)


@router.get("/active", response_model=UserProfile, summary="Active profile")
async def active_profile(profile: UserProfile = Depends(get_active_profile)):
    return profile


@router.put("/active", response_model=UserProfile, summary="Update the active profile's details")
async def update_active_profile(
    request: ProfileFields,
    store: ProfileStore = Depends(get_profile_store),
    _profile: UserProfile = Depends(get_active_profile),
):
    updated = store.update_profile(request)
    if updated is None:
        raise HTTPException(status_code=404, detail="No active profile")
    return updated


@router.patch("/active/data", response_model=UserProfile, summary="Merge owned data into the active profile")
async def patch_active_profile_data(
    request: ProfileDataPatch,
    store: ProfileStore = Depends(get_profile_store),
    _profile: UserProfile = Depends(get_active_profile),
):
    updated = store.update_active_profile_data(request)
    if updated is None:
        raise HTTPException(status_code=404, detail="No active profile")
    return updated


@router.post("/{profile_id}/activate", response_model=ProfilesResponse, summary="Switch the active profile")
async def activate_profile(profile_id: str, store: ProfileStore = Depends(get_profile_store)):
    if not store.switch_profile(profile_id):
        raise HTTPException(status_code=404, detail="Profile not found")
    return _profiles_response(store)


@router.delete("/{profile_id}", response_model=ProfilesResponse, summary="Delete a profile")
async def delete_profile(profile_id: str, store: ProfileStore = Depends(get_profile_store)):
    if not store.delete_profile(profile_id):
        raise HTTPException(status_code=404, detail="Profile not found")
    return _profiles_response(store)


# ---- calorie logs ----


@logs_router.post("/calories", response_model=CalorieLog, summary="Estimate calories for a meal and log it")
async def create_calorie_log(
    request: CalorieLogCreateRequest,
    store: ProfileStore = Depends(get_profile_store),
    gateway: AIGateway = Depends(get_ai_gateway),
    profile: UserProfile = Depends(get_active_profile),
):
    logged_at = _logged_at(request.date)
    try:
        estimate = await gateway.estimate_calories(request.food_text)
    except (AIConfigError, AIGatewayError) as exc:
        raise ai_http_error(exc) from exc

    if store.active_profile_id != profile.id:
        raise HTTPException(status_code=409, detail="Active profile changed during the estimate")
    log = store.add_calorie_log(
        request.food_text,
        estimate.items,
        estimate.total_calories or 0.0,
        logged_at=logged_at,
    )
    if log is None:
        raise HTTPException(status_code=404, detail="No active profile")
    return log


@logs_router.get("/calories", response_model=List[CalorieLog], summary="Calorie logs, newest first")
async def list_calorie_logs(
    day: Optional[str] = Query(default=None, alias="date", description="YYYY-MM-DD"),
    store: ProfileStore = Depends(get_profile_store),
    profile: UserProfile = Depends(get_active_profile),
):
    if day:
        return store.calorie_logs_for(_day_or_400(day))
    return sorted(profile.calorie_logs, key=lambda log: log.date, reverse=True)


# ---- health logs ----


@logs_router.put("/health/{day}", response_model=HealthLog, summary="Save the health metrics of a day")
async def upsert_health_log(
    day: str,
    request: HealthLogUpsertRequest,
    store: ProfileStore = Depends(get_profile_store),
    _profile: UserProfile = Depends(get_active_profile),
):
    key = _day_or_400(day).isoformat()
    log = store.upsert_health_log(HealthLog(date=key, **request.model_dump()))
    if log is None:
        raise HTTPException(status_code=404, detail="No active profile")
    return log


@logs_router.get("/health/{day}", response_model=HealthLog, summary="Health metrics of a day")
async def get_health_log(
    day: str,
    store: ProfileStore = Depends(get_profile_store),
    _profile: UserProfile = Depends(get_active_profile),
):
    key = _day_or_400(day).isoformat()
    return store.health_log_for(key) or HealthLog(date=key)


# ---- exercise checklist ----


def _checklist_response(profile: UserProfile) -> ExerciseChecklistResponse:
    return ExerciseChecklistResponse(
        checklist=profile.exercise_checklist,
        last_exercise_check_date=profile.last_exercise_check_date,
        all_done=profile.all_exercises_done(),
    )


@exercise_router.get("/checklist", response_model=ExerciseChecklistResponse, summary="Today's exercise checklist")
async def get_checklist(
    store: ProfileStore = Depends(get_profile_store),
    _profile: UserProfile = Depends(get_active_profile),
):
    store.roll_exercise_checklist(today())
    return _checklist_response(store.active_profile)


@exercise_router.post("/checklist", response_model=ExerciseChecklistResponse, summary="Mark an exercise done or undone")
async def check_exercise(
    request: ExerciseCheckRequest,
    store: ProfileStore = Depends(get_profile_store),
    _profile: UserProfile = Depends(get_active_profile),
):
    store.roll_exercise_checklist(today())
    store.set_exercise_done(request.name, request.done)
    return _checklist_response(store.active_profile)
