# -*- coding: utf-8 -*-
"""AI — API endpoints.

Generated food guides, exercise plans and health tips are cached on the
active profile and reused until the profile details change or the caller
asks for `refresh=true`.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from ..analytics.dashboard import bmi_summary, recent_health_log
from ..deps import ai_http_error, get_active_profile, get_ai_gateway, get_profile_store, today
from ..profiles.models import FoodSuggestions, LocalizedHealthTip, ProfileDataPatch, UserProfile
from ..profiles.store import ProfileStore
from .gateway import AIConfigError, AIGateway, AIGatewayError
from .models import ExercisePlanResponse, FoodCheckRequest, FoodCheckResult, RecentHealthLog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI"])


def _still_active(store: ProfileStore, profile: UserProfile) -> bool:
    """True when the profile the result was generated for is still active and unedited."""
    active = store.active_profile
    if active is not None and active.id == profile.id and active.fields() == profile.fields():
        return True
    logger.info("active profile changed while generating for %s; result not cached", profile.id)
    return False


@router.get("/food-suggestions", response_model=FoodSuggestions, summary="Personalized food guide")
async def food_suggestions(
    refresh: bool = Query(default=False),
    store: ProfileStore = Depends(get_profile_store),
    gateway: AIGateway = Depends(get_ai_gateway),
    profile: UserProfile = Depends(get_active_profile),
):
    if profile.food_suggestions is not None and not refresh:
        return profile.food_suggestions
    try:
        result = await gateway.generate_food_suggestions(profile.fields())
    except (AIConfigError, AIGatewayError) as exc:
        raise ai_http_error(exc) from exc
    if _still_active(store, profile):
        store.update_active_profile_data(ProfileDataPatch(food_suggestions=result))
    return result


@router.post("/check-food", response_model=FoodCheckResult, summary="Is this food suitable for me?")
async def check_food(
    request: FoodCheckRequest,
    gateway: AIGateway = Depends(get_ai_gateway),
    profile: UserProfile = Depends(get_active_profile),
):
    try:
        return await gateway.check_food_appropriateness(profile.fields(), request.food_name)
    except (AIConfigError, AIGatewayError) as exc:
        raise ai_http_error(exc) from exc


@router.get("/exercise", response_model=ExercisePlanResponse, summary="Daily exercise plan with checklist")
async def exercise_plan(
    refresh: bool = Query(default=False),
    store: ProfileStore = Depends(get_profile_store),
    gateway: AIGateway = Depends(get_ai_gateway),
    profile: UserProfile = Depends(get_active_profile),
):
    store.roll_exercise_checklist(today())
    profile = store.active_profile or profile
    needs_to_lose_weight = bmi_summary(profile).needs_to_lose_weight

    suggestion = profile.exercise_suggestion
    if suggestion is None or refresh:
        try:
            suggestion = await gateway.generate_exercise_suggestion(profile.fields(), needs_to_lose_weight)
        except (AIConfigError, AIGatewayError) as exc:
            raise ai_http_error(exc) from exc
        if not _still_active(store, profile):
            return ExercisePlanResponse(suggestion=suggestion, needs_to_lose_weight=needs_to_lose_weight)
        profile = store.set_exercise_suggestion(suggestion) or profile

    return ExercisePlanResponse(
        suggestion=suggestion,
        checklist=profile.exercise_checklist,
        all_done=profile.all_exercises_done(),
        needs_to_lose_weight=needs_to_lose_weight,
    )


@router.get("/health-tip", response_model=LocalizedHealthTip, summary="Health tip in Bengali and English")
async def health_tip(
    refresh: bool = Query(default=False),
    store: ProfileStore = Depends(get_profile_store),
    gateway: AIGateway = Depends(get_ai_gateway),
    profile: UserProfile = Depends(get_active_profile),
):
    if profile.health_tip is not None and not refresh:
        return profile.health_tip

    recent = recent_health_log(profile.health_logs, today())
    recent_log = None
    if recent is not None:
        recent_log = RecentHealthLog(water=recent.water, steps=recent.steps, sleep_hours=recent.sleep_hours)

    try:
        result = await gateway.generate_health_tip(profile.name, profile.health_info, recent_log)
    except (AIConfigError, AIGatewayError) as exc:
        raise ai_http_error(exc) from exc
    if _still_active(store, profile):
        store.update_active_profile_data(ProfileDataPatch(health_tip=result))
    return result
