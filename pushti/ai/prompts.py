# -*- coding: utf-8 -*-
"""Prompt text for the generative-AI flows."""

from __future__ import annotations

from typing import Optional

from ..profiles.models import ProfileFields
from .models import RecentHealthLog

JSON_ONLY = (
    "Return STRICT JSON only. Do NOT wrap in markdown or code fences. "
    "Use double quotes for all keys/strings and no trailing commas."
)

NUTRITIONIST = f"You are a food and nutrition expert for people in Bangladesh. {JSON_ONLY}"
FITNESS_COACH = f"You are a fitness coach for people in Bangladesh. {JSON_ONLY}"
HEALTH_COACH = f"You are a friendly and encouraging health coach in Bangladesh. {JSON_ONLY}"


def _profile_block(fields: ProfileFields, *, disliked: bool = False) -> str:
    lines = [
        f"- Name: {fields.name}",
        f"- Age: {fields.age}",
        f"- Height: {fields.height} cm",
        f"- Weight: {fields.weight} kg",
        f'- Health info, goals & allergies: "{fields.health_info}"',
    ]
    if disliked:
        lines.append(f'- Disliked foods: "{fields.disliked_foods}"')
    return "\n".join(lines)


def estimate_calories(food: str) -> str:
    return (
        f'User input: "{food}"\n'
        "Split the input into food items and estimate calories for each.\n"
        "Schema:\n"
        '{"items": [{"name": {"bn": "string", "en": "string"}, "calories": number}], '
        '"total_calories": number}\n'
    )


def food_suggestions(fields: ProfileFields) -> str:
    return (
        "Suggest a food guide for this user. Every text must be given in Bengali (bn) and English (en).\n"
        "Never recommend a food containing one of the user's allergens; list allergens under foods_to_avoid "
        "with the allergy as the reason. Never recommend a disliked food; suggest a close alternative instead.\n"
        "Mention side effects where relevant (e.g. high in sugar).\n"
        f"User:\n{_profile_block(fields, disliked=True)}\n"
        "Schema:\n"
        '{"recommended_foods": [{"bn": "", "en": ""}], "budget_friendly_foods": [{"bn": "", "en": ""}], '
        '"foods_to_avoid": [{"bn": "", "en": ""}], '
        '"daily_meal_plan": {"breakfast": {"bn": "", "en": ""}, "lunch": {"bn": "", "en": ""}, '
        '"dinner": {"bn": "", "en": ""}, "snacks": {"bn": "", "en": ""}}}\n'
    )


def check_food(fields: ProfileFields, food_name: str) -> str:
    return (
        "Decide whether the user may eat the food. Answer in Bengali (bn) and English (en).\n"
        "If the food contains an allergen named in the user's health info, isAllowed MUST be false, the reason "
        "MUST state the allergy risk and the recommendation MUST name a safe alternative. Otherwise judge it "
        "against the user's goals and suggest a portion size. Mention side effects even when allowed.\n"
        f"User:\n{_profile_block(fields)}\n"
        f'Food: "{food_name}"\n'
        "Schema:\n"
        '{"isAllowed": boolean, "recommendation": {"bn": "", "en": ""}, "reason": {"bn": "", "en": ""}}\n'
    )


def exercise_suggestion(fields: ProfileFields, needs_to_lose_weight: bool) -> str:
    focus = "cardio and full-body movements" if needs_to_lose_weight else "general fitness and flexibility"
    return (
        "Create a simple, beginner-friendly home routine of 2-3 exercises, 15-30 minutes in total, "
        "needing no equipment. Texts in Bengali (bn) and English (en).\n"
        f"Focus on {focus}. Add a short encouraging summary.\n"
        f"User:\n{_profile_block(fields)}\n"
        "Schema:\n"
        '{"summary": {"bn": "", "en": ""}, '
        '"exercises": [{"name": {"bn": "", "en": ""}, "duration_minutes": number}]}\n'
    )


def health_tip(name: str, health_info: str, recent_log: Optional[RecentHealthLog], locale: str) -> str:
    language = "Bengali" if locale == "bn" else "English"
    if recent_log is not None:
        log_block = (
            f"- Water intake: {recent_log.water} ml\n"
            f"- Steps: {recent_log.steps}\n"
            f"- Sleep: {recent_log.sleep_hours} hours\n"
        )
    else:
        log_block = "- No recent log\n"
    return (
        f"Write one health tip for the user, entirely in {language}.\n"
        f'User: {name}. Goals: "{health_info}"\n'
        f"Recent health log (today/yesterday):\n{log_block}"
        "Rules, in order: sleep under 7 hours -> sleep tip; else water under 1500 ml -> hydration tip; "
        "else steps under 4000 -> light activity tip; otherwise a general tip for the user's goals. "
        "Set context only for log-based tips. One sentence each for suggestion and explanation.\n"
        "Schema:\n"
        '{"suggestion": "string", "explanation": "string", "context": "string|null"}\n'
    )
