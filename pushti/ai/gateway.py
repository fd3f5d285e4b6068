# -*- coding: utf-8 -*-
"""AI gateway — calls an OpenAI-compatible chat completions endpoint.

Each flow sends one structured request and validates the JSON answer against
a pydantic schema. Failures surface as `AIGatewayError`; there is no retry.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from ..config import Settings
from ..profiles.models import (
    ExerciseSuggestion,
    FoodSuggestions,
    HealthTip,
    LocalizedHealthTip,
    ProfileFields,
)
from . import prompts
from .models import CalorieEstimate, FoodCheckResult, RecentHealthLog
from .parsing import extract_completion_text, extract_error_message, parse_model_output_json

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class AIConfigError(ValueError):
    """The gateway cannot be called with the current configuration."""


class AIGatewayError(RuntimeError):
    """The AI call failed or returned output that does not match the schema."""


@dataclass(frozen=True)
class GatewaySettings:
    base_url: str
    api_key: Optional[str]
    model: str
    timeout: float
    temperature: float
    max_tokens: int

    @classmethod
    def from_settings(cls, settings: Settings) -> "GatewaySettings":
        return cls(
            base_url=settings.ai_base_url,
            api_key=settings.ai_api_key,
            model=settings.ai_model,
            timeout=settings.ai_timeout,
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
        )

    @property
    def completions_url(self) -> str:
        base = self.base_url.rstrip("/")
        if base.endswith("/chat/completions"):
            return base
        return f"{base}/chat/completions"


class AIGateway:
    def __init__(
        self,
        cfg: GatewaySettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.cfg = cfg
        self._transport = transport

    @property
    def model(self) -> str:
        return self.cfg.model

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        if not self.cfg.api_key:
            raise AIConfigError("PUSHTI_AI_API_KEY not set")

        payload: Dict[str, Any] = {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.cfg.temperature,
            "max_tokens": self.cfg.max_tokens,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.cfg.api_key}",
        }

        async with httpx.AsyncClient(
            timeout=self.cfg.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.post(self.cfg.completions_url, headers=headers, json=payload)
            except httpx.HTTPError as exc:
                raise AIGatewayError(f"AI API unreachable: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code >= 400:
            detail = extract_error_message(data) or resp.text[:200]
            raise AIGatewayError(f"AI API error ({resp.status_code}): {detail}")
        if data is None:
            snippet = (resp.text or "").replace("\n", " ").strip()[:200]
            raise AIGatewayError(f"AI API returned non-JSON response: {snippet}")

        content = extract_completion_text(data)
        if not content.strip():
            raise AIGatewayError("AI API returned an empty answer")
        return content

    async def _structured(self, system_prompt: str, user_prompt: str, schema: Type[M]) -> M:
        content = await self._complete(system_prompt, user_prompt)
        try:
            parsed = parse_model_output_json(content)
            return schema.model_validate(parsed)
        except ValueError as exc:
            logger.warning("AI output did not match %s: %s", schema.__name__, exc)
            raise AIGatewayError(f"Malformed AI output for {schema.__name__}: {exc}") from exc

    # ---- flows ----

    async def estimate_calories(self, food: str) -> CalorieEstimate:
        result = await self._structured(prompts.NUTRITIONIST, prompts.estimate_calories(food), CalorieEstimate)
        if result.total_calories is None:
            result.total_calories = round(sum(item.calories for item in result.items), 1)
        return result

    async def generate_food_suggestions(self, fields: ProfileFields) -> FoodSuggestions:
        return await self._structured(prompts.NUTRITIONIST, prompts.food_suggestions(fields), FoodSuggestions)

    async def check_food_appropriateness(self, fields: ProfileFields, food_name: str) -> FoodCheckResult:
        return await self._structured(prompts.NUTRITIONIST, prompts.check_food(fields, food_name), FoodCheckResult)

    async def generate_exercise_suggestion(
        self, fields: ProfileFields, needs_to_lose_weight: bool
    ) -> ExerciseSuggestion:
        return await self._structured(
            prompts.FITNESS_COACH,
            prompts.exercise_suggestion(fields, needs_to_lose_weight),
            ExerciseSuggestion,
        )

    async def generate_health_tip(
        self,
        name: str,
        health_info: str,
        recent_log: Optional[RecentHealthLog] = None,
    ) -> LocalizedHealthTip:
        bn, en = await asyncio.gather(
            self._structured(prompts.HEALTH_COACH, prompts.health_tip(name, health_info, recent_log, "bn"), HealthTip),
            self._structured(prompts.HEALTH_COACH, prompts.health_tip(name, health_info, recent_log, "en"), HealthTip),
        )
        return LocalizedHealthTip(bn=bn, en=en)
