# -*- coding: utf-8 -*-
"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from datetime import date

from fastapi import Depends, HTTPException, Request

from .ai import AIConfigError, AIGateway, AIGatewayError
from .profiles.models import UserProfile
from .profiles.store import ProfileStore


def get_profile_store(request: Request) -> ProfileStore:
    return request.app.state.profile_store


def get_ai_gateway(request: Request) -> AIGateway:
    return request.app.state.ai_gateway


def get_active_profile(store: ProfileStore = Depends(get_profile_store)) -> UserProfile:
    profile = store.active_profile
    if profile is None:
        raise HTTPException(status_code=404, detail="No active profile")
    return profile


def today() -> date:
    return date.today()


def ai_http_error(exc: AIConfigError | AIGatewayError) -> HTTPException:
    if isinstance(exc, AIConfigError):
        return HTTPException(status_code=500, detail=f"AI config error: {exc}")
    return HTTPException(status_code=502, detail=f"AI call failed: {exc}")
