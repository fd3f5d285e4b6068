# -*- coding: utf-8 -*-
"""Analytics — API endpoints."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..deps import get_active_profile, today
from ..profiles.models import UserProfile
from .aggregator import build_chart_data, chart_window, parse_log_day, week_start_for
from .dashboard import build_dashboard
from .models import ChartResponse, DashboardResponse, ViewMode

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


def _day_param(value: Optional[str], name: str) -> date:
    if not value:
        return today()
    day = parse_log_day(value)
    if day is None:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value}")
    return day


@router.get("/chart", response_model=ChartResponse, summary="Chart points for a daily, weekly or monthly view")
async def chart(
    request: Request,
    mode: ViewMode = Query(default=ViewMode.daily),
    anchor: Optional[str] = Query(default=None, description="YYYY-MM-DD, defaults to today"),
    locale: Optional[str] = Query(default=None, description="bn or en; controls week start"),
    profile: UserProfile = Depends(get_active_profile),
):
    anchor_day = _day_param(anchor, "anchor")
    week_start = week_start_for(locale or request.app.state.settings.locale)
    start, end = chart_window(mode, anchor_day, week_start)
    points = build_chart_data(profile.calorie_logs, profile.health_logs, mode, anchor_day, week_start)
    return ChartResponse(
        profile_id=profile.id,
        mode=mode,
        anchor=anchor_day.isoformat(),
        start=start.isoformat(),
        end=end.isoformat(),
        points=points,
    )


@router.get("/dashboard", response_model=DashboardResponse, summary="Home dashboard figures")
async def dashboard(
    day: Optional[str] = Query(default=None, alias="today", description="YYYY-MM-DD, defaults to today"),
    profile: UserProfile = Depends(get_active_profile),
):
    return build_dashboard(profile, _day_param(day, "today"))
