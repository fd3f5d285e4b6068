# -*- coding: utf-8 -*-
"""Log aggregation for charts.

Turns raw calorie logs and daily health logs into day, week or month buckets:
- daily: every day of the anchor's week, zeros included
- weekly: weeks of the anchor's month, keyed by week start
- monthly: the six months ending with the anchor's month

Week and month buckets report per-day averages. Only days with at least one
nonzero metric count toward the denominator, so sparse logging does not drag
the average down.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..profiles.models import CalorieLog, HealthLog
from .models import ChartPoint, ViewMode

logger = logging.getLogger(__name__)

# Python weekday numbers (Monday=0). Both supported locales start weeks on Sunday.
SUNDAY = 6
WEEK_START_BY_LOCALE: Dict[str, int] = {"bn": SUNDAY, "en": SUNDAY}

_WEEKDAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

MONTHLY_WINDOW = 6


def week_start_for(locale: Optional[str]) -> int:
    lang = (locale or "").replace("_", "-").split("-", 1)[0].lower()
    return WEEK_START_BY_LOCALE.get(lang, SUNDAY)


def parse_log_day(value: Optional[str]) -> Optional[date]:
    """Local calendar day of a log date (YYYY-MM-DD or ISO8601 timestamp), or None.

    Timestamps carrying an offset are moved to the server's local time zone
    first; naive timestamps and bare dates keep the day they name.
    """
    if not value:
        return None
    text = value.strip().replace("Z", "+00:00")
    try:
        stamp = datetime.fromisoformat(text)
    except (TypeError, ValueError):
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone()
    return stamp.date()


def start_of_week(day: date, week_start: int = SUNDAY) -> date:
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _add_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def chart_window(mode: ViewMode, anchor: date, week_start: int = SUNDAY) -> Tuple[date, date]:
    if mode == ViewMode.daily:
        start = start_of_week(anchor, week_start)
        return start, start + timedelta(days=6)
    if mode == ViewMode.weekly:
        start = _month_start(anchor)
        return start, _add_months(start, 1) - timedelta(days=1)
    start = _add_months(_month_start(anchor), -(MONTHLY_WINDOW - 1))
    return start, anchor


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class _DayAgg:
    calories: float = 0.0
    steps: int = 0
    water: float = 0.0
    workout: float = 0.0
    sleep: float = 0.0

    def has_data(self) -> bool:
        return any(v > 0 for v in (self.calories, self.steps, self.water, self.workout, self.sleep))


@dataclass
class _BucketAgg:
    start: date
    calories: float = 0.0
    steps: float = 0.0
    water: float = 0.0
    workout: float = 0.0
    sleep: float = 0.0
    days: int = 0

    def add(self, day: _DayAgg) -> None:
        self.calories += day.calories
        self.steps += day.steps
        self.water += day.water
        self.workout += day.workout
        self.sleep += day.sleep
        if day.has_data():
            self.days += 1


def _bucket_by_day(
    calorie_logs: Iterable[CalorieLog],
    health_logs: Iterable[HealthLog],
    start: date,
    end: date,
) -> Dict[date, _DayAgg]:
    per_day: Dict[date, _DayAgg] = {}

    for log in calorie_logs:
        day = parse_log_day(log.date)
        if day is None:
            logger.debug("calorie log %s skipped: invalid date %r", log.id, log.date)
            continue
        if not (start <= day <= end):
            continue
        per_day.setdefault(day, _DayAgg()).calories += float(log.total_calories or 0.0)

    # One health log per day by invariant; a later nonzero value still wins.
    for log in health_logs:
        day = parse_log_day(log.date)
        if day is None:
            logger.debug("health log skipped: invalid date %r", log.date)
            continue
        if not (start <= day <= end):
            continue
        agg = per_day.setdefault(day, _DayAgg())
        agg.steps = int(log.steps or agg.steps)
        agg.water = float(log.water or agg.water)
        agg.workout = float(log.workout_minutes or agg.workout)
        agg.sleep = float(log.sleep_hours or agg.sleep)

    return per_day


def _daily_points(per_day: Dict[date, _DayAgg], start: date, end: date) -> List[ChartPoint]:
    points: List[ChartPoint] = []
    cur = start
    while cur <= end:
        agg = per_day.get(cur) or _DayAgg()
        points.append(
            ChartPoint(
                label=_WEEKDAY_ABBR[cur.weekday()],
                start=cur.isoformat(),
                calories=round(agg.calories, 1),
                steps=agg.steps,
                water=round(agg.water, 1),
                workout=round(agg.workout, 1),
                sleep=round(agg.sleep, 1),
            )
        )
        cur = cur + timedelta(days=1)
    return points


def _averaged_points(
    per_day: Dict[date, _DayAgg],
    start: date,
    end: date,
    mode: ViewMode,
    week_start: int,
) -> List[ChartPoint]:
    if mode == ViewMode.weekly:
        key_of = lambda d: start_of_week(d, week_start)  # noqa: E731
        label_of = lambda d: f"{_MONTH_ABBR[d.month - 1]} {d.day}"  # noqa: E731
        step = lambda d: d + timedelta(days=7)  # noqa: E731
    else:
        key_of = _month_start
        label_of = lambda d: f"{_MONTH_ABBR[d.month - 1]} {d.year % 100:02d}"  # noqa: E731
        step = lambda d: _add_months(d, 1)  # noqa: E731

    buckets: Dict[date, _BucketAgg] = {}
    cur = key_of(start)
    while cur <= end:
        buckets[cur] = _BucketAgg(start=cur)
        cur = step(cur)

    for day, agg in per_day.items():
        buckets[key_of(day)].add(agg)

    points: List[ChartPoint] = []
    for key in sorted(buckets.keys()):
        b = buckets[key]
        n = b.days
        points.append(
            ChartPoint(
                label=label_of(key),
                start=key.isoformat(),
                calories=float(_round_half_up(b.calories / n)) if n else 0.0,
                steps=_round_half_up(b.steps / n) if n else 0,
                water=float(_round_half_up(b.water / n)) if n else 0.0,
                workout=float(_round_half_up(b.workout / n)) if n else 0.0,
                sleep=round(b.sleep / n, 1) if n else 0.0,
            )
        )
    return points


def build_chart_data(
    calorie_logs: Iterable[CalorieLog],
    health_logs: Iterable[HealthLog],
    mode: Union[ViewMode, str],
    anchor: date,
    week_start: int = SUNDAY,
) -> List[ChartPoint]:
    mode = ViewMode(mode)
    start, end = chart_window(mode, anchor, week_start)
    per_day = _bucket_by_day(calorie_logs, health_logs, start, end)
    if mode == ViewMode.daily:
        return _daily_points(per_day, start, end)
    return _averaged_points(per_day, start, end, mode, week_start)
