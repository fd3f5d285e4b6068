# -*- coding: utf-8 -*-
"""Profiles — multi-profile store backed by the key-value storage.

One `ProfileStore` is created per running app and handed to request handlers
through FastAPI dependencies. All operations are synchronous over the
in-memory copy; persistence happens as a side effect of each mutation.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Sequence, Union
from uuid import uuid4

from pydantic import TypeAdapter

from ..analytics.aggregator import parse_log_day
from ..storage import LocalStorage, StoredValue
from .models import (
    CACHED_AI_FIELDS,
    PROFILE_FIELD_NAMES,
    CalorieLog,
    CalorieLogItem,
    ExerciseSuggestion,
    HealthLog,
    ProfileDataPatch,
    ProfileFields,
    UserProfile,
)

logger = logging.getLogger(__name__)

PROFILES_KEY = "profiles"
ACTIVE_PROFILE_KEY = "activeProfileId"

_PROFILES_ADAPTER = TypeAdapter(List[UserProfile])
_ACTIVE_ID_ADAPTER = TypeAdapter(Optional[str])


def _local_now_iso() -> str:
    return datetime.now().astimezone().isoformat(timespec="milliseconds")


class ProfileStore:
    def __init__(self, storage: LocalStorage) -> None:
        self.storage = storage
        self._profiles: StoredValue[List[UserProfile]] = StoredValue(
            storage, PROFILES_KEY, [], _PROFILES_ADAPTER
        )
        self._active_id: StoredValue[Optional[str]] = StoredValue(
            storage, ACTIVE_PROFILE_KEY, None, _ACTIVE_ID_ADAPTER
        )
        self._ensure_active()

    # ---- views ----

    @property
    def profiles(self) -> List[UserProfile]:
        return list(self._profiles.value)

    @property
    def active_profile_id(self) -> Optional[str]:
        return self._active_id.value

    @property
    def active_profile(self) -> Optional[UserProfile]:
        return self.get_profile(self._active_id.value)

    @property
    def needs_onboarding(self) -> bool:
        return self.active_profile is None

    def get_profile(self, profile_id: Optional[str]) -> Optional[UserProfile]:
        if not profile_id:
            return None
        for profile in self._profiles.value:
            if profile.id == profile_id:
                return profile
        return None

    def _ensure_active(self) -> None:
        profiles = self._profiles.value
        if profiles and self.active_profile is None:
            self._active_id.set(profiles[0].id)

    def _replace(self, updated: UserProfile) -> None:
        self._profiles.set(lambda prev: [updated if p.id == updated.id else p for p in prev])

    # ---- profile lifecycle ----

    def add_profile(self, fields: ProfileFields) -> UserProfile:
        """Create a profile with empty logs and no cached AI output. Does not activate it."""
        profile = UserProfile(id=str(uuid4()), **fields.model_dump())
        self._profiles.set(lambda prev: [*prev, profile])
        logger.info("profile added: %s", profile.id)
        return profile

    def switch_profile(self, profile_id: str) -> bool:
        if self.get_profile(profile_id) is None:
            logger.warning("switch to unknown profile ignored: %s", profile_id)
            return False
        self._active_id.set(profile_id)
        return True

    def update_profile(self, fields: ProfileFields) -> Optional[UserProfile]:
        active = self.active_profile
        if active is None:
            return None

        new_values = fields.model_dump()
        changed = [name for name in PROFILE_FIELD_NAMES if getattr(active, name) != new_values[name]]
        update = dict(new_values)
        if changed:
            for name in CACHED_AI_FIELDS:
                update[name] = None
            logger.info("profile %s changed (%s); cached AI content cleared", active.id, ", ".join(changed))

        updated = active.model_copy(update=update)
        self._replace(updated)
        return updated

    def update_active_profile_data(
        self, patch: Union[ProfileDataPatch, dict]
    ) -> Optional[UserProfile]:
        if isinstance(patch, dict):
            patch = ProfileDataPatch.model_validate(patch)
        active = self.active_profile
        if active is None:
            return None
        updated = active.model_copy(update=patch.changes())
        self._replace(updated)
        return updated

    def delete_profile(self, profile_id: str) -> bool:
        if self.get_profile(profile_id) is None:
            return False
        remaining = [p for p in self._profiles.value if p.id != profile_id]
        self._profiles.set(remaining)
        if self._active_id.value == profile_id:
            self._active_id.set(remaining[0].id if remaining else None)
        logger.info("profile deleted: %s (%d remaining)", profile_id, len(remaining))
        return True

    def clear_all(self) -> None:
        """Remove every profile, its logs and the active pointer."""
        removed = self._profiles.reset()
        removed = self._active_id.reset() and removed
        if removed:
            logger.info("all profile data cleared")
        else:
            logger.warning("profile data cleared in memory but not on disk")

    # ---- calorie logs ----

    def add_calorie_log(
        self,
        food_text: str,
        items: Sequence[CalorieLogItem],
        total_calories: float,
        logged_at: Optional[str] = None,
    ) -> Optional[CalorieLog]:
        active = self.active_profile
        if active is None:
            return None
        log = CalorieLog(
            id=str(uuid4()),
            food_text=food_text,
            items=list(items),
            total_calories=total_calories,
            date=logged_at or _local_now_iso(),
        )
        self.update_active_profile_data(ProfileDataPatch(calorie_logs=[log, *active.calorie_logs]))
        return log

    def calorie_logs_for(self, day: date) -> List[CalorieLog]:
        active = self.active_profile
        if active is None:
            return []
        logs = [log for log in active.calorie_logs if parse_log_day(log.date) == day]
        return sorted(logs, key=lambda log: log.date, reverse=True)

    # ---- health logs ----

    def health_log_for(self, day: str) -> Optional[HealthLog]:
        active = self.active_profile
        if active is None:
            return None
        for log in active.health_logs:
            if log.date == day:
                return log
        return None

    def upsert_health_log(self, log: HealthLog) -> Optional[HealthLog]:
        active = self.active_profile
        if active is None:
            return None
        logs = list(active.health_logs)
        for idx, existing in enumerate(logs):
            if existing.date == log.date:
                logs[idx] = log
                break
        else:
            logs.append(log)
        self.update_active_profile_data(ProfileDataPatch(health_logs=logs))
        return log

    # ---- exercise checklist ----

    def roll_exercise_checklist(self, today: date) -> bool:
        """Start a fresh checklist the first time the exercise plan is seen on a new day."""
        active = self.active_profile
        if active is None:
            return False
        today_key = today.isoformat()
        if active.last_exercise_check_date == today_key:
            return False
        self.update_active_profile_data(
            ProfileDataPatch(exercise_checklist=[], last_exercise_check_date=today_key)
        )
        return True

    def set_exercise_done(self, name: str, done: bool) -> Optional[List[str]]:
        active = self.active_profile
        if active is None:
            return None
        checklist = [item for item in active.exercise_checklist if item != name]
        if done:
            checklist.append(name)
        self.update_active_profile_data(ProfileDataPatch(exercise_checklist=checklist))
        return checklist

    def set_exercise_suggestion(self, suggestion: Optional[ExerciseSuggestion]) -> Optional[UserProfile]:
        return self.update_active_profile_data(
            ProfileDataPatch(exercise_suggestion=suggestion, exercise_checklist=[])
        )

    def close(self) -> None:
        self._profiles.close()
        self._active_id.close()
