# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sqlite3
import tempfile
import time
import unittest
from datetime import date, datetime
from pathlib import Path
from unittest import mock

from pydantic import ValidationError

from pushti.analytics.aggregator import parse_log_day
from pushti.profiles.models import (
    CalorieLogItem,
    Exercise,
    ExerciseSuggestion,
    FoodSuggestions,
    HealthLog,
    HealthTip,
    LocalizedHealthTip,
    LocalizedText,
    MealPlan,
    ProfileFields,
)
from pushti.profiles.store import ACTIVE_PROFILE_KEY, PROFILES_KEY, ProfileStore
from pushti.storage import LocalStorage


def _fields(name: str = "Rahim", **overrides) -> ProfileFields:
    data = {
        "name": name,
        "age": 34,
        "height": 170,
        "weight": 72,
        "health_info": "diabetes, allergic to shrimp",
        "disliked_foods": "bitter gourd",
    }
    data.update(overrides)
    return ProfileFields(**data)


def _food_suggestions() -> FoodSuggestions:
    text = LocalizedText(bn="ভাত", en="Rice")
    return FoodSuggestions(
        recommended_foods=[text],
        daily_meal_plan=MealPlan(breakfast=text, lunch=text, dinner=text, snacks=text),
    )


def _tip() -> LocalizedHealthTip:
    return LocalizedHealthTip(
        bn=HealthTip(suggestion="পানি পান করুন", explanation="শরীর সতেজ থাকে"),
        en=HealthTip(suggestion="Drink water", explanation="Keeps you fresh"),
    )


def _exercise_plan() -> ExerciseSuggestion:
    return ExerciseSuggestion(
        summary=LocalizedText(bn="শুরু করুন", en="Get started"),
        exercises=[
            Exercise(name=LocalizedText(bn="হাঁটা", en="Walking"), duration_minutes=15),
            Exercise(name=LocalizedText(bn="স্কোয়াট", en="Squats"), duration_minutes=10),
        ],
    )


class TestProfileStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="pushti-test-"))
        self.db_path = self._tmp / "pushti.db"
        self.storage = LocalStorage(self.db_path)
        self.store = ProfileStore(self.storage)

    def tearDown(self) -> None:
        self.store.close()
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_new_store_needs_onboarding(self) -> None:
        self.assertEqual(self.store.profiles, [])
        self.assertIsNone(self.store.active_profile)
        self.assertTrue(self.store.needs_onboarding)

    def test_add_profile_does_not_activate(self) -> None:
        profile = self.store.add_profile(_fields())
        self.assertEqual(len(self.store.profiles), 1)
        self.assertIsNone(self.store.active_profile_id)
        self.assertEqual(profile.calorie_logs, [])
        self.assertIsNone(profile.food_suggestions)

    def test_switch_profile(self) -> None:
        a = self.store.add_profile(_fields("A"))
        b = self.store.add_profile(_fields("B"))
        self.assertTrue(self.store.switch_profile(b.id))
        self.assertEqual(self.store.active_profile.id, b.id)
        self.assertTrue(self.store.switch_profile(a.id))
        self.assertEqual(self.store.active_profile_id, a.id)

    def test_switch_to_unknown_profile_is_ignored(self) -> None:
        a = self.store.add_profile(_fields("A"))
        self.store.switch_profile(a.id)
        with self.assertLogs("pushti.profiles.store", level="WARNING"):
            self.assertFalse(self.store.switch_profile("missing"))
        self.assertEqual(self.store.active_profile_id, a.id)

    def test_delete_active_profile_reassigns_first_remaining(self) -> None:
        a = self.store.add_profile(_fields("A"))
        b = self.store.add_profile(_fields("B"))
        self.store.switch_profile(a.id)

        self.assertTrue(self.store.delete_profile(a.id))
        self.assertEqual(self.store.active_profile_id, b.id)

        self.assertTrue(self.store.delete_profile(b.id))
        self.assertIsNone(self.store.active_profile_id)
        self.assertEqual(self.store.profiles, [])

    def test_delete_inactive_profile_keeps_active(self) -> None:
        a = self.store.add_profile(_fields("A"))
        b = self.store.add_profile(_fields("B"))
        self.store.switch_profile(a.id)
        self.store.delete_profile(b.id)
        self.assertEqual(self.store.active_profile_id, a.id)
        self.assertFalse(self.store.delete_profile(b.id))

    def test_update_profile_clears_cached_ai_content_on_change(self) -> None:
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)
        self.store.update_active_profile_data(
            {"food_suggestions": _food_suggestions(), "health_tip": _tip()}
        )
        self.store.set_exercise_suggestion(_exercise_plan())

        updated = self.store.update_profile(_fields(weight=80))
        self.assertEqual(updated.weight, 80)
        self.assertIsNone(updated.food_suggestions)
        self.assertIsNone(updated.exercise_suggestion)
        self.assertIsNone(updated.health_tip)

    def test_update_profile_without_changes_keeps_cache(self) -> None:
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)
        self.store.update_active_profile_data({"health_tip": _tip()})

        updated = self.store.update_profile(_fields())
        self.assertEqual(updated.health_tip, _tip())

    def test_health_tip_patch_leaves_logs_alone(self) -> None:
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)
        self.store.add_calorie_log("rice", [], 300, logged_at="2024-01-01T08:00:00.000")
        self.store.upsert_health_log(HealthLog(date="2024-01-01", steps=4000))
        before = self.store.active_profile

        after = self.store.update_active_profile_data({"health_tip": _tip()})
        self.assertEqual(after.health_tip, _tip())
        self.assertEqual(after.calorie_logs, before.calorie_logs)
        self.assertEqual(after.health_logs, before.health_logs)

    def test_null_patch_clears_cached_value(self) -> None:
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)
        self.store.update_active_profile_data({"health_tip": _tip()})
        updated = self.store.update_active_profile_data({"health_tip": None})
        self.assertIsNone(updated.health_tip)

    def test_operations_without_active_profile_are_no_ops(self) -> None:
        self.assertIsNone(self.store.update_profile(_fields()))
        self.assertIsNone(self.store.update_active_profile_data({"health_tip": _tip()}))
        self.assertIsNone(self.store.add_calorie_log("rice", [], 100))
        self.assertEqual(self.store.calorie_logs_for(date(2024, 1, 1)), [])

    def test_state_survives_reopen(self) -> None:
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)
        self.store.add_calorie_log(
            "ভাত",
            [CalorieLogItem(name=LocalizedText(bn="ভাত", en="Rice"), calories=200)],
            200,
        )

        reopened = ProfileStore(LocalStorage(self.db_path))
        self.assertEqual(reopened.profiles, self.store.profiles)
        self.assertEqual(reopened.active_profile_id, profile.id)
        reopened.close()

    def test_first_profile_becomes_active_on_startup(self) -> None:
        profile = self.store.add_profile(_fields())
        self.assertIsNone(self.store.active_profile_id)

        reopened = ProfileStore(LocalStorage(self.db_path))
        self.assertEqual(reopened.active_profile_id, profile.id)
        reopened.close()

    def test_clear_all(self) -> None:
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)
        self.store.clear_all()
        self.assertEqual(self.store.profiles, [])
        self.assertIsNone(self.store.active_profile_id)
        self.assertIsNone(self.storage.get_item(PROFILES_KEY))
        self.assertIsNone(self.storage.get_item(ACTIVE_PROFILE_KEY))

    def test_clear_all_resets_memory_when_disk_fails(self) -> None:
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)
        failing = mock.patch("pushti.storage.local.db_conn", side_effect=sqlite3.OperationalError("disk full"))
        with failing, self.assertLogs("pushti.storage.local", level="ERROR"):
            self.store.clear_all()
        self.assertEqual(self.store.profiles, [])
        self.assertIsNone(self.store.active_profile_id)
        self.assertTrue(self.store.needs_onboarding)

    def test_patch_rejects_duplicate_or_malformed_health_log_dates(self) -> None:
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)
        self.store.upsert_health_log(HealthLog(date="2024-01-01", steps=10))

        bad_patches = [
            [{"date": "2024-01-02", "steps": 1}, {"date": "2024-01-02", "steps": 2}],
            [{"date": "garbage"}],
            [{"date": "2024-01-02T08:00:00"}],
        ]
        for logs in bad_patches:
            with self.subTest(logs=logs):
                with self.assertRaises(ValidationError):
                    self.store.update_active_profile_data({"health_logs": logs})
        self.assertEqual(self.store.active_profile.health_logs, [HealthLog(date="2024-01-01", steps=10)])


class TestProfileLogs(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="pushti-test-"))
        self.store = ProfileStore(LocalStorage(self._tmp / "pushti.db"))
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)

    def tearDown(self) -> None:
        self.store.close()
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_calorie_logs_newest_first_per_day(self) -> None:
        self.store.add_calorie_log("breakfast", [], 300, logged_at="2024-01-01T08:00:00.000")
        self.store.add_calorie_log("dinner", [], 700, logged_at="2024-01-01T20:00:00.000")
        self.store.add_calorie_log("lunch", [], 500, logged_at="2024-01-01T13:00:00.000")
        self.store.add_calorie_log("next day", [], 400, logged_at="2024-01-02T08:00:00.000")

        day = self.store.calorie_logs_for(date(2024, 1, 1))
        self.assertEqual([log.food_text for log in day], ["dinner", "lunch", "breakfast"])
        self.assertEqual(self.store.active_profile.calorie_logs[0].food_text, "next day")

    def test_default_log_timestamp_carries_local_offset(self) -> None:
        log = self.store.add_calorie_log("tea", [], 50)
        self.assertIsNotNone(datetime.fromisoformat(log.date).tzinfo)
        self.assertEqual(parse_log_day(log.date), date.today())

    def test_health_log_upsert_replaces_same_day(self) -> None:
        self.store.upsert_health_log(HealthLog(date="2024-01-01", water=1000))
        self.store.upsert_health_log(HealthLog(date="2024-01-01", water=1500, steps=3000))
        self.store.upsert_health_log(HealthLog(date="2024-01-02", steps=100))

        logs = self.store.active_profile.health_logs
        self.assertEqual(len(logs), 2)
        self.assertEqual(self.store.health_log_for("2024-01-01").water, 1500)
        self.assertIsNone(self.store.health_log_for("2024-01-03"))

    def test_exercise_checklist_rolls_over_daily(self) -> None:
        self.store.set_exercise_suggestion(_exercise_plan())
        self.assertTrue(self.store.roll_exercise_checklist(date(2024, 1, 1)))
        self.store.set_exercise_done("Walking", True)
        self.assertFalse(self.store.roll_exercise_checklist(date(2024, 1, 1)))
        self.assertEqual(self.store.active_profile.exercise_checklist, ["Walking"])
        self.assertFalse(self.store.active_profile.all_exercises_done())

        self.store.set_exercise_done("Squats", True)
        self.assertTrue(self.store.active_profile.all_exercises_done())
        self.store.set_exercise_done("Squats", False)
        self.assertEqual(self.store.active_profile.exercise_checklist, ["Walking"])

        self.assertTrue(self.store.roll_exercise_checklist(date(2024, 1, 2)))
        self.assertEqual(self.store.active_profile.exercise_checklist, [])
        self.assertEqual(self.store.active_profile.last_exercise_check_date, "2024-01-02")

    def test_new_exercise_plan_resets_checklist(self) -> None:
        self.store.set_exercise_suggestion(_exercise_plan())
        self.store.set_exercise_done("Walking", True)
        self.store.set_exercise_suggestion(_exercise_plan())
        self.assertEqual(self.store.active_profile.exercise_checklist, [])


@unittest.skipUnless(hasattr(time, "tzset"), "time.tzset is not available")
class TestLogDayInLocalZone(unittest.TestCase):
    def setUp(self) -> None:
        self._old_tz = os.environ.get("TZ")
        self._tmp = Path(tempfile.mkdtemp(prefix="pushti-test-"))
        self.store = ProfileStore(LocalStorage(self._tmp / "pushti.db"))
        profile = self.store.add_profile(_fields())
        self.store.switch_profile(profile.id)

    def tearDown(self) -> None:
        self.store.close()
        shutil.rmtree(self._tmp, ignore_errors=True)
        if self._old_tz is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = self._old_tz
        time.tzset()

    def _pin_zone(self, zone: str) -> None:
        os.environ["TZ"] = zone
        time.tzset()

    def test_new_log_lands_on_today_far_east_of_utc(self) -> None:
        self._pin_zone("Pacific/Kiritimati")
        self.store.add_calorie_log("rice", [], 500)
        self.assertEqual(len(self.store.calorie_logs_for(date.today())), 1)

    def test_new_log_lands_on_today_far_west_of_utc(self) -> None:
        self._pin_zone("Etc/GMT+12")
        self.store.add_calorie_log("rice", [], 500)
        self.assertEqual(len(self.store.calorie_logs_for(date.today())), 1)

    def test_offset_timestamps_move_to_local_day(self) -> None:
        self._pin_zone("Pacific/Kiritimati")
        self.assertEqual(parse_log_day("2024-01-01T20:00:00Z"), date(2024, 1, 2))
        self.assertEqual(parse_log_day("2024-01-01T20:00:00"), date(2024, 1, 1))


if __name__ == "__main__":
    unittest.main()
