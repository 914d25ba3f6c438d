"""
Tests for the persistent profile store.
"""
import json
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from food_analyzer.core.errors import PersistenceFailure
from food_analyzer.models.profile import MEAL_HISTORY_LIMIT
from food_analyzer.services.profile_store import PROFILE_KEY, ProfileStore
from food_analyzer.services.storage import JsonFileStorage, MemoryStorage


class TestUpdate:
    """Tests for merging partial profile edits."""

    def test_complete_biometrics_set_goal(self, store, sample_profile_update):
        profile = store.update(sample_profile_update)

        assert profile.dailyCalorieGoal == 2628
        assert profile.dietaryPreferences == ["vegetarian"]

    def test_partial_biometrics_leave_goal_unset(self, store):
        profile = store.update({"weight": 70, "height": 175})

        assert profile.weight == 70
        assert profile.dailyCalorieGoal is None

    def test_updates_merge_last_write_wins(self, store, sample_profile_update):
        store.update(sample_profile_update)
        profile = store.update({"weight": 80})

        assert profile.weight == 80
        assert profile.height == 175
        assert profile.dailyCalorieGoal == 2836

    def test_clearing_a_biometric_clears_goal(self, store, sample_profile_update):
        store.update(sample_profile_update)
        profile = store.update({"age": None})

        assert profile.age is None
        assert profile.dailyCalorieGoal is None

    def test_update_is_idempotent(self, store, sample_profile_update):
        first = store.update(sample_profile_update)
        second = store.update(sample_profile_update)

        assert first == second

    def test_tags_are_deduplicated(self, store):
        profile = store.update({"allergies": ["peanuts", " peanuts ", "", "milk"]})

        assert profile.allergies == ["peanuts", "milk"]

    def test_tags_are_deduplicated_case_insensitively(self, store):
        profile = store.update({"allergies": ["Peanuts", "peanuts", "PEANUTS"], "healthGoals": ["Weight_Loss", "weight_loss"]})

        assert profile.allergies == ["Peanuts"]
        assert profile.healthGoals == ["Weight_Loss"]

    def test_none_clears_tag_list(self, store):
        store.update({"allergies": ["peanuts"]})

        assert store.update({"allergies": None}).allergies == []

    def test_goal_is_not_editable(self, store):
        with pytest.raises(ValueError, match="dailyCalorieGoal"):
            store.update({"dailyCalorieGoal": 1200})

    def test_invalid_value_is_rejected(self, store):
        with pytest.raises(ValidationError):
            store.update({"weight": -3})

    def test_returned_profile_is_a_copy(self, store):
        profile = store.update({"allergies": ["peanuts"]})
        profile.allergies.append("milk")

        assert store.profile.allergies == ["peanuts"]


class TestMealHistory:
    """Tests for the bounded meal history."""

    def test_append_records_meal(self, store):
        profile = store.append_meal("Apple", 95)

        assert len(profile.mealHistory) == 1
        assert profile.mealHistory[0].foodName == "Apple"
        assert profile.mealHistory[0].calories == 95
        assert profile.mealHistory[0].timestamp.tzinfo is not None

    def test_history_never_exceeds_limit(self, store):
        for i in range(MEAL_HISTORY_LIMIT + 1):
            store.append_meal(f"Meal {i}", 100 + i)

        history = store.profile.mealHistory
        assert len(history) == MEAL_HISTORY_LIMIT
        assert history[0].foodName == "Meal 1"
        assert history[-1].foodName == f"Meal {MEAL_HISTORY_LIMIT}"

    def test_history_survives_profile_edits(self, store, sample_profile_update):
        store.append_meal("Apple", 95)
        profile = store.update(sample_profile_update)

        assert [m.foodName for m in profile.mealHistory] == ["Apple"]


class TestClear:
    """Tests for resetting the profile."""

    def test_clear_resets_profile_and_storage(self, sample_profile_update):
        storage = MemoryStorage()
        store = ProfileStore(storage)
        store.update(sample_profile_update)
        store.append_meal("Apple", 95)

        profile = store.clear()

        assert profile.dailyCalorieGoal is None
        assert profile.mealHistory == []
        assert storage.get(PROFILE_KEY) is None


class TestPersistence:
    """Tests for loading and saving through storage backends."""

    def test_failed_replace_leaves_no_temp_file(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "storage.json")

        with patch("food_analyzer.services.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceFailure, match="disk full"):
                storage.set(PROFILE_KEY, "{}")

        assert list(tmp_path.iterdir()) == []

    def test_round_trip_through_file(self, tmp_path, sample_profile_update):
        path = tmp_path / "storage.json"
        store = ProfileStore(JsonFileStorage(path))
        store.update(sample_profile_update)
        store.append_meal("Apple", 95)

        reloaded = ProfileStore(JsonFileStorage(path))

        assert reloaded.profile == store.profile
        assert PROFILE_KEY in json.loads(path.read_text())

    def test_corrupt_file_falls_back_to_empty_profile(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json")

        store = ProfileStore(JsonFileStorage(path))

        assert store.profile.weight is None
        assert store.profile.mealHistory == []

    def test_corrupt_file_is_replaced_on_next_write(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[1, 2, 3]")
        store = ProfileStore(JsonFileStorage(path))

        store.update({"weight": 70})

        assert ProfileStore(JsonFileStorage(path)).profile.weight == 70

    def test_invalid_stored_profile_falls_back_to_empty(self):
        storage = MemoryStorage()
        storage.set(PROFILE_KEY, json.dumps({"weight": "heavy"}))

        assert ProfileStore(storage).profile.weight is None

    def test_stale_goal_is_recomputed_on_load(self, sample_profile_update):
        storage = MemoryStorage()
        storage.set(PROFILE_KEY, json.dumps({**sample_profile_update, "dailyCalorieGoal": 1}))

        assert ProfileStore(storage).profile.dailyCalorieGoal == 2628

    def test_write_failure_keeps_profile_in_memory(self, sample_profile_update):
        storage = MagicMock()
        storage.get.return_value = None
        storage.set.side_effect = PersistenceFailure("disk full")
        store = ProfileStore(storage)

        profile = store.update(sample_profile_update)

        assert profile.dailyCalorieGoal == 2628
        assert store.profile.dailyCalorieGoal == 2628

    def test_read_failure_starts_empty(self):
        storage = MagicMock()
        storage.get.side_effect = PersistenceFailure("storage disabled")

        assert ProfileStore(storage).profile.weight is None
