"""
Persistent user profile.

Holds the profile in memory, keeps the derived calorie goal in step with
the biometric fields and writes the whole profile to storage after every
mutation. Storage problems are logged and never interrupt the caller.
"""
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import ValidationError

from food_analyzer.core.errors import InvalidInputError, PersistenceFailure
from food_analyzer.core.logger import logger, log_error
from food_analyzer.models.profile import MEAL_HISTORY_LIMIT, MealEntry, Profile
from food_analyzer.services.calorie_calculator import calculate_daily_calorie_goal


PROFILE_KEY = "userProfile"

EDITABLE_FIELDS = frozenset({
    "weight", "height", "age", "gender", "activityLevel",
    "dietaryPreferences", "healthGoals", "allergies",
})


def with_calorie_goal(profile: Profile) -> Profile:
    """Return profile with dailyCalorieGoal recomputed or cleared."""
    goal = None
    if profile.has_biometrics():
        try:
            goal = calculate_daily_calorie_goal(
                profile.weight,
                profile.height,
                profile.age,
                profile.gender,
                profile.activityLevel,
            )
        except InvalidInputError as e:
            log_error("Calorie goal", e)
    return profile.model_copy(update={"dailyCalorieGoal": goal})


class ProfileStore:
    """Profile state backed by a key/value storage."""

    def __init__(self, storage) -> None:
        self._storage = storage
        self._profile = self._load()

    @property
    def profile(self) -> Profile:
        return self._profile.model_copy(deep=True)

    def _load(self) -> Profile:
        try:
            raw = self._storage.get(PROFILE_KEY)
        except PersistenceFailure as e:
            log_error("Profile load", e)
            return Profile()

        if raw is None:
            return Profile()

        try:
            profile = Profile.model_validate_json(raw)
        except ValidationError as e:
            log_error("Profile load", e)
            return Profile()

        logger.info("Loaded stored profile")
        return with_calorie_goal(profile)

    def _save(self) -> None:
        try:
            self._storage.set(PROFILE_KEY, self._profile.model_dump_json())
        except PersistenceFailure as e:
            log_error("Profile save", e)

    def update(self, fields: Mapping[str, Any]) -> Profile:
        """
        Merge a partial edit into the profile.

        Args:
            fields: Editable profile fields; None clears a field

        Returns:
            The updated profile

        Raises:
            ValueError: If a field name is not editable
            pydantic.ValidationError: If a value is invalid
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        merged = self._profile.model_dump()
        for name, value in fields.items():
            if value is None and name in ("dietaryPreferences", "healthGoals", "allergies"):
                value = []
            merged[name] = value

        self._profile = with_calorie_goal(Profile.model_validate(merged))
        self._save()
        return self.profile

    def append_meal(self, food_name: str, calories: int) -> Profile:
        """Record an analyzed meal, keeping only the most recent entries."""
        entry = MealEntry(
            timestamp=datetime.now(timezone.utc),
            foodName=food_name,
            calories=max(calories, 0),
        )
        history = [*self._profile.mealHistory, entry][-MEAL_HISTORY_LIMIT:]
        self._profile = self._profile.model_copy(update={"mealHistory": history})
        self._save()
        return self.profile

    def clear(self) -> Profile:
        """Reset to an empty profile and drop the stored copy."""
        self._profile = Profile()
        try:
            self._storage.remove(PROFILE_KEY)
        except PersistenceFailure as e:
            log_error("Profile clear", e)
        return self.profile
