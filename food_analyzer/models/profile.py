"""
Pydantic models for the user's health profile.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


MEAL_HISTORY_LIMIT = 10

BIOMETRIC_FIELDS = ("weight", "height", "age", "gender", "activityLevel")


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


def _normalize_tags(tags: list[str]) -> list[str]:
    """Strip tags, drop blanks and case-insensitive duplicates, keep first-seen order."""
    kept = []
    seen = set()
    for tag in tags:
        tag = tag.strip()
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            kept.append(tag)
    return kept


class MealEntry(BaseModel):
    """Single analyzed meal in the history."""

    timestamp: datetime
    foodName: str
    calories: int = Field(ge=0)


class Profile(BaseModel):
    """Biometrics, preferences and recent meals of the user."""

    model_config = ConfigDict(extra="ignore")

    weight: Optional[float] = Field(None, gt=0, allow_inf_nan=False, description="Weight in kg")
    height: Optional[float] = Field(None, gt=0, allow_inf_nan=False, description="Height in cm")
    age: Optional[int] = Field(None, gt=0, description="Age in years")
    gender: Optional[Gender] = None
    activityLevel: Optional[ActivityLevel] = None
    dailyCalorieGoal: Optional[int] = Field(None, description="Derived from the biometric fields")
    dietaryPreferences: list[str] = Field(default=[], description="e.g. vegetarian, vegan")
    healthGoals: list[str] = Field(default=[], description="e.g. weight_loss")
    allergies: list[str] = Field(default=[], description="Allergens to warn about")
    mealHistory: list[MealEntry] = Field(default=[], description="Most recent meals, oldest first")

    @field_validator("dietaryPreferences", "healthGoals", "allergies")
    @classmethod
    def _dedupe_tags(cls, value: list[str]) -> list[str]:
        return _normalize_tags(value)

    @field_validator("mealHistory")
    @classmethod
    def _keep_recent_meals(cls, value: list[MealEntry]) -> list[MealEntry]:
        return value[-MEAL_HISTORY_LIMIT:]

    def has_biometrics(self) -> bool:
        """True when every field the calorie goal depends on is set."""
        return all(getattr(self, name) is not None for name in BIOMETRIC_FIELDS)


class ProfileUpdate(BaseModel):
    """
    Partial profile edit.

    Only fields present in the request are applied; an explicit null
    clears the field. The calorie goal and meal history are not editable.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "weight": 70,
                "height": 175,
                "age": 30,
                "gender": "male",
                "activityLevel": "moderate",
                "dietaryPreferences": ["vegetarian"],
                "healthGoals": ["weight_loss"],
                "allergies": ["peanuts"]
            }
        },
    )

    weight: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    height: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    age: Optional[int] = Field(None, gt=0)
    gender: Optional[Gender] = None
    activityLevel: Optional[ActivityLevel] = None
    dietaryPreferences: Optional[list[str]] = None
    healthGoals: Optional[list[str]] = None
    allergies: Optional[list[str]] = None
