"""
Daily calorie goal from biometrics.

Revised Harris-Benedict BMR scaled by an activity factor.
"""
import math

from food_analyzer.core.errors import InvalidInputError
from food_analyzer.models.profile import ActivityLevel, Gender


ACTIVITY_FACTORS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}


def _require_positive(name: str, value) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidInputError(f"{name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number) or number <= 0:
        raise InvalidInputError(f"{name} must be a positive finite number, got {value!r}")
    return number


def _coerce_enum(enum_cls, name: str, value):
    if value is None:
        raise InvalidInputError(f"{name} is required")
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidInputError(f"Unknown {name}: {value!r}")


def calculate_bmr(weight: float, height: float, age: float, gender: Gender | str) -> float:
    """
    Basal metabolic rate in kcal/day.

    Args:
        weight: Weight in kg
        height: Height in cm
        age: Age in years
        gender: male uses the male equation; female and other the female one

    Raises:
        InvalidInputError: If any input is missing, non-finite or not positive
    """
    weight = _require_positive("weight", weight)
    height = _require_positive("height", height)
    age = _require_positive("age", age)
    gender = _coerce_enum(Gender, "gender", gender)

    if gender is Gender.MALE:
        return 88.362 + 13.397 * weight + 4.799 * height - 5.677 * age
    return 447.593 + 9.247 * weight + 3.098 * height - 4.330 * age


def calculate_daily_calorie_goal(
    weight: float,
    height: float,
    age: float,
    gender: Gender | str,
    activity_level: ActivityLevel | str
) -> int:
    """
    Daily calorie goal: BMR times activity factor, rounded half up to the
    nearest kcal.

    Raises:
        InvalidInputError: If any input is missing or invalid
    """
    bmr = calculate_bmr(weight, height, age, gender)
    factor = ACTIVITY_FACTORS[_coerce_enum(ActivityLevel, "activity level", activity_level)]
    return math.floor(bmr * factor + 0.5)
