"""
Personalized suggestions from an analysis result and the user's profile.
"""
import math
from typing import Optional

from food_analyzer.models.analysis import AnalysisResult, ConfidenceLevel
from food_analyzer.models.profile import Profile


PORTION_WARNING_CALORIES = 500
MEDIUM_CONFIDENCE = 0.3
HIGH_CONFIDENCE = 0.7


def _has_tag(tags: list[str], wanted: str) -> bool:
    return any(tag.lower() == wanted for tag in tags)


def build_recommendations(result: AnalysisResult, profile: Profile) -> list[str]:
    """
    Build the suggestion list for one analysis.

    Rules are applied in a fixed order and every matching rule contributes:
    remaining calories, vegetarian alternative, allergen warnings, portion
    size for weight loss.
    """
    suggestions = []
    details = (result.details or "").lower()

    if profile.dailyCalorieGoal is not None:
        remaining = profile.dailyCalorieGoal - result.calories
        suggestions.append(
            f"You have {remaining} calories remaining of your {profile.dailyCalorieGoal} kcal daily goal."
        )

    if _has_tag(profile.dietaryPreferences, "vegetarian") and "meat" in details:
        suggestions.append(
            "This dish appears to contain meat. Consider a plant-based alternative such as tofu, tempeh or legumes."
        )

    for allergen in profile.allergies:
        if allergen.lower() in details:
            suggestions.append(f"Warning: this food may contain {allergen}, which is listed in your allergies.")

    if _has_tag(profile.healthGoals, "weight_loss") and result.calories > PORTION_WARNING_CALORIES:
        suggestions.append(
            "This meal is high in calories for your weight loss goal. Consider a smaller portion or sharing it."
        )

    return suggestions


def goal_percentage(result: AnalysisResult, profile: Profile) -> Optional[int]:
    """Share of the daily calorie goal covered by this food, in percent, rounded half up."""
    if not profile.dailyCalorieGoal:
        return None
    return math.floor(result.calories / profile.dailyCalorieGoal * 100 + 0.5)


def confidence_level(confidence: float) -> ConfidenceLevel:
    if confidence < MEDIUM_CONFIDENCE:
        return ConfidenceLevel.LOW
    if confidence < HIGH_CONFIDENCE:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH
