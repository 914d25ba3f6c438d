"""
Pydantic models for food analysis results.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from food_analyzer.models.profile import Profile


UNKNOWN_FOOD = "Unknown Food"

# Below this confidence the user is asked to clarify what the food is
CLARIFICATION_THRESHOLD = 0.3


class NutritionalInfo(BaseModel):
    """Macronutrient breakdown in grams."""

    model_config = ConfigDict(frozen=True)

    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fats: float = Field(0.0, ge=0)
    fiber: float = Field(0.0, ge=0)


class AnalysisResult(BaseModel):
    """Structured result of one analysis or clarification."""

    model_config = ConfigDict(frozen=True)

    foodName: str = UNKNOWN_FOOD
    calories: int = Field(0, ge=0)
    confidence: float = Field(0.0, ge=0, le=1)
    details: Optional[str] = None
    nutritionalInfo: Optional[NutritionalInfo] = None
    recommendations: list[str] = []

    @computed_field
    @property
    def needsClarification(self) -> bool:
        return self.confidence < CLARIFICATION_THRESHOLD


class ConfidenceLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalysisView(BaseModel):
    """Everything the client needs to render an analysis."""

    result: AnalysisResult
    suggestions: list[str] = []
    goalPercentage: Optional[int] = Field(None, description="Share of the daily calorie goal")
    confidenceLevel: ConfidenceLevel
    profile: Profile
