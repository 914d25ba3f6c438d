"""
Personal profile routes.
"""
from fastapi import APIRouter, Depends

from food_analyzer.core.logger import log_request
from food_analyzer.models.profile import Profile, ProfileUpdate
from food_analyzer.services.analyzer import FoodAnalyzer, get_analyzer

router = APIRouter(prefix="/profile")


@router.get("", response_model=Profile)
def read_profile(analyzer: FoodAnalyzer = Depends(get_analyzer)):
    """Current profile including the derived daily calorie goal."""
    return analyzer.store.profile


@router.patch("", response_model=Profile)
def update_profile(req: ProfileUpdate, analyzer: FoodAnalyzer = Depends(get_analyzer)):
    """
    Apply a partial profile edit.

    The daily calorie goal is recomputed whenever weight, height, age,
    gender and activity level are all set, and cleared otherwise.
    """
    log_request("/profile", "PATCH")
    return analyzer.store.update(req.model_dump(exclude_unset=True))


@router.delete("", response_model=Profile)
def clear_profile(analyzer: FoodAnalyzer = Depends(get_analyzer)):
    """Reset the profile and delete the stored copy."""
    log_request("/profile", "DELETE")
    return analyzer.store.clear()
