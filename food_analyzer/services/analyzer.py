"""
Analysis controller.

Owns the profile store, the latest analysis result and the busy flag that
keeps at most one AI round-trip in flight.
"""
from contextlib import contextmanager
from typing import Optional

from food_analyzer.core.config import settings
from food_analyzer.core.errors import AnalysisInProgressError, NoAnalysisError
from food_analyzer.core.logger import logger
from food_analyzer.models.analysis import AnalysisResult, AnalysisView
from food_analyzer.services import openai_service
from food_analyzer.services.profile_store import ProfileStore
from food_analyzer.services.recommendations import (
    build_recommendations,
    confidence_level,
    goal_percentage,
)
from food_analyzer.services.result_parser import parse_analysis_reply, parse_clarification_reply
from food_analyzer.services.storage import JsonFileStorage, MemoryStorage


class FoodAnalyzer:
    """Runs analyses and clarifications against the current profile."""

    def __init__(self, store: ProfileStore) -> None:
        self.store = store
        self._result: Optional[AnalysisResult] = None
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self._result

    @contextmanager
    def _request_slot(self):
        # Checked and set before the first await, so the event loop cannot interleave
        if self._busy:
            raise AnalysisInProgressError("An analysis is already in progress.")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def current_view(self) -> Optional[AnalysisView]:
        """Latest result with suggestions computed against the current profile."""
        if self._result is None:
            return None
        profile = self.store.profile
        return AnalysisView(
            result=self._result,
            suggestions=build_recommendations(self._result, profile),
            goalPercentage=goal_percentage(self._result, profile),
            confidenceLevel=confidence_level(self._result.confidence),
            profile=profile,
        )

    async def analyze(self, image_base64: str, mime_type: str) -> AnalysisView:
        """
        Analyze a food image and record it in the meal history.

        Raises:
            AnalysisInProgressError: If another request is running
            CollaboratorFailure: If the AI call fails; the previous result is kept
        """
        with self._request_slot():
            reply = await openai_service.analyze_food_image(
                image_base64,
                mime_type,
                daily_calorie_goal=self.store.profile.dailyCalorieGoal,
            )

        self._result = parse_analysis_reply(reply)
        logger.info(
            f"Analyzed '{self._result.foodName}': {self._result.calories} kcal "
            f"(confidence {self._result.confidence:.2f})"
        )
        self.store.append_meal(self._result.foodName, self._result.calories)
        return self.current_view()

    async def clarify(self, hint: str) -> AnalysisView:
        """
        Replace the latest result using the user's description of the food.

        Raises:
            NoAnalysisError: If nothing has been analyzed yet
            ValueError: If the hint is blank
            AnalysisInProgressError: If another request is running
            CollaboratorFailure: If the AI call fails; the previous result is kept
        """
        if self._result is None:
            raise NoAnalysisError("Analyze an image before clarifying it.")
        if not hint or not hint.strip():
            raise ValueError("Clarification text is required.")

        with self._request_slot():
            reply = await openai_service.clarify_food(hint)

        self._result = parse_clarification_reply(reply)
        logger.info(f"Clarified as '{self._result.foodName}': {self._result.calories} kcal")
        return self.current_view()


_analyzer: Optional[FoodAnalyzer] = None


def build_analyzer(storage_path: str = "") -> FoodAnalyzer:
    """Create an analyzer whose profile lives at storage_path (memory if empty)."""
    storage = JsonFileStorage(storage_path) if storage_path else MemoryStorage()
    return FoodAnalyzer(ProfileStore(storage))


def get_analyzer() -> FoodAnalyzer:
    """FastAPI dependency - the process-wide analyzer, profile loaded once."""
    global _analyzer
    if _analyzer is None:
        _analyzer = build_analyzer(settings.PROFILE_STORAGE_PATH)
    return _analyzer
