"""
Error types for Food Calorie AI.

Only CollaboratorFailure is meant to reach the user; the rest are
recovered where they occur or mapped to HTTP status codes by the routes.
"""


class FoodAnalyzerError(Exception):
    """Base class for application errors."""


class ParseDegraded(FoodAnalyzerError):
    """AI reply did not match the expected pipe-delimited schema."""


class InvalidInputError(FoodAnalyzerError):
    """Calorie goal requested with incomplete or invalid biometrics."""


class CollaboratorFailure(FoodAnalyzerError):
    """The external AI service failed, timed out or is not configured."""

    def __init__(self, message: str = "Failed to analyze the image. Please try again."):
        super().__init__(message)
        self.message = message


class PersistenceFailure(FoodAnalyzerError):
    """Profile storage could not be read or written."""


class AnalysisInProgressError(FoodAnalyzerError):
    """An analysis or clarification is already running."""


class NoAnalysisError(FoodAnalyzerError):
    """Clarification requested before any analysis."""


class InvalidImageError(FoodAnalyzerError):
    """Uploaded or downloaded data is not a usable image."""
