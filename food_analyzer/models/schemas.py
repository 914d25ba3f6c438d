"""
Pydantic models for request validation.
"""
from pydantic import BaseModel, Field


class AnalyzeUrlRequest(BaseModel):
    """Request model for analyzing an image by URL."""
    imageUrl: str


class ClarificationRequest(BaseModel):
    """Free-text hint used to re-query a low-confidence analysis."""
    clarification: str = Field(..., min_length=1, max_length=500)
