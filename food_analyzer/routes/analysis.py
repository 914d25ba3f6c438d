"""
Food analysis and clarification routes.
"""
import time

import httpx
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from food_analyzer.core.errors import (
    AnalysisInProgressError,
    CollaboratorFailure,
    InvalidImageError,
    NoAnalysisError,
)
from food_analyzer.core.limiter import AI_RATE_LIMIT, limiter
from food_analyzer.core.logger import log_request, log_response, log_error
from food_analyzer.models.analysis import AnalysisView
from food_analyzer.models.schemas import AnalyzeUrlRequest, ClarificationRequest
from food_analyzer.services import image_service
from food_analyzer.services.analyzer import FoodAnalyzer, get_analyzer

router = APIRouter()


async def _run_analysis(analyzer: FoodAnalyzer, image_bytes: bytes) -> AnalysisView:
    try:
        image_base64, mime_type = image_service.load_image(image_bytes)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return await analyzer.analyze(image_base64, mime_type)
    except AnalysisInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CollaboratorFailure as e:
        raise HTTPException(status_code=502, detail=e.message)


@router.post("/analyze", response_model=AnalysisView)
@limiter.limit(AI_RATE_LIMIT)
async def analyze_food(
    request: Request,
    file: UploadFile = File(...),
    analyzer: FoodAnalyzer = Depends(get_analyzer),
):
    """
    Analyze an uploaded food photo.

    Returns the calorie estimate, nutrition breakdown and suggestions
    based on the stored profile, and adds the meal to the history.
    """
    log_request("/analyze")
    started = time.perf_counter()
    image_bytes = await file.read()
    view = await _run_analysis(analyzer, image_bytes)
    log_response("/analyze", "success", (time.perf_counter() - started) * 1000)
    return view


@router.post("/analyze-url", response_model=AnalysisView)
@limiter.limit(AI_RATE_LIMIT)
async def analyze_food_url(
    request: Request,
    req: AnalyzeUrlRequest,
    analyzer: FoodAnalyzer = Depends(get_analyzer),
):
    """Analyze a food photo downloaded from a URL."""
    log_request("/analyze-url")
    started = time.perf_counter()

    try:
        image_bytes = await image_service.download_image(req.imageUrl)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.HTTPError as e:
        log_error("Image download", e)
        raise HTTPException(status_code=400, detail="Could not download image")

    view = await _run_analysis(analyzer, image_bytes)
    log_response("/analyze-url", "success", (time.perf_counter() - started) * 1000)
    return view


@router.post("/clarify", response_model=AnalysisView)
@limiter.limit(AI_RATE_LIMIT)
async def clarify_food(
    request: Request,
    req: ClarificationRequest,
    analyzer: FoodAnalyzer = Depends(get_analyzer),
):
    """
    Re-run a low-confidence analysis with the user's description of the food.
    """
    log_request("/clarify")
    started = time.perf_counter()

    try:
        view = await analyzer.clarify(req.clarification)
    except (NoAnalysisError, AnalysisInProgressError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CollaboratorFailure as e:
        raise HTTPException(status_code=502, detail=e.message)

    log_response("/clarify", "success", (time.perf_counter() - started) * 1000)
    return view

@router.get("/analysis", response_model=AnalysisView)
def get_analysis(analyzer: FoodAnalyzer = Depends(get_analyzer)):
    """Latest analysis, with suggestions against the current profile."""
    view = analyzer.current_view()
    if view is None:
        raise HTTPException(status_code=404, detail="No analysis yet")
    return view
