"""
Food Calorie AI - Main Entry Point

Photograph a meal, get an AI calorie estimate and suggestions based on
your personal profile.
"""
from fastapi import FastAPI, Request
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from food_analyzer.core.config import settings
from food_analyzer.core.logger import logger
from food_analyzer.core.limiter import limiter
from food_analyzer.routes import analysis, profile


# Missing credentials only disable analysis; startup continues
if not settings.validate():
    logger.info("Configuration validated successfully")


# Create FastAPI app
app = FastAPI(
    title="Food Calorie AI",
    description="AI calorie estimation from food photos with a personal health profile",
    version="1.0.0"
)

# Attach rate limiter and its error handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


app.include_router(analysis.router, tags=["Analysis"])
app.include_router(profile.router, tags=["Profile"])


@app.get("/")
@limiter.limit("60/minute")
def root(request: Request):
    """Health check endpoint."""
    return {"message": "Food Calorie AI running"}


@app.get("/health")
def health():
    """
    Detailed health status.
    Returns 'degraded' if required environment variables are missing.
    """
    missing = settings.validate()

    if missing:
        return {
            "status": "degraded",
            "service": "food-calorie-ai",
            "version": "1.0.0",
            "missing_config": missing,
            "message": f"Missing required environment variables: {', '.join(missing)}"
        }

    return {
        "status": "healthy",
        "service": "food-calorie-ai",
        "version": "1.0.0"
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "food_analyzer.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False
    )
