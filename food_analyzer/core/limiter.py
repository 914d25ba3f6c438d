"""
Rate limiter configuration.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from food_analyzer.core.config import settings

# Every analysis or clarification is a paid AI call
AI_RATE_LIMIT = "10/minute"

# Rate limiter - uses client IP as key
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
