"""
Configuration and constants for Food Calorie AI.
"""
import os
from dotenv import load_dotenv

from food_analyzer.core.logger import logger

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # OpenAI Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")

    # Server Configuration
    PORT: int = int(os.getenv("PORT", 10000))
    HOST: str = "0.0.0.0"
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    # AI call limits
    AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", 60))
    AI_CONNECT_TIMEOUT_SECONDS: float = 10.0
    AI_MAX_ATTEMPTS: int = int(os.getenv("AI_MAX_ATTEMPTS", 1))  # 1 = no retry

    # AI generation settings
    AI_TEMPERATURE: float = 0.7
    AI_TOP_P: float = 0.8
    AI_MAX_TOKENS: int = 1024

    # Image intake
    MAX_IMAGE_BYTES: int = 10 * 1024 * 1024
    MAX_IMAGE_PIXELS: int = 40_000_000
    IMAGE_DOWNLOAD_TIMEOUT: int = 20

    # Profile persistence; empty disables durable storage
    PROFILE_STORAGE_PATH: str = os.getenv("PROFILE_STORAGE_PATH", "data/storage.json")

    def validate(self) -> list[str]:
        """
        Check configuration on startup.

        Missing credentials never stop the service; AI calls fail at
        invocation time instead.

        Returns:
            Names of missing environment variables
        """
        missing = []

        if not self.OPENAI_API_KEY:
            missing.append("OPENAI_API_KEY")

        if missing:
            logger.warning(
                f"Missing environment variables: {', '.join(missing)}. "
                "Food analysis will be unavailable until they are set."
            )
        return missing


settings = Settings()
