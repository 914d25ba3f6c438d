"""
OpenAI API service for food analysis.

Returns the model's raw text; turning it into structured data is the
job of result_parser.
"""
import logging
from typing import Optional

import openai
from openai import AsyncOpenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from food_analyzer.core.config import settings
from food_analyzer.core.errors import CollaboratorFailure
from food_analyzer.core.logger import logger, log_ai_call, log_error


_client: Optional[AsyncOpenAI] = None

# Per-call timeout so a stalled response cannot leave an analysis hanging
OPENAI_TIMEOUT = openai.Timeout(
    settings.AI_TIMEOUT_SECONDS,
    connect=settings.AI_CONNECT_TIMEOUT_SECONDS,
)

# Transient errors only. AI_MAX_ATTEMPTS defaults to 1, which disables retries.
_openai_retry = retry(
    stop=stop_after_attempt(max(settings.AI_MAX_ATTEMPTS, 1)),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((openai.RateLimitError, openai.APIConnectionError)),
    before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
    reraise=True,
)


def get_client() -> AsyncOpenAI:
    """
    Return the shared OpenAI client, creating it on first use.

    Raises:
        CollaboratorFailure: If OPENAI_API_KEY is not configured
    """
    global _client
    if _client is None:
        if not settings.OPENAI_API_KEY:
            raise CollaboratorFailure("AI service is not configured. Set OPENAI_API_KEY and try again.")
        _client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
    return _client


@_openai_retry
async def _create_completion(messages: list[dict]) -> str:
    response = await get_client().chat.completions.create(
        model=settings.OPENAI_MODEL,
        messages=messages,
        temperature=settings.AI_TEMPERATURE,
        top_p=settings.AI_TOP_P,
        max_tokens=settings.AI_MAX_TOKENS,
        timeout=OPENAI_TIMEOUT,
    )
    return (response.choices[0].message.content or "").strip()


async def call_text_api(operation: str, messages: list[dict], fallback_message: str) -> str:
    """
    Send a chat request and return the reply text.

    Args:
        operation: Name used in logs
        messages: Chat messages
        fallback_message: User-facing message when the error has none

    Returns:
        Stripped reply text

    Raises:
        CollaboratorFailure: On any API error, timeout or empty reply
    """
    log_ai_call(operation, settings.OPENAI_MODEL)

    try:
        text = await _create_completion(messages)
    except openai.APITimeoutError as e:
        log_error(operation, e)
        raise CollaboratorFailure("The AI service took too long to respond. Please try again.") from e
    except openai.APIError as e:
        log_error(operation, e)
        raise CollaboratorFailure(getattr(e, "message", None) or fallback_message) from e

    if not text:
        logger.warning(f"{operation} returned an empty reply")
        raise CollaboratorFailure(fallback_message)

    logger.info(f"{operation} call successful")
    logger.debug(f"{operation} reply: {text}")
    return text


# --- Food Analysis ---

ANALYSIS_PROMPT = """
You are a friendly and enthusiastic AI nutritionist and food expert.
Analyze the food in this image in detail.

{user_context}

Provide:
1. The exact name of the food and all visible ingredients
2. Estimated calories (as accurate as possible)
3. Your confidence level (0-1)
4. Nutritional breakdown: protein (g), carbs (g), fats (g), fiber (g)
5. Health benefits and tips
6. How this fits into a balanced diet

If you are not sure what the food is (confidence < 0.3), give a low confidence value.

Format your response exactly as: name|calories|confidence|protein,carbs,fats,fiber|details|tips

Example: Grilled Salmon with Quinoa|450|0.95|38,35,22,6|Fresh salmon fillet (6 oz) with 1 cup quinoa and roasted vegetables. Rich in omega-3 fatty acids, protein, and fiber.|Great choice for muscle recovery and brain health! Try adding more leafy greens for extra nutrients.
"""


async def analyze_food_image(
    image_base64: str,
    mime_type: str = "image/jpeg",
    daily_calorie_goal: Optional[int] = None
) -> str:
    """
    Ask the model to identify and estimate a food image.

    Args:
        image_base64: Base64 encoded image
        mime_type: Image MIME type
        daily_calorie_goal: User's goal, added as context when known

    Returns:
        Raw reply in the six-field analysis format
    """
    user_context = (
        f"The user's daily calorie goal is {daily_calorie_goal} calories."
        if daily_calorie_goal else ""
    )

    messages = [{
        "role": "user",
        "content": [
            {
                "type": "image_url",
                "image_url": {"url": f"data:{mime_type};base64,{image_base64}"}
            },
            {"type": "text", "text": ANALYSIS_PROMPT.format(user_context=user_context)},
        ]
    }]

    return await call_text_api(
        "Food analysis",
        messages,
        "Failed to analyze the image. Please try again."
    )


# --- Clarification ---

CLARIFICATION_PROMPT = (
    'Based on the clarification that this is "{hint}", please provide an updated '
    "analysis in the format: name|calories|confidence|details"
)


async def clarify_food(hint: str) -> str:
    """
    Re-query the model with the user's description of the food.

    Returns:
        Raw reply in the four-field clarification format
    """
    messages = [{"role": "user", "content": CLARIFICATION_PROMPT.format(hint=hint.strip())}]

    return await call_text_api(
        "Clarification",
        messages,
        "Failed to process clarification. Please try again."
    )
