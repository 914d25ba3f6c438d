"""
Parsing of the AI service's pipe-delimited replies.

The model is asked to answer in one of two layouts:

    analysis:       name|calories|confidence|protein,carbs,fats,fiber|details|tips
    clarification:  name|calories|confidence|details

The caller picks the layout. Parsing never raises: a reply with too few
fields degrades to the default result, and each field that cannot be read
falls back to its own default.
"""
import math
import re
from enum import Enum
from typing import Optional

from food_analyzer.core.errors import ParseDegraded
from food_analyzer.core.logger import logger
from food_analyzer.models.analysis import UNKNOWN_FOOD, AnalysisResult, NutritionalInfo


FIELD_DELIMITER = "|"
NUTRITION_DELIMITER = ","

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")
_LEADING_FLOAT = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


class ReplySchema(Enum):
    ANALYSIS = ("name", "calories", "confidence", "nutrition", "details", "tips")
    CLARIFICATION = ("name", "calories", "confidence", "details")

    @property
    def arity(self) -> int:
        return len(self.value)


def parse_int(text: str, default: int = 0) -> int:
    """Read the leading integer of text ("450 kcal" -> 450)."""
    match = _LEADING_INT.match(text or "")
    return int(match.group(1)) if match else default


def parse_float(text: str, default: float = 0.0) -> float:
    """Read the leading real number of text; non-finite values give default."""
    match = _LEADING_FLOAT.match(text or "")
    if not match:
        return default
    value = float(match.group(1))
    return value if math.isfinite(value) else default


def parse_nutrition(text: str) -> NutritionalInfo:
    """
    Parse "protein,carbs,fats,fiber" grams.

    Missing, unparseable or negative sub-fields are coerced to 0.
    """
    parts = (text or "").split(NUTRITION_DELIMITER)
    parts += [""] * (4 - len(parts))
    protein, carbs, fats, fiber = (max(parse_float(p), 0.0) for p in parts[:4])
    return NutritionalInfo(protein=protein, carbs=carbs, fats=fats, fiber=fiber)


def split_tips(text: str) -> list[str]:
    """Split free-text tips into sentences."""
    return [tip.strip() for tip in _SENTENCE_END.split(text or "") if tip.strip()]


def split_fields(text: str, schema: ReplySchema) -> dict[str, str]:
    """
    Split a reply into the named fields of schema.

    Surplus delimiters are kept inside the last field.

    Raises:
        ParseDegraded: If the reply has fewer fields than the schema
    """
    fields = [f.strip() for f in (text or "").strip().split(FIELD_DELIMITER, schema.arity - 1)]
    if len(fields) < schema.arity:
        raise ParseDegraded(
            f"expected {schema.arity} fields for {schema.name.lower()} reply, got {len(fields)}"
        )
    return dict(zip(schema.value, fields))


def parse_reply(text: str, schema: ReplySchema) -> AnalysisResult:
    """
    Convert a raw AI reply into an AnalysisResult.

    Args:
        text: Raw reply text
        schema: Layout the reply was requested in

    Returns:
        Parsed result; defaults where the reply could not be read
    """
    try:
        fields = split_fields(text, schema)
    except ParseDegraded as e:
        logger.warning(f"AI reply degraded to defaults: {e}")
        return AnalysisResult()

    confidence = min(max(parse_float(fields["confidence"]), 0.0), 1.0)
    details: Optional[str] = fields["details"] or None

    nutrition = None
    recommendations = []
    if schema is ReplySchema.ANALYSIS:
        nutrition = parse_nutrition(fields["nutrition"])
        recommendations = split_tips(fields["tips"])

    return AnalysisResult(
        foodName=fields["name"] or UNKNOWN_FOOD,
        calories=max(parse_int(fields["calories"]), 0),
        confidence=confidence,
        details=details,
        nutritionalInfo=nutrition,
        recommendations=recommendations,
    )


def parse_analysis_reply(text: str) -> AnalysisResult:
    return parse_reply(text, ReplySchema.ANALYSIS)


def parse_clarification_reply(text: str) -> AnalysisResult:
    return parse_reply(text, ReplySchema.CLARIFICATION)
