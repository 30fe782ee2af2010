"""Meal recognition service using LLMs."""

import base64
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import uuid4

from meal_windows.domain.recognition import RecognizedMeal
from meal_windows.domain.windows import LoggedMeal

_AMOUNT = {"type": "number", "minimum": 0.0}

MEAL_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "calories": _AMOUNT,
        "protein_g": _AMOUNT,
        "carbs_g": _AMOUNT,
        "fat_g": _AMOUNT,
        "health_score": {"type": "integer", "minimum": 0, "maximum": 100},
        "micronutrients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "amount": {"type": "number", "minimum": 0.0},
                    "unit": {"type": "string"},
                },
                "required": ["name", "amount", "unit"],
                "additionalProperties": False,
            },
        },
    },
    "required": [
        "name",
        "calories",
        "protein_g",
        "carbs_g",
        "fat_g",
        "health_score",
        "micronutrients",
    ],
    "additionalProperties": False,
}

_PROMPT = (
    "Estimate the nutrition of this meal. "
    "Return a short meal name, total calories, protein, carbs and fat in grams, "
    "a health score from 0 to 100, and notable micronutrients with units. "
    "Keep calories consistent with 4 kcal/g protein and carbs and 9 kcal/g fat."
)

_logger = logging.getLogger(__name__)


class MealRecognitionClient(Protocol):
    """Interface for LLM meal recognition."""

    async def recognize(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
        description: str | None = None,
    ) -> dict[str, object]:
        """Return structured meal recognition data."""


@dataclass
class MealRecognitionService:
    """Service that prepares recognition prompts and validates results."""

    client: MealRecognitionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def recognize_image(self, image_bytes: bytes) -> RecognizedMeal:
        """Recognize a meal from a photo."""
        raw = await self.client.recognize(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=_PROMPT,
            schema=MEAL_SCHEMA,
            image_data_url=_to_data_url(image_bytes),
        )
        return RecognizedMeal.model_validate(raw)

    async def recognize_description(self, description: str) -> RecognizedMeal:
        """Recognize a meal from a free-text description."""
        if not description.strip():
            raise ValueError("Meal description is empty")
        raw = await self.client.recognize(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=_PROMPT,
            schema=MEAL_SCHEMA,
            description=description,
        )
        meal = RecognizedMeal.model_validate(raw)
        _logger.info("Recognized meal %r at %.0f kcal", meal.name, meal.calories)
        return meal


def to_logged_meal(
    recognized: RecognizedMeal,
    timestamp: datetime,
    window_id: str | None = None,
    meal_id: str | None = None,
) -> LoggedMeal:
    """Turn a recognition result into a loggable meal."""
    return LoggedMeal(
        id=meal_id or str(uuid4()),
        name=recognized.name,
        timestamp=timestamp,
        calories=recognized.calories,
        protein=recognized.protein_g,
        carbs=recognized.carbs_g,
        fat=recognized.fat_g,
        window_id=window_id,
        health_score=recognized.health_score,
        micronutrients={item.name: item.amount for item in recognized.micronutrients},
    )


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
