"""Models for meal recognition results."""

from pydantic import BaseModel, Field


class Micronutrient(BaseModel):
    """Single micronutrient estimate."""

    name: str
    amount: float = Field(ge=0.0)
    unit: str


class RecognizedMeal(BaseModel):
    """Structured nutrition estimate for a photographed or described meal."""

    name: str
    calories: float = Field(ge=0.0)
    protein_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)
    health_score: int = Field(ge=0, le=100)
    micronutrients: list[Micronutrient] = Field(default_factory=list)
