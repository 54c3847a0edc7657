"""Pydantic schema package for request and response models."""

from .nutrition_schema import (
    NutritionCalculatorRequest,
    NutritionCalculatorResponse,
    MacroRatioSchema,
    MacroPresetsResponse,
)
from .diary_schema import DiarySummaryRequest, DiarySummaryResponse

__all__ = [
    "NutritionCalculatorRequest",
    "NutritionCalculatorResponse",
    "MacroRatioSchema",
    "MacroPresetsResponse",
    "DiarySummaryRequest",
    "DiarySummaryResponse",
]
