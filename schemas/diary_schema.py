"""Schemas for food diary summaries."""

import datetime
from pydantic import Field
from typing import Dict, List, Optional

from .nutrition_schema import CamelModel


class FoodNutritionSchema(CamelModel):
    """Nutrition of a food per 100 g."""

    calories: float = Field(..., ge=0, allow_inf_nan=False, examples=[165.0])
    carbs: float = Field(..., ge=0, allow_inf_nan=False, examples=[0.0])
    protein: float = Field(..., ge=0, allow_inf_nan=False, examples=[31.0])
    fat: float = Field(..., ge=0, allow_inf_nan=False, examples=[3.6])
    fiber: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    sugar: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    sodium: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Sodium in mg")


class DiaryEntrySchema(CamelModel):
    """A logged portion of a food."""

    food: str = Field(..., min_length=1, examples=["Chicken breast"])
    nutrition: FoodNutritionSchema
    quantity: float = Field(..., examples=[150.0], description="Portion size in grams (> 0)")
    meal: str = Field(..., examples=["LUNCH"], description="Meal the entry belongs to")


class DiarySummaryRequest(CamelModel):
    date: Optional[datetime.date] = Field(None, description="Day being summarized (defaults to today)")
    entries: List[DiaryEntrySchema] = Field(default_factory=list)


class DiarySummaryResponse(CamelModel):
    """Entries grouped by meal with per-meal and daily totals."""

    date: str
    meals: Dict[str, List[dict]]
    meal_totals: Dict[str, dict]
    totals: dict
    formatted: Dict[str, str]
