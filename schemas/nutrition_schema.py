"""Schemas for the nutrition calculator request and response.

JSON bodies use camelCase keys; snake_case names are accepted on input too.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional


class CamelModel(BaseModel):
    """Base model that serializes field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MacroRatioSchema(CamelModel):
    """Fractions of calories from each macronutrient; must sum to 1.0."""

    carb_ratio: float = Field(..., examples=[0.4], description="Share of calories from carbohydrate (0-1)")
    protein_ratio: float = Field(..., examples=[0.3], description="Share of calories from protein (0-1)")
    fat_ratio: float = Field(..., examples=[0.3], description="Share of calories from fat (0-1)")


class NutritionCalculatorRequest(CamelModel):
    """Request payload for computing nutrition needs.

    Categorical fields are plain strings here; they are checked against the
    allowed values by the calculator so unknown values get a dedicated error.
    """

    weight: float = Field(..., examples=[70.0], description="Body weight in kilograms (> 0)")
    height: float = Field(..., examples=[175.0], description="Height in centimeters (> 0)")
    age: int = Field(..., examples=[30], description="Age in years (> 0)")
    gender: str = Field(..., examples=["MALE"], description="MALE or FEMALE")
    activity_level: str = Field(..., examples=["MODERATE"], description="SEDENTARY, LIGHT, MODERATE, ACTIVE or VERY_ACTIVE")
    goal: str = Field(..., examples=["MAINTENANCE"], description="WEIGHT_LOSS, FAT_LOSS, MAINTENANCE, WEIGHT_GAIN or MUSCLE_GAIN")
    macro_preset: Optional[str] = Field("balanced", examples=["balanced"], description="balanced, lowCarb, highProtein, keto or endurance")
    custom_macros: Optional[MacroRatioSchema] = Field(None, description="Custom ratios; override macroPreset when given")
    target_change_kg: Optional[float] = Field(None, examples=[5.0], description="Weight change used for the timeline estimate (defaults: 5 kg loss, 3 kg gain)")


class NutritionInputEcho(CamelModel):
    """Normalized copy of the request that produced the result."""

    weight: float
    height: float
    age: int
    gender: str
    activity_level: str
    goal: str
    macro_preset: str
    target_change_kg: Optional[float] = None


class MacroTotals(CamelModel):
    calories: int
    carbs: int
    protein: int
    fat: int


class BMISchema(CamelModel):
    value: float
    classification: str
    health_status: str


class NutritionCalculatorResponse(CamelModel):
    """Calculator output with rounded energy and macro targets."""

    input: NutritionInputEcho
    bmr: int
    tdee: int
    calorie_needs: int
    macros: MacroTotals
    macro_ratios: MacroRatioSchema
    water_needs: int = Field(..., description="Daily water needs in mL")
    bmi: BMISchema
    estimated_time_weeks: Optional[int] = None
    recommendations: List[str]


class MacroPresetsResponse(CamelModel):
    default: str
    presets: Dict[str, MacroRatioSchema]
