"""Nutrition API router.

Exposes the nutrition needs calculator, the macro preset table and the
food diary summary. Handlers stay thin: they convert request schemas into
service inputs and service results into response schemas. Domain errors
raised by the services are rendered by `core.error_handlers`.
"""

from dataclasses import asdict
from datetime import date as _date

from fastapi import APIRouter

from core.logger import get_logger
from core.models import NutritionResult
from schemas import (
    NutritionCalculatorRequest,
    NutritionCalculatorResponse,
    MacroPresetsResponse,
    DiarySummaryRequest,
    DiarySummaryResponse,
)
from services.food_diary import DiaryEntry, NutritionFacts, summarize_diary
from services.nutrition_calculator import DEFAULT_PRESET, MACRO_PRESETS, nutrition_calculator

logger = get_logger("api.nutrition")
router = APIRouter(prefix="/api/nutrition", tags=["nutrition"])


@router.post("/calculator", response_model=NutritionCalculatorResponse)
def calculate_nutrition(payload: NutritionCalculatorRequest):
    """Compute energy, macro and hydration targets for one person.

    Args:
        payload: Biometrics, activity level, goal and macro choice.

    Returns:
        `NutritionCalculatorResponse` with rounded targets and recommendations.

    Raises:
        ValidationError: A biometric value is missing or not positive.
        UnknownEnumError: gender, activityLevel, goal (or, in strict mode,
            macroPreset) is not recognised.
        InvalidRatioError: customMacros do not sum to 1.0.
    """
    logger.info("Nutrition calculation requested: goal=%s activity=%s", payload.goal, payload.activity_level)
    custom = payload.custom_macros.model_dump() if payload.custom_macros else None
    result = nutrition_calculator.calculate(
        weight=payload.weight,
        height=payload.height,
        age=payload.age,
        gender=payload.gender,
        activity_level=payload.activity_level,
        goal=payload.goal,
        macro_preset=payload.macro_preset,
        custom_macros=custom,
        target_change_kg=payload.target_change_kg,
    )
    return to_response(result)


def to_response(result: NutritionResult) -> NutritionCalculatorResponse:
    """Round a calculator result into its response schema."""
    req = result.request
    body = req.biometrics
    return NutritionCalculatorResponse(
        input={
            "weight": body.weight_kg,
            "height": body.height_cm,
            "age": body.age_years,
            "gender": body.sex.value,
            "activity_level": req.activity_level.value,
            "goal": req.goal.value,
            "macro_preset": req.macro_preset,
            "target_change_kg": req.target_change_kg,
        },
        bmr=round(result.bmr),
        tdee=round(result.tdee),
        calorie_needs=round(result.calorie_needs),
        macros=result.macros.rounded(),
        macro_ratios={
            "carb_ratio": result.macro_ratios.carb_ratio,
            "protein_ratio": result.macro_ratios.protein_ratio,
            "fat_ratio": result.macro_ratios.fat_ratio,
        },
        water_needs=round(result.water_needs_ml),
        bmi={
            "value": round(result.bmi.value, 1),
            "classification": result.bmi.classification,
            "health_status": result.bmi.health_status,
        },
        estimated_time_weeks=result.estimated_time_weeks,
        recommendations=list(result.recommendations),
    )


@router.get("/presets", response_model=MacroPresetsResponse)
def list_presets():
    """Return the named macro presets and the default one."""
    presets = {name: asdict(ratio) for name, ratio in MACRO_PRESETS.items()}
    return MacroPresetsResponse(default=DEFAULT_PRESET, presets=presets)


@router.post("/diary/summary", response_model=DiarySummaryResponse)
def summarize_food_diary(payload: DiarySummaryRequest):
    """Group a day's food entries by meal and total their nutrition.

    Raises:
        ValidationError: An entry has a non-positive quantity or no meal.
    """
    entries = [
        DiaryEntry(
            food=item.food,
            per_100g=NutritionFacts(**item.nutrition.model_dump()),
            quantity_g=item.quantity,
            meal=item.meal,
        )
        for item in payload.entries
    ]
    summary = summarize_diary(entries)
    day = payload.date or _date.today()
    logger.info("Diary summary for %s: %s entries", day.isoformat(), len(entries))
    return DiarySummaryResponse(date=day.isoformat(), **summary)
