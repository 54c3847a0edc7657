"""Food diary aggregation helpers.

Foods are described per 100 g; diary entries carry a quantity in grams and
the meal they belong to. These helpers scale, sum and format the nutrition
of a day's entries.
"""

import math
from dataclasses import dataclass, fields
from typing import Dict, Iterable, List, Optional

from core.exceptions import ValidationError
from core.logger import get_logger

logger = get_logger("services.food_diary")

_OPTIONAL_FIELDS = ("fiber", "sugar", "sodium")


@dataclass(frozen=True)
class NutritionFacts:
    """Nutrition values for a portion or for 100 g of a food."""

    calories: float
    carbs: float
    protein: float
    fat: float
    fiber: Optional[float] = None
    sugar: Optional[float] = None
    sodium: Optional[float] = None


@dataclass(frozen=True)
class DiaryEntry:
    food: str
    per_100g: NutritionFacts
    quantity_g: float
    meal: str

    def __post_init__(self):
        if self.quantity_g is None or not math.isfinite(self.quantity_g) or self.quantity_g <= 0:
            raise ValidationError("quantity must be a positive number of grams", field="quantity")
        if not self.meal or not str(self.meal).strip():
            raise ValidationError("Missing required field: meal", field="meal")


def nutrition_for_quantity(per_100g: NutritionFacts, quantity_g: float) -> NutritionFacts:
    """Scale per-100 g values to `quantity_g` grams.

    Optional fields that are absent (or zero) stay absent.
    """
    factor = quantity_g / 100
    scaled = {
        f.name: getattr(per_100g, f.name) * factor
        for f in fields(per_100g)
        if f.name not in _OPTIONAL_FIELDS
    }
    for name in _OPTIONAL_FIELDS:
        value = getattr(per_100g, name)
        scaled[name] = value * factor if value else None
    return NutritionFacts(**scaled)


def sum_nutrition(items: Iterable[NutritionFacts]) -> NutritionFacts:
    """Add up nutrition values; missing optional fields count as zero."""
    total = NutritionFacts(calories=0, carbs=0, protein=0, fat=0, fiber=0, sugar=0, sodium=0)
    for item in items:
        total = NutritionFacts(**{
            f.name: (getattr(total, f.name) or 0) + (getattr(item, f.name) or 0)
            for f in fields(NutritionFacts)
        })
    return total


def format_nutrition(facts: NutritionFacts) -> Dict[str, str]:
    """Render values for display ("N kcal", "Ng", sodium in "Nmg")."""
    out = {
        "calories": f"{round(facts.calories)} kcal",
        "carbs": f"{round(facts.carbs)}g",
        "protein": f"{round(facts.protein)}g",
        "fat": f"{round(facts.fat)}g",
    }
    if facts.fiber:
        out["fiber"] = f"{round(facts.fiber)}g"
    if facts.sugar:
        out["sugar"] = f"{round(facts.sugar)}g"
    if facts.sodium:
        out["sodium"] = f"{round(facts.sodium)}mg"
    return out


def round_totals(facts: NutritionFacts) -> Dict[str, float]:
    """Calories to whole kcal, everything else to one decimal."""
    out = {"calories": round(facts.calories)}
    for name in ("carbs", "protein", "fat", *_OPTIONAL_FIELDS):
        out[name] = round(getattr(facts, name) or 0, 1)
    return out


def summarize_diary(entries: Iterable[DiaryEntry]) -> Dict[str, object]:
    """Scale each entry, group by meal and total the day.

    Meals appear in the order they are first seen.

    Returns:
        Dict with 'meals' (meal -> list of entry dicts with scaled
        nutrition), 'meal_totals' and the day's rounded 'totals'.
    """
    meals: Dict[str, List[Dict[str, object]]] = {}
    per_meal: Dict[str, List[NutritionFacts]] = {}
    for entry in entries:
        portion = nutrition_for_quantity(entry.per_100g, entry.quantity_g)
        meals.setdefault(entry.meal, []).append({
            "food": entry.food,
            "quantity": entry.quantity_g,
            "nutrition": round_totals(portion),
        })
        per_meal.setdefault(entry.meal, []).append(portion)

    meal_totals = {meal: round_totals(sum_nutrition(items)) for meal, items in per_meal.items()}
    day_total = sum_nutrition(p for items in per_meal.values() for p in items)
    logger.debug("Diary summarized: %s meals, %s kcal", len(meals), day_total.calories)
    return {
        "meals": meals,
        "meal_totals": meal_totals,
        "totals": round_totals(day_total),
        "formatted": format_nutrition(day_total),
    }


__all__ = [
    "NutritionFacts",
    "DiaryEntry",
    "nutrition_for_quantity",
    "sum_nutrition",
    "format_nutrition",
    "summarize_diary",
]
