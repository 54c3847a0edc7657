"""Nutrition needs calculation.

Provides BMR/TDEE, goal adjustment, macro allocation and the auxiliary
estimators (water, BMI, goal timeline) used by the calculator endpoint.
All lookup tables are read-only and built once at import.
"""

import math
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

from core.config import RATIO_TOLERANCE, STRICT_MACRO_PRESETS
from core.exceptions import (
    AppException,
    InternalComputationError,
    InvalidRatioError,
    UnknownEnumError,
    ValidationError,
)
from core.logger import get_logger
from core.models import (
    ActivityLevel,
    BiometricInput,
    BMIResult,
    Goal,
    MacroBreakdown,
    MacroRatio,
    NutritionRequest,
    NutritionResult,
    Sex,
    parse_enum,
)
from services.recommendation_engine import recommendation_service

logger = get_logger("services.nutrition_calculator")

ACTIVITY_MULTIPLIERS: Mapping[ActivityLevel, float] = MappingProxyType({
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
})

# Fraction added to (or removed from) TDEE for each goal.
GOAL_ADJUSTMENTS: Mapping[Goal, float] = MappingProxyType({
    Goal.WEIGHT_LOSS: -0.20,
    Goal.FAT_LOSS: -0.20,
    Goal.MAINTENANCE: 0.0,
    Goal.WEIGHT_GAIN: 0.15,
    Goal.MUSCLE_GAIN: 0.15,
})

DEFAULT_PRESET = "balanced"

MACRO_PRESETS: Mapping[str, MacroRatio] = MappingProxyType({
    "balanced": MacroRatio(carb_ratio=0.50, protein_ratio=0.25, fat_ratio=0.25),
    "lowCarb": MacroRatio(carb_ratio=0.30, protein_ratio=0.35, fat_ratio=0.35),
    "highProtein": MacroRatio(carb_ratio=0.40, protein_ratio=0.40, fat_ratio=0.20),
    "keto": MacroRatio(carb_ratio=0.10, protein_ratio=0.25, fat_ratio=0.65),
    "endurance": MacroRatio(carb_ratio=0.60, protein_ratio=0.20, fat_ratio=0.20),
})

# kcal per gram
CARB_KCAL_PER_G = 4
PROTEIN_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9

WATER_ML_PER_KG = 35
WATER_ACTIVITY_MULTIPLIERS: Mapping[ActivityLevel, float] = MappingProxyType({
    ActivityLevel.SEDENTARY: 1.0,
    ActivityLevel.LIGHT: 1.1,
    ActivityLevel.MODERATE: 1.2,
    ActivityLevel.ACTIVE: 1.3,
    ActivityLevel.VERY_ACTIVE: 1.4,
})

# (upper bound exclusive, health status, label); the last bucket is open-ended.
BMI_CATEGORIES: Tuple[Tuple[float, str, str], ...] = (
    (18.5, "underweight", "Underweight"),
    (25.0, "normal", "Normal weight"),
    (30.0, "overweight", "Overweight"),
    (math.inf, "obese", "Obesity"),
)

KCAL_PER_KG_BODY_WEIGHT = 7700
DEFAULT_TARGET_CHANGE_KG: Mapping[Goal, float] = MappingProxyType({
    Goal.WEIGHT_LOSS: 5.0,
    Goal.FAT_LOSS: 5.0,
    Goal.WEIGHT_GAIN: 3.0,
    Goal.MUSCLE_GAIN: 3.0,
})


def _preset_key(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


_PRESET_LOOKUP = MappingProxyType({_preset_key(name): name for name in MACRO_PRESETS})

RatioLike = Union[MacroRatio, Mapping[str, Any]]


class NutritionCalculator:
    """Class-based nutrition calculator used across the app.

    Args:
        strict_presets: Reject unknown preset names instead of falling back
            to the balanced preset.
        ratio_tolerance: Allowed deviation of custom ratios from a total of 1.0.
    """

    def __init__(self, strict_presets: bool = STRICT_MACRO_PRESETS, ratio_tolerance: float = RATIO_TOLERANCE):
        self.strict_presets = strict_presets
        self.ratio_tolerance = ratio_tolerance

    # Input normalisation

    def build_request(
        self,
        weight: Optional[float],
        height: Optional[float],
        age: Optional[int],
        gender: Optional[str],
        activity_level: Optional[str],
        goal: Optional[str],
        macro_preset: Optional[str] = DEFAULT_PRESET,
        custom_macros: Optional[RatioLike] = None,
        target_change_kg: Optional[float] = None,
    ) -> NutritionRequest:
        """Validate raw calculator inputs and return a typed request.

        Required fields are checked first (in request order) so the error
        names the first missing one.

        Raises:
            ValidationError: A required field is missing or not positive.
            UnknownEnumError: gender, activityLevel or goal is not recognised.
            InvalidRatioError: customMacros are negative or do not sum to 1.0.
        """
        required = (
            ("weight", weight),
            ("height", height),
            ("age", age),
            ("gender", gender),
            ("activityLevel", activity_level),
            ("goal", goal),
        )
        for name, value in required:
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Missing required field: {name}", field=name)

        biometrics = BiometricInput(
            weight_kg=weight,
            height_cm=height,
            age_years=age,
            sex=parse_enum(Sex, gender, "gender"),
        )
        custom = self.validate_ratio(custom_macros) if custom_macros is not None else None
        return NutritionRequest(
            biometrics=biometrics,
            activity_level=parse_enum(ActivityLevel, activity_level, "activityLevel"),
            goal=parse_enum(Goal, goal, "goal"),
            macro_preset=macro_preset or DEFAULT_PRESET,
            custom_macros=custom,
            target_change_kg=target_change_kg,
        )

    # Energy pipeline

    def calculate_bmr(self, weight_kg: float, height_cm: float, age: int, sex: Union[Sex, str]) -> float:
        """Calculate BMR (kcal/day) with the Mifflin-St Jeor equation."""
        sex = parse_enum(Sex, sex, "gender")
        base = 10 * weight_kg + 6.25 * height_cm - 5 * age
        return base + 5 if sex is Sex.MALE else base - 161

    def calculate_tdee(self, bmr: float, activity_level: Union[ActivityLevel, str]) -> float:
        """Estimate TDEE from BMR and the activity multiplier."""
        level = parse_enum(ActivityLevel, activity_level, "activityLevel")
        val = bmr * ACTIVITY_MULTIPLIERS[level]
        logger.debug("TDEE calculated: %s (%s)", val, level.value)
        return val

    def calculate_calorie_needs(self, tdee: float, goal: Union[Goal, str]) -> float:
        """Apply the goal's surplus or deficit to TDEE."""
        goal = parse_enum(Goal, goal, "goal")
        val = tdee * (1 + GOAL_ADJUSTMENTS[goal])
        logger.debug("Calorie needs for goal %s: %s", goal.value, val)
        return val

    # Macros

    def validate_ratio(self, ratio: RatioLike) -> MacroRatio:
        """Return `ratio` as a MacroRatio if it is a usable distribution.

        Accepts a MacroRatio or a mapping with camelCase or snake_case keys.

        Raises:
            InvalidRatioError: Missing/negative components or a total that is
                not 1.0 within the configured tolerance.
        """
        if not isinstance(ratio, MacroRatio):
            try:
                ratio = MacroRatio(
                    carb_ratio=float(_pick(ratio, "carbRatio", "carb_ratio")),
                    protein_ratio=float(_pick(ratio, "proteinRatio", "protein_ratio")),
                    fat_ratio=float(_pick(ratio, "fatRatio", "fat_ratio")),
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidRatioError(f"Custom macros must define carbRatio, proteinRatio and fatRatio ({exc})") from exc

        parts = (ratio.carb_ratio, ratio.protein_ratio, ratio.fat_ratio)
        if any(not math.isfinite(p) or p < 0 for p in parts):
            raise InvalidRatioError("Macro ratios must be non-negative numbers")
        total = ratio.total
        if abs(total - 1.0) > self.ratio_tolerance:
            raise InvalidRatioError(
                f"Macro ratios must sum to 1.0 (got {total:.3f})",
                total=round(total, 4),
            )
        return ratio

    def resolve_macro_ratio(
        self,
        preset: Optional[str] = DEFAULT_PRESET,
        custom: Optional[RatioLike] = None,
    ) -> Tuple[str, MacroRatio]:
        """Pick the ratio to apply: custom ratios win over a named preset.

        Preset names are matched ignoring case and separators, so 'low_carb'
        and 'LowCarb' both resolve to 'lowCarb'. An unknown name falls back to
        'balanced' unless the calculator is strict.

        Returns:
            Tuple of (name actually applied, ratio). The name is 'custom' when
            custom ratios were supplied.
        """
        if custom is not None:
            return "custom", self.validate_ratio(custom)

        name = _PRESET_LOOKUP.get(_preset_key(preset or DEFAULT_PRESET))
        if name is None:
            if self.strict_presets:
                raise UnknownEnumError("macroPreset", preset, list(MACRO_PRESETS))
            logger.warning("Unknown macro preset %r, falling back to %s", preset, DEFAULT_PRESET)
            name = DEFAULT_PRESET
        return name, MACRO_PRESETS[name]

    def calculate_macros(self, total_calories: float, ratio: MacroRatio) -> MacroBreakdown:
        """Split a calorie total into macronutrient grams."""
        macros = MacroBreakdown(
            calories=total_calories,
            carbs=total_calories * ratio.carb_ratio / CARB_KCAL_PER_G,
            protein=total_calories * ratio.protein_ratio / PROTEIN_KCAL_PER_G,
            fat=total_calories * ratio.fat_ratio / FAT_KCAL_PER_G,
        )
        logger.debug("Macros calculated: %s", macros)
        return macros

    # Auxiliary estimators

    def calculate_water_needs(self, weight_kg: float, activity_level: Union[ActivityLevel, str]) -> float:
        """Daily water in mL: 35 mL/kg scaled up for more active levels."""
        level = parse_enum(ActivityLevel, activity_level, "activityLevel")
        return weight_kg * WATER_ML_PER_KG * WATER_ACTIVITY_MULTIPLIERS[level]

    def calculate_bmi(self, height_cm: float, weight_kg: float) -> float:
        """Calculate BMI from height in cm and weight in kg."""
        h_m = height_cm / 100.0
        return weight_kg / (h_m * h_m)

    def classify_bmi(self, weight_kg: float, height_cm: float) -> BMIResult:
        """Compute BMI and bucket it with the WHO cutoffs (18.5, 25, 30).

        The value is kept unrounded; display rounding happens at the API edge.
        """
        bmi = self.calculate_bmi(height_cm, weight_kg)
        for upper, status, label in BMI_CATEGORIES:
            if bmi < upper:
                return BMIResult(value=bmi, classification=label, health_status=status)
        # Only reachable for NaN
        raise ValueError(f"BMI could not be classified: {bmi}")

    def estimate_goal_timeline(
        self,
        tdee: float,
        calorie_needs: float,
        goal: Union[Goal, str],
        target_change_kg: Optional[float] = None,
    ) -> Optional[int]:
        """Weeks to reach a target weight change at the planned daily delta.

        Linear projection assuming 7700 kcal per kg of body weight. Returns
        None for maintenance or when the plan produces no deficit/surplus.
        """
        goal = parse_enum(Goal, goal, "goal")
        if goal.is_loss:
            daily_delta = tdee - calorie_needs
        elif goal.is_gain:
            daily_delta = calorie_needs - tdee
        else:
            return None

        weekly_change_kg = daily_delta * 7 / KCAL_PER_KG_BODY_WEIGHT
        if weekly_change_kg <= 0:
            return None
        if target_change_kg is None:
            target = DEFAULT_TARGET_CHANGE_KG[goal]
        elif target_change_kg <= 0:
            raise ValidationError("targetChangeKg must be positive", field="targetChangeKg")
        else:
            target = target_change_kg
        return math.ceil(target / weekly_change_kg)

    # Aggregate

    def calculate_needs(self, request: NutritionRequest) -> NutritionResult:
        """Run the full pipeline for an already validated request.

        Either a complete result is returned or an exception is raised; no
        partial output is produced.

        Raises:
            UnknownEnumError / InvalidRatioError: preset resolution failed.
            InternalComputationError: unexpected arithmetic failure.
        """
        body = request.biometrics
        step = "bmr"
        try:
            bmr = self.calculate_bmr(body.weight_kg, body.height_cm, body.age_years, body.sex)
            _check_finite(bmr=bmr)
            step = "tdee"
            tdee = self.calculate_tdee(bmr, request.activity_level)
            _check_finite(tdee=tdee)
            step = "goal"
            calorie_needs = self.calculate_calorie_needs(tdee, request.goal)
            _check_finite(calorie_needs=calorie_needs)
            step = "macros"
            preset_name, ratio = self.resolve_macro_ratio(request.macro_preset, request.custom_macros)
            macros = self.calculate_macros(calorie_needs, ratio)
            step = "water"
            water = self.calculate_water_needs(body.weight_kg, request.activity_level)
            _check_finite(water=water)
            step = "bmi"
            bmi = self.classify_bmi(body.weight_kg, body.height_cm)
            step = "timeline"
            weeks = self.estimate_goal_timeline(tdee, calorie_needs, request.goal, request.target_change_kg)
            step = "recommendations"
            tips = recommendation_service.generate_recommendations(
                bmi.health_status, request.goal, request.activity_level
            )
        except AppException:
            raise
        except (ArithmeticError, ValueError) as exc:
            logger.exception("Nutrition calculation failed at step %s", step)
            raise InternalComputationError(step) from exc

        if preset_name != request.macro_preset:
            request = NutritionRequest(
                biometrics=request.biometrics,
                activity_level=request.activity_level,
                goal=request.goal,
                macro_preset=preset_name,
                custom_macros=request.custom_macros,
                target_change_kg=request.target_change_kg,
            )

        logger.info(
            "Nutrition needs calculated: goal=%s activity=%s calories=%.0f preset=%s",
            request.goal.value,
            request.activity_level.value,
            calorie_needs,
            preset_name,
        )
        return NutritionResult(
            request=request,
            bmr=bmr,
            tdee=tdee,
            calorie_needs=calorie_needs,
            macros=macros,
            macro_ratios=ratio,
            water_needs_ml=water,
            bmi=bmi,
            estimated_time_weeks=weeks,
            recommendations=tuple(tips),
        )

    def calculate(self, **fields) -> NutritionResult:
        """Validate raw keyword inputs and run the pipeline.

        Accepts the same keywords as `build_request`.
        """
        return self.calculate_needs(self.build_request(**fields))


def _check_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise OverflowError(f"{name} is not finite: {value}")


def _pick(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in mapping and mapping[key] is not None:
            return mapping[key]
    raise KeyError(keys[0])


# export singleton
nutrition_calculator = NutritionCalculator()
__all__ = [
    "ACTIVITY_MULTIPLIERS",
    "GOAL_ADJUSTMENTS",
    "MACRO_PRESETS",
    "NutritionCalculator",
    "nutrition_calculator",
]
