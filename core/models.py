"""Typed value records used by the nutrition services.

Everything here is immutable and built fresh per request. Request schemas
are converted into these records before any calculation runs.
"""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Optional, Tuple, Type, TypeVar

from core.exceptions import UnknownEnumError, ValidationError

E = TypeVar("E", bound=Enum)


class Sex(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class ActivityLevel(str, Enum):
    """Activity categories ordered from least to most active."""

    SEDENTARY = "SEDENTARY"
    LIGHT = "LIGHT"
    MODERATE = "MODERATE"
    ACTIVE = "ACTIVE"
    VERY_ACTIVE = "VERY_ACTIVE"


class Goal(str, Enum):
    WEIGHT_LOSS = "WEIGHT_LOSS"
    FAT_LOSS = "FAT_LOSS"
    MAINTENANCE = "MAINTENANCE"
    WEIGHT_GAIN = "WEIGHT_GAIN"
    MUSCLE_GAIN = "MUSCLE_GAIN"

    @property
    def is_loss(self) -> bool:
        return self in (Goal.WEIGHT_LOSS, Goal.FAT_LOSS)

    @property
    def is_gain(self) -> bool:
        return self in (Goal.WEIGHT_GAIN, Goal.MUSCLE_GAIN)


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    """Resolve `value` to a member of `enum_cls`, case-insensitively.

    Raises:
        UnknownEnumError: If the value does not name a member.
    """
    if isinstance(value, enum_cls):
        return value
    key = str(value).strip().upper() if value is not None else ""
    try:
        return enum_cls(key)
    except ValueError:
        raise UnknownEnumError(field_name, value, [m.value for m in enum_cls]) from None


@dataclass(frozen=True)
class BiometricInput:
    """Body measurements needed by the calculator.

    Construction validates every field, so an instance is always usable.
    """

    weight_kg: float
    height_cm: float
    age_years: int
    sex: Sex

    def __post_init__(self):
        for name, label in (("weight_kg", "weight"), ("height_cm", "height"), ("age_years", "age")):
            value = getattr(self, name)
            if value is None:
                raise ValidationError(f"Missing required field: {label}", field=label)
            if isinstance(value, bool) or not math.isfinite(value) or value <= 0:
                raise ValidationError(f"{label} must be a positive number", field=label)
        if isinstance(self.age_years, float) and not self.age_years.is_integer():
            raise ValidationError("age must be a whole number of years", field="age")
        if not isinstance(self.sex, Sex):
            raise ValidationError("gender must be MALE or FEMALE", field="gender")


@dataclass(frozen=True)
class MacroRatio:
    """Fractions of total calories taken by each macronutrient."""

    carb_ratio: float
    protein_ratio: float
    fat_ratio: float

    @property
    def total(self) -> float:
        return self.carb_ratio + self.protein_ratio + self.fat_ratio


@dataclass(frozen=True)
class MacroBreakdown:
    """Calories plus gram targets for carbohydrate, protein and fat."""

    calories: float
    carbs: float
    protein: float
    fat: float

    def rounded(self) -> Dict[str, int]:
        return {k: int(round(v)) for k, v in asdict(self).items()}


@dataclass(frozen=True)
class BMIResult:
    value: float
    classification: str
    health_status: str


@dataclass(frozen=True)
class NutritionRequest:
    """Fully validated calculator input."""

    biometrics: BiometricInput
    activity_level: ActivityLevel
    goal: Goal
    macro_preset: str = "balanced"
    custom_macros: Optional[MacroRatio] = None
    target_change_kg: Optional[float] = None

    def __post_init__(self):
        if self.target_change_kg is not None and self.target_change_kg <= 0:
            raise ValidationError("targetChangeKg must be positive", field="targetChangeKg")


@dataclass(frozen=True)
class NutritionResult:
    """Aggregate output of one calculator run."""

    request: NutritionRequest
    bmr: float
    tdee: float
    calorie_needs: float
    macros: MacroBreakdown
    macro_ratios: MacroRatio
    water_needs_ml: float
    bmi: BMIResult
    estimated_time_weeks: Optional[int]
    recommendations: Tuple[str, ...] = field(default_factory=tuple)
