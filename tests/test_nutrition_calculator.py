"""Unit tests for the nutrition needs calculator."""

import logging
import math

import pytest

from core.exceptions import InvalidRatioError, UnknownEnumError, ValidationError
from core.models import ActivityLevel, Goal, MacroRatio, Sex
from services.nutrition_calculator import (
    ACTIVITY_MULTIPLIERS,
    MACRO_PRESETS,
    NutritionCalculator,
    nutrition_calculator,
)


BASE_PROFILE = dict(
    weight=70,
    height=175,
    age=30,
    gender="MALE",
    activity_level="MODERATE",
    goal="MAINTENANCE",
    macro_preset="balanced",
)


def profile(**overrides):
    data = dict(BASE_PROFILE)
    data.update(overrides)
    return data


def test_bmr_male_and_female():
    """Mifflin-St Jeor for both sexes."""
    assert nutrition_calculator.calculate_bmr(80, 180, 30, Sex.MALE) == 10 * 80 + 6.25 * 180 - 5 * 30 + 5
    assert nutrition_calculator.calculate_bmr(65, 165, 28, "FEMALE") == 10 * 65 + 6.25 * 165 - 5 * 28 - 161


def test_tdee_uses_activity_multiplier():
    for level, multiplier in ACTIVITY_MULTIPLIERS.items():
        assert nutrition_calculator.calculate_tdee(1800, level) == pytest.approx(1800 * multiplier)


def test_tdee_strictly_increases_with_activity():
    bmr = nutrition_calculator.calculate_bmr(70, 175, 30, Sex.MALE)
    values = [nutrition_calculator.calculate_tdee(bmr, level) for level in ActivityLevel]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_tdee_rejects_unknown_activity_level():
    with pytest.raises(UnknownEnumError) as exc_info:
        nutrition_calculator.calculate_tdee(1800, "INVALID")
    assert exc_info.value.details["field"] == "activityLevel"
    assert "VERY_ACTIVE" in exc_info.value.details["allowed"]


@pytest.mark.parametrize("goal", list(Goal))
def test_goal_adjustment_direction(goal):
    tdee = 2500.0
    needs = nutrition_calculator.calculate_calorie_needs(tdee, goal)
    if goal.is_loss:
        assert needs < tdee
        assert needs == pytest.approx(2000)
    elif goal.is_gain:
        assert needs > tdee
        assert needs == pytest.approx(2875)
    else:
        assert needs == tdee


def test_macros_match_calorie_total():
    ratio = MACRO_PRESETS["balanced"]
    macros = nutrition_calculator.calculate_macros(2000, ratio)
    assert macros.carbs == pytest.approx(250)
    assert macros.protein == pytest.approx(125)
    assert macros.fat == pytest.approx(2000 * 0.25 / 9)
    assert macros.carbs * 4 + macros.protein * 4 + macros.fat * 9 == pytest.approx(2000)


def test_all_presets_sum_to_one():
    for name, ratio in MACRO_PRESETS.items():
        assert ratio.total == pytest.approx(1.0), name
    assert MACRO_PRESETS["keto"].carb_ratio <= 0.10
    assert MACRO_PRESETS["endurance"].carb_ratio >= 0.60


def test_preset_lookup_ignores_case_and_separators():
    name, ratio = nutrition_calculator.resolve_macro_ratio("low_carb")
    assert name == "lowCarb"
    assert ratio == MACRO_PRESETS["lowCarb"]


def test_unknown_preset_falls_back_to_balanced(caplog):
    calc = NutritionCalculator(strict_presets=False)
    with caplog.at_level(logging.WARNING):
        name, ratio = calc.resolve_macro_ratio("paleo")
    assert name == "balanced"
    assert ratio == MACRO_PRESETS["balanced"]
    assert any("paleo" in r.getMessage() for r in caplog.records)


def test_unknown_preset_rejected_in_strict_mode():
    calc = NutritionCalculator(strict_presets=True)
    with pytest.raises(UnknownEnumError) as exc_info:
        calc.resolve_macro_ratio("paleo")
    assert exc_info.value.details["field"] == "macroPreset"


def test_custom_ratios_override_preset():
    name, ratio = nutrition_calculator.resolve_macro_ratio(
        "keto", {"carbRatio": 0.4, "proteinRatio": 0.3, "fatRatio": 0.3}
    )
    assert name == "custom"
    assert ratio == MacroRatio(0.4, 0.3, 0.3)


def test_custom_ratios_within_tolerance_accepted():
    ratio = nutrition_calculator.validate_ratio({"carb_ratio": 0.5, "protein_ratio": 0.25, "fat_ratio": 0.255})
    assert ratio.total == pytest.approx(1.005)


def test_custom_ratios_not_summing_to_one_rejected():
    with pytest.raises(InvalidRatioError) as exc_info:
        nutrition_calculator.validate_ratio({"carbRatio": 0.5, "proteinRatio": 0.2, "fatRatio": 0.1})
    assert exc_info.value.status_code == 400
    assert exc_info.value.details["sum"] == pytest.approx(0.8)


def test_negative_or_incomplete_ratios_rejected():
    with pytest.raises(InvalidRatioError):
        nutrition_calculator.validate_ratio(MacroRatio(-0.1, 0.6, 0.5))
    with pytest.raises(InvalidRatioError):
        nutrition_calculator.validate_ratio({"carbRatio": 0.5, "proteinRatio": 0.5})


def test_water_needs_scale_with_activity():
    assert nutrition_calculator.calculate_water_needs(70, "SEDENTARY") == pytest.approx(2450)
    assert nutrition_calculator.calculate_water_needs(70, "VERY_ACTIVE") == pytest.approx(2450 * 1.4)


@pytest.mark.parametrize(
    "weight,height,status",
    [(50, 170, "underweight"), (70, 170, "normal"), (80, 170, "overweight"), (95, 170, "obese")],
)
def test_bmi_classification(weight, height, status):
    bmi = nutrition_calculator.classify_bmi(weight, height)
    assert bmi.health_status == status
    assert bmi.value == pytest.approx(weight / (height / 100) ** 2)


def test_bmi_cutoffs_are_lower_inclusive():
    # 18.5 * 4 = 74 kg at 200 cm gives exactly 18.5
    assert nutrition_calculator.classify_bmi(74, 200).health_status == "normal"
    assert nutrition_calculator.classify_bmi(100, 200).health_status == "overweight"
    assert nutrition_calculator.classify_bmi(120, 200).health_status == "obese"


def test_goal_timeline_projection():
    # 1100 kcal/day * 7 = 7700 kcal = 1 kg per week
    assert nutrition_calculator.estimate_goal_timeline(2200, 1100, Goal.WEIGHT_LOSS) == 5
    assert nutrition_calculator.estimate_goal_timeline(2000, 3100, Goal.MUSCLE_GAIN) == 3
    assert nutrition_calculator.estimate_goal_timeline(2000, 3100, Goal.MUSCLE_GAIN, target_change_kg=2.5) == 3
    assert nutrition_calculator.estimate_goal_timeline(2000, 2000, Goal.MAINTENANCE) is None
    assert nutrition_calculator.estimate_goal_timeline(2000, 2100, Goal.FAT_LOSS) is None


def test_goal_timeline_rejects_non_positive_target():
    with pytest.raises(ValidationError) as exc_info:
        nutrition_calculator.estimate_goal_timeline(2200, 1100, Goal.WEIGHT_LOSS, target_change_kg=0)
    assert exc_info.value.details == {"field": "targetChangeKg"}


def test_full_calculation_reference_profile():
    """70 kg / 175 cm / 30 y male, moderate activity, maintenance."""
    result = nutrition_calculator.calculate(**profile())
    assert result.bmr == pytest.approx(1648.75)
    assert result.tdee == pytest.approx(1648.75 * 1.55)
    assert result.calorie_needs == result.tdee
    assert result.bmi.value == pytest.approx(70 / 1.75 ** 2)
    assert result.bmi.health_status == "normal"
    assert result.macro_ratios == MACRO_PRESETS["balanced"]
    assert result.estimated_time_weeks is None
    m = result.macros
    assert m.carbs * 4 + m.protein * 4 + m.fat * 9 == pytest.approx(result.calorie_needs)


def test_loss_profile_has_timeline():
    result = nutrition_calculator.calculate(**profile(goal="WEIGHT_LOSS"))
    weekly_kg = (result.tdee - result.calorie_needs) * 7 / 7700
    assert result.estimated_time_weeks == math.ceil(5 / weekly_kg)


def test_calculation_is_deterministic():
    first = nutrition_calculator.calculate(**profile(goal="MUSCLE_GAIN", macro_preset="highProtein"))
    second = nutrition_calculator.calculate(**profile(goal="MUSCLE_GAIN", macro_preset="highProtein"))
    assert first == second


@pytest.mark.parametrize("field_name", ["weight", "height", "age"])
def test_non_positive_biometrics_rejected(field_name):
    with pytest.raises(ValidationError) as exc_info:
        nutrition_calculator.calculate(**profile(**{field_name: 0}))
    assert exc_info.value.details == {"field": field_name}


def test_missing_field_rejected():
    with pytest.raises(ValidationError) as exc_info:
        nutrition_calculator.calculate(**profile(goal=None))
    assert exc_info.value.details["field"] == "goal"


def test_unknown_goal_and_gender_rejected():
    with pytest.raises(UnknownEnumError):
        nutrition_calculator.calculate(**profile(goal="BULK"))
    with pytest.raises(UnknownEnumError) as exc_info:
        nutrition_calculator.calculate(**profile(gender="X"))
    assert exc_info.value.details["field"] == "gender"


def test_enum_inputs_are_case_insensitive():
    result = nutrition_calculator.calculate(**profile(gender="female", activity_level="very_active"))
    assert result.request.biometrics.sex is Sex.FEMALE
    assert result.request.activity_level is ActivityLevel.VERY_ACTIVE


def test_non_positive_target_change_rejected():
    with pytest.raises(ValidationError) as exc_info:
        nutrition_calculator.calculate(**profile(goal="WEIGHT_LOSS", target_change_kg=-1))
    assert exc_info.value.details["field"] == "targetChangeKg"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
