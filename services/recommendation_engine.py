"""Recommendation engine service.

Turns the calculator's BMI classification, the stated goal and the activity
level into an ordered list of advisory tips. Output depends only on the
input triple.
"""

from typing import List, Mapping, Tuple, Union
from types import MappingProxyType

from core.logger import get_logger
from core.models import ActivityLevel, Goal, parse_enum

logger = get_logger("services.recommendation_engine")

BMI_TIPS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "underweight": (
        "Consider increasing your calorie intake gradually",
        "Focus on nutritious, calorie-dense foods",
    ),
    "overweight": (
        "Keep a moderate, sustainable calorie deficit",
        "Prioritise foods rich in fibre and protein",
    ),
    "obese": (
        "Keep a moderate, sustainable calorie deficit",
        "Prioritise foods rich in fibre and protein",
    ),
})

ACTIVITY_TIPS: Mapping[ActivityLevel, Tuple[str, ...]] = MappingProxyType({
    ActivityLevel.SEDENTARY: (
        "Consider adding regular physical activity to your week",
    ),
    ActivityLevel.VERY_ACTIVE: (
        "Make sure you eat enough carbohydrates to fuel your training",
        "Hydrate well before, during and after exercise",
    ),
})

_LOSS_TIPS = (
    "Keep your calorie deficit consistent",
    "Combine your diet with cardiovascular exercise",
)

GOAL_TIPS: Mapping[Goal, Tuple[str, ...]] = MappingProxyType({
    Goal.MUSCLE_GAIN: (
        "Eat a source of protein at every meal",
        "Do not neglect strength training",
    ),
    Goal.WEIGHT_LOSS: _LOSS_TIPS,
    Goal.FAT_LOSS: _LOSS_TIPS,
})

GENERAL_TIPS: Tuple[str, ...] = (
    "Drink at least 2-3 litres of water per day",
    "Include a variety of fruits and vegetables in your diet",
    "Consult a nutrition professional for personalised guidance",
)


class RecommendationEngine:
    """Class-based generator of nutrition advice."""

    def generate_recommendations(
        self,
        health_status: str,
        goal: Union[Goal, str],
        activity_level: Union[ActivityLevel, str],
    ) -> List[str]:
        """Build the advisory list for one calculator result.

        Tips are ordered BMI first, then activity, then goal, followed by the
        general tips which are always present.

        Args:
            health_status: BMI bucket ('underweight', 'normal', 'overweight', 'obese').
            goal: Goal member or name.
            activity_level: ActivityLevel member or name.

        Returns:
            List of recommendation strings.
        """
        goal = parse_enum(Goal, goal, "goal")
        activity_level = parse_enum(ActivityLevel, activity_level, "activityLevel")

        tips: List[str] = []
        tips.extend(BMI_TIPS.get(health_status, ()))
        tips.extend(ACTIVITY_TIPS.get(activity_level, ()))
        tips.extend(GOAL_TIPS.get(goal, ()))
        tips.extend(GENERAL_TIPS)
        logger.debug(
            "Generated %s recommendations for bmi=%s goal=%s activity=%s",
            len(tips), health_status, goal.value, activity_level.value
        )
        return tips


# export singleton
recommendation_service = RecommendationEngine()
__all__ = ["RecommendationEngine", "recommendation_service", "GENERAL_TIPS"]
