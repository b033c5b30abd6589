"""Deterministic energy and macronutrient targets."""

import math
from dataclasses import dataclass

from nutrition_planner.domain.profiles import ActivityLevel, ClientProfile, Goal, Sex
from nutrition_planner.domain.targets import NutritionTargets

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}
DEFAULT_MULTIPLIER = ACTIVITY_MULTIPLIERS[ActivityLevel.MODERATE]

GOAL_ADJUSTMENTS: dict[Goal, int] = {
    Goal.WEIGHT_LOSS: -300,
    Goal.MUSCLE_GAIN: 300,
}

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


@dataclass(frozen=True)
class MacroRatios:
    """Fractions of total calories per macronutrient."""

    protein: float
    carbs: float
    fats: float


MACRO_RATIOS: dict[Goal, MacroRatios] = {
    Goal.MUSCLE_GAIN: MacroRatios(protein=0.30, carbs=0.45, fats=0.25),
    Goal.WEIGHT_LOSS: MacroRatios(protein=0.35, carbs=0.30, fats=0.35),
}
DEFAULT_RATIOS = MacroRatios(protein=0.25, carbs=0.45, fats=0.30)


def compute_targets(profile: ClientProfile) -> NutritionTargets:
    """Compute BMR, daily calories and macro targets for a profile."""
    bmr = basal_metabolic_rate(profile)
    multiplier = ACTIVITY_MULTIPLIERS.get(profile.activity_level, DEFAULT_MULTIPLIER)
    total_calories = round_half_up(bmr * multiplier)
    total_calories += GOAL_ADJUSTMENTS.get(profile.goal, 0)

    ratios = MACRO_RATIOS.get(profile.goal, DEFAULT_RATIOS)
    protein_kcal = round_half_up(total_calories * ratios.protein)
    carbs_kcal = round_half_up(total_calories * ratios.carbs)
    fats_kcal = total_calories - protein_kcal - carbs_kcal

    protein_g = round_half_up(total_calories * ratios.protein / KCAL_PER_G_PROTEIN)
    carbs_g = round_half_up(total_calories * ratios.carbs / KCAL_PER_G_CARBS)
    # Fat takes the energy left after rounding protein and carbs, so the gram
    # totals stay within one fat gram of the calorie target.
    remaining_kcal = (
        total_calories - protein_g * KCAL_PER_G_PROTEIN - carbs_g * KCAL_PER_G_CARBS
    )
    fats_g = max(round_half_up(remaining_kcal / KCAL_PER_G_FAT), 0)

    return NutritionTargets(
        bmr=round_half_up(bmr),
        total_calories=total_calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fats_g=fats_g,
        protein_kcal=protein_kcal,
        carbs_kcal=carbs_kcal,
        fats_kcal=fats_kcal,
    )


def basal_metabolic_rate(profile: ClientProfile) -> float:
    """Return the unrounded BMR for a profile."""
    if profile.sex == Sex.MALE:
        return (
            88.362
            + 13.397 * profile.weight_kg
            + 4.799 * profile.height_cm
            - 5.677 * profile.age
        )
    return (
        447.593
        + 9.247 * profile.weight_kg
        + 3.098 * profile.height_cm
        - 4.330 * profile.age
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer; halves round up."""
    return math.floor(value + 0.5)
