"""Nutrition target domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionTargets:
    """Daily energy and macronutrient targets for a client."""

    bmr: int
    total_calories: int
    protein_g: int
    carbs_g: int
    fats_g: int
    protein_kcal: int
    carbs_kcal: int
    fats_kcal: int
