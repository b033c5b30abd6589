"""Normalization of raw model output into the canonical plan document."""

import logging
import math
from collections.abc import Mapping
from datetime import UTC, datetime
from uuid import UUID, uuid4

from nutrition_planner.domain.errors import InvalidGenerationOutput
from nutrition_planner.domain.generation import GenerationResult
from nutrition_planner.domain.plans import (
    MEAL_SLOTS,
    Day,
    DietPlan,
    Ingredient,
    MacroSplit,
    Meal,
    PlanDocument,
    PlanOverview,
    PlanStatus,
    Recommendations,
    Week,
    recompute_day_totals,
)
from nutrition_planner.domain.profiles import ClientProfile, Locale
from nutrition_planner.domain.targets import NutritionTargets

_DEFAULT_COPY: dict[Locale, dict[str, str]] = {
    Locale.EN: {
        "duration": "30 days",
        "goal": "Achieve {goal}",
        "health": "Improve overall health",
        "summary": "Personalized diet plan for {name}",
    },
    Locale.PT: {
        "duration": "30 dias",
        "goal": "Alcançar {goal}",
        "health": "Melhorar a saúde geral",
        "summary": "Plano alimentar personalizado para {name}",
    },
}

_logger = logging.getLogger(__name__)


def structure_plan(
    result: GenerationResult,
    targets: NutritionTargets,
    profile: ClientProfile,
    client_id: UUID,
) -> DietPlan:
    """Build a draft `DietPlan` from a successful generation result.

    Incomplete output is filled from the targets and templated defaults. Only
    a payload that is not a JSON object raises `InvalidGenerationOutput`.
    """
    if not result.success:
        raise ValueError("Only successful generation results can be structured")
    payload = result.parsed
    if not isinstance(payload, Mapping):
        raise InvalidGenerationOutput(
            f"Expected a JSON object, got {type(payload).__name__}"
        )

    document = PlanDocument(
        overview=_overview(payload.get("overview"), targets, profile),
        weeks=_weeks(payload.get("weeks")),
        recommendations=_recommendations(payload.get("recommendations")),
    )
    now = datetime.now(tz=UTC)
    return DietPlan(
        id=uuid4(),
        client_id=client_id,
        status=PlanStatus.DRAFT,
        targets=targets,
        document=recompute_day_totals(document),
        created_at=now,
        updated_at=now,
        generation_log_id=result.id,
    )


def _overview(
    raw: object, targets: NutritionTargets, profile: ClientProfile
) -> PlanOverview:
    data = raw if isinstance(raw, Mapping) else {}
    copy = _DEFAULT_COPY[profile.locale]
    raw_macros = data.get("macros")
    macros = raw_macros if isinstance(raw_macros, Mapping) else {}
    goals = _string_list(data.get("goals"))
    return PlanOverview(
        duration=_string(data.get("duration")) or copy["duration"],
        total_calories=_positive_int(data.get("totalCalories"))
        or targets.total_calories,
        macros=MacroSplit(
            protein=_positive_int(macros.get("protein")) or targets.protein_g,
            carbs=_positive_int(macros.get("carbs")) or targets.carbs_g,
            fats=_positive_int(macros.get("fats")) or targets.fats_g,
        ),
        goals=goals
        or [copy["goal"].format(goal=profile.goal.value), copy["health"]],
        client_summary=_string(data.get("clientSummary"))
        or copy["summary"].format(name=profile.name),
    )


def _weeks(raw: object) -> list[Week]:
    if not isinstance(raw, list) or not raw:
        if raw is not None:
            _logger.warning("Model weeks field unusable: type=%s", type(raw).__name__)
        return []
    weeks = [
        _week(item, position)
        for position, item in enumerate(raw, start=1)
        if isinstance(item, Mapping)
    ]
    weeks.sort(key=lambda week: week.week_number)
    return [
        week.model_copy(update={"week_number": number})
        for number, week in enumerate(weeks, start=1)
    ]


def _week(raw: Mapping, position: int) -> Week:
    raw_days = raw.get("days")
    days = []
    if isinstance(raw_days, list):
        days = [
            _day(item, index)
            for index, item in enumerate(raw_days, start=1)
            if isinstance(item, Mapping)
        ]
    return Week(
        week_number=_positive_int(raw.get("weekNumber")) or position,
        theme=_string(raw.get("theme")),
        days=days,
    )


def _day(raw: Mapping, position: int) -> Day:
    raw_meals = raw.get("meals")
    meals = []
    if isinstance(raw_meals, list):
        meals = [
            _meal(item, index)
            for index, item in enumerate(raw_meals)
            if isinstance(item, Mapping)
        ]
    exercise = _string(raw.get("exercise"))
    return Day(
        day_number=_positive_int(raw.get("day")) or position,
        meals=meals,
        water_intake=_string(raw.get("waterIntake")),
        exercise=exercise or None,
    )


def _meal(raw: Mapping, index: int) -> Meal:
    ingredients = _ingredients(raw.get("ingredients"))
    raw_macros = raw.get("macros")
    macros = raw_macros if isinstance(raw_macros, Mapping) else {}
    calories = _non_negative_int(raw.get("calories"))
    if calories is None:
        calories = sum(ingredient.calories for ingredient in ingredients)
    return Meal(
        type=_meal_type(raw.get("type"), index),
        name=_string(raw.get("name")),
        ingredients=ingredients,
        instructions=_string(raw.get("instructions")),
        calories=calories,
        macros=MacroSplit(
            protein=_non_negative_int(macros.get("protein")) or 0,
            carbs=_non_negative_int(macros.get("carbs")) or 0,
            fats=_non_negative_int(macros.get("fats")) or 0,
        ),
        timing=_string(raw.get("timing")),
        tips=_string_list(raw.get("tips")),
    )


def _meal_type(raw: object, index: int) -> str:
    """Return a valid meal slot, falling back to the meal's position."""
    if isinstance(raw, str):
        key = raw.strip().lower().replace(" ", "_").replace("-", "_")
        if key in MEAL_SLOTS:
            return key
    return MEAL_SLOTS[min(index, len(MEAL_SLOTS) - 1)]


def _ingredients(raw: object) -> list[Ingredient]:
    if not isinstance(raw, list):
        return []
    ingredients = []
    for item in raw:
        if isinstance(item, str) and item.strip():
            ingredients.append(Ingredient(item=item.strip()))
        elif isinstance(item, Mapping) and _string(item.get("item")):
            ingredients.append(
                Ingredient(
                    item=_string(item.get("item")),
                    quantity=_string(item.get("quantity")),
                    calories=_non_negative_int(item.get("calories")) or 0,
                    brand=_string(item.get("brand")) or None,
                )
            )
    return ingredients


def _recommendations(raw: object) -> Recommendations:
    data = raw if isinstance(raw, Mapping) else {}
    return Recommendations(
        supplements=_string_list(data.get("supplements")),
        tips=_string_list(data.get("tips")),
        warnings=_string_list(data.get("warnings")),
    )


def _string(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _non_negative_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int | float) or not math.isfinite(value) or value < 0:
        return None
    return math.floor(value + 0.5)


def _positive_int(value: object) -> int | None:
    number = _non_negative_int(value)
    return number if number else None
