"""Diet plan document and lifecycle models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from nutrition_planner.domain.targets import NutritionTargets

MEAL_SLOTS: tuple[str, ...] = (
    "breakfast",
    "morning_snack",
    "lunch",
    "afternoon_snack",
    "dinner",
    "evening_snack",
)


class PlanStatus(StrEnum):
    """Status of a diet plan in its review lifecycle."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    PUBLISHED = "published"


class _DocumentModel(BaseModel):
    """Base for plan document parts, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MacroSplit(_DocumentModel):
    """Macronutrient grams."""

    protein: int = 0
    carbs: int = 0
    fats: int = 0


class Ingredient(_DocumentModel):
    """Single ingredient line of a meal."""

    item: str
    quantity: str = ""
    calories: int = 0
    brand: str | None = None


class Meal(_DocumentModel):
    """One of the six daily meal slots."""

    type: str
    name: str = ""
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: str = ""
    calories: int = 0
    macros: MacroSplit = Field(default_factory=MacroSplit)
    timing: str = ""
    tips: list[str] = Field(default_factory=list)


class Day(_DocumentModel):
    """A single plan day."""

    day_number: int = Field(alias="day")
    meals: list[Meal] = Field(default_factory=list)
    total_calories: int = 0
    water_intake: str = ""
    exercise: str | None = None


class Week(_DocumentModel):
    """A themed week of plan days."""

    week_number: int
    theme: str = ""
    days: list[Day] = Field(default_factory=list)


class PlanOverview(_DocumentModel):
    """Top-level summary of a plan."""

    duration: str
    total_calories: int
    macros: MacroSplit
    goals: list[str]
    client_summary: str


class Recommendations(_DocumentModel):
    """Supplement, tip and warning lists."""

    supplements: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class PlanDocument(_DocumentModel):
    """Canonical plan document stored with a diet plan."""

    overview: PlanOverview
    weeks: list[Week] = Field(default_factory=list)
    recommendations: Recommendations = Field(default_factory=Recommendations)


@dataclass(frozen=True)
class DietPlan:
    """A diet plan and its review state."""

    id: UUID
    client_id: UUID
    status: PlanStatus
    targets: NutritionTargets
    document: PlanDocument
    created_at: datetime
    updated_at: datetime
    review_notes: list[str] = field(default_factory=list)
    approved_by: str | None = None
    approved_at: datetime | None = None
    generation_log_id: UUID | None = None
    version: int = 1


@dataclass(frozen=True)
class PlanCustomization:
    """Admin-edited overlay of a generated plan document."""

    id: UUID
    diet_plan_id: UUID
    document: PlanDocument
    edited_by: str
    created_at: datetime


def recompute_day_totals(document: PlanDocument) -> PlanDocument:
    """Return a copy where each day's total is the sum of its meal calories."""
    weeks = [
        week.model_copy(
            update={
                "days": [
                    day.model_copy(
                        update={
                            "total_calories": sum(meal.calories for meal in day.meals)
                        }
                    )
                    for day in week.days
                ]
            }
        )
        for week in document.weeks
    ]
    return document.model_copy(update={"weeks": weeks})
