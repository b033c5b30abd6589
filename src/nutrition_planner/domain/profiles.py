"""Client profile domain models."""

import unicodedata
from dataclasses import dataclass
from enum import StrEnum

UNSPECIFIED = "unspecified"


class Sex(StrEnum):
    """Biological sex used by the BMR equations."""

    MALE = "male"
    FEMALE = "female"


class Goal(StrEnum):
    """Primary client goal."""

    WEIGHT_LOSS = "weight_loss"
    MUSCLE_GAIN = "muscle_gain"
    RECOMPOSITION = "recomposition"
    GENERAL_HEALTH = "general_health"
    PERFORMANCE = "performance"


class ActivityLevel(StrEnum):
    """Habitual activity level."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class Locale(StrEnum):
    """Supported intake and plan languages."""

    EN = "en"
    PT = "pt"


_SEX_SYNONYMS: dict[str, Sex] = {
    "male": Sex.MALE,
    "m": Sex.MALE,
    "man": Sex.MALE,
    "masculino": Sex.MALE,
    "homem": Sex.MALE,
    "female": Sex.FEMALE,
    "f": Sex.FEMALE,
    "woman": Sex.FEMALE,
    "feminino": Sex.FEMALE,
    "mulher": Sex.FEMALE,
}

_GOAL_SYNONYMS: dict[str, Goal] = {
    "weight_loss": Goal.WEIGHT_LOSS,
    "lose_weight": Goal.WEIGHT_LOSS,
    "fat_loss": Goal.WEIGHT_LOSS,
    "emagrecimento": Goal.WEIGHT_LOSS,
    "emagrecer": Goal.WEIGHT_LOSS,
    "perda_de_peso": Goal.WEIGHT_LOSS,
    "perder_peso": Goal.WEIGHT_LOSS,
    "muscle_gain": Goal.MUSCLE_GAIN,
    "gain_muscle": Goal.MUSCLE_GAIN,
    "ganho_muscular": Goal.MUSCLE_GAIN,
    "ganho_de_massa": Goal.MUSCLE_GAIN,
    "hipertrofia": Goal.MUSCLE_GAIN,
    "recomposition": Goal.RECOMPOSITION,
    "body_recomposition": Goal.RECOMPOSITION,
    "recomposicao": Goal.RECOMPOSITION,
    "recomposicao_corporal": Goal.RECOMPOSITION,
    "general_health": Goal.GENERAL_HEALTH,
    "health": Goal.GENERAL_HEALTH,
    "maintain_weight": Goal.GENERAL_HEALTH,
    "saude": Goal.GENERAL_HEALTH,
    "saude_geral": Goal.GENERAL_HEALTH,
    "manutencao": Goal.GENERAL_HEALTH,
    "performance": Goal.PERFORMANCE,
    "athletic_performance": Goal.PERFORMANCE,
    "desempenho": Goal.PERFORMANCE,
    "performance_esportiva": Goal.PERFORMANCE,
}

_ACTIVITY_SYNONYMS: dict[str, ActivityLevel] = {
    "sedentary": ActivityLevel.SEDENTARY,
    "sedentario": ActivityLevel.SEDENTARY,
    "light": ActivityLevel.LIGHT,
    "lightly_active": ActivityLevel.LIGHT,
    "leve": ActivityLevel.LIGHT,
    "levemente_ativo": ActivityLevel.LIGHT,
    "moderate": ActivityLevel.MODERATE,
    "moderately_active": ActivityLevel.MODERATE,
    "moderado": ActivityLevel.MODERATE,
    "moderadamente_ativo": ActivityLevel.MODERATE,
    "active": ActivityLevel.ACTIVE,
    "ativo": ActivityLevel.ACTIVE,
    "very_active": ActivityLevel.VERY_ACTIVE,
    "muito_ativo": ActivityLevel.VERY_ACTIVE,
    "extremely_active": ActivityLevel.VERY_ACTIVE,
    "extremamente_ativo": ActivityLevel.VERY_ACTIVE,
}


def canonical_key(value: str) -> str:
    """Lowercase, strip accents and join words with underscores."""
    decomposed = unicodedata.normalize("NFKD", value.strip().lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    for separator in (" ", "-", "/"):
        stripped = stripped.replace(separator, "_")
    return "_".join(part for part in stripped.split("_") if part)


def parse_sex(value: str) -> Sex | None:
    """Map a bilingual sex label to `Sex`, if recognized."""
    return _SEX_SYNONYMS.get(canonical_key(value))


def parse_goal(value: str) -> Goal | None:
    """Map a bilingual goal label to `Goal`, if recognized.

    Exact synonyms win; otherwise the first synonym contained in the label is
    used, so answers like "emagrecimento e saude" still resolve.
    """
    key = canonical_key(value)
    if key in _GOAL_SYNONYMS:
        return _GOAL_SYNONYMS[key]
    for synonym, goal in _GOAL_SYNONYMS.items():
        if synonym in key:
            return goal
    return None


def parse_activity_level(value: str) -> ActivityLevel | None:
    """Map a bilingual activity label to `ActivityLevel`, if recognized."""
    return _ACTIVITY_SYNONYMS.get(canonical_key(value))


def locale_from_form(form_locale: str | None) -> Locale:
    """Return the plan locale for an intake form tag (`br` or `usa`)."""
    if form_locale and "br" in form_locale.lower():
        return Locale.PT
    return Locale.EN


@dataclass(frozen=True)
class ClientProfile:
    """Normalized client intake used by every downstream component."""

    name: str
    email: str
    age: int
    sex: Sex
    height_cm: float
    weight_kg: float
    goal: Goal
    activity_level: ActivityLevel
    locale: Locale
    restrictions: str = UNSPECIFIED
    allergies: str = UNSPECIFIED
    medical_conditions: str = UNSPECIFIED
    current_diet: str = UNSPECIFIED
    water_intake: str = UNSPECIFIED
    sleep_hours: str = UNSPECIFIED
    stress_level: str = UNSPECIFIED
    budget: str = UNSPECIFIED
    cooking_time: str = UNSPECIFIED
