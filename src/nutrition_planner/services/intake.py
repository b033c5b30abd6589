"""Intake normalization from raw questionnaire answers."""

import logging
import math
from collections.abc import Callable, Mapping
from datetime import date, datetime

from nutrition_planner.domain.profiles import (
    UNSPECIFIED,
    ActivityLevel,
    ClientProfile,
    Goal,
    Sex,
    locale_from_form,
    parse_activity_level,
    parse_goal,
    parse_sex,
)

DEFAULT_NAME = "Client"
DEFAULT_AGE = 30
DEFAULT_HEIGHT_CM = 170.0
DEFAULT_WEIGHT_KG = 70.0
MAX_AGE = 120

# Ordered source-field aliases per canonical field: Portuguese form, English form.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("nome_completo", "full_name", "name"),
    "email": ("email", "e_mail"),
    "birth_date": ("data_nascimento", "birth_date", "date_of_birth"),
    "age": ("idade", "age"),
    "sex": ("sexo", "gender", "sex"),
    "height_cm": ("altura", "height", "height_cm"),
    "weight_kg": ("peso", "weight", "weight_kg"),
    "goal": ("objetivo_principal", "primary_goal", "goal"),
    "activity_level": ("nivel_atividade", "activity_level"),
    "restrictions": ("restricoes_alimentares", "dietary_restrictions"),
    "allergies": ("alergias", "allergies"),
    "medical_conditions": ("condicoes_medicas", "medical_conditions"),
    "current_diet": ("dieta_atual", "current_diet"),
    "water_intake": ("consumo_agua", "water_intake"),
    "sleep_hours": ("horas_sono", "sleep_hours"),
    "stress_level": ("nivel_stress", "stress_level"),
    "budget": ("orcamento", "budget"),
    "cooking_time": ("tempo_preparo", "cooking_time"),
}

_FREE_TEXT_FIELDS = (
    "restrictions",
    "allergies",
    "medical_conditions",
    "current_diet",
    "water_intake",
    "sleep_hours",
    "stress_level",
    "budget",
    "cooking_time",
)

_DATE_FORMATS = ("%d/%m/%Y", "%m/%d/%Y", "%Y/%m/%d")

_logger = logging.getLogger(__name__)


def normalize_intake(
    raw: Mapping[str, object],
    form_locale: str | None,
    today: date | None = None,
) -> ClientProfile:
    """Map a raw intake record onto a `ClientProfile`.

    Never raises: every field that is missing or unusable falls back to its
    default, and the defaulted field names are logged.
    """
    reference_day = today or date.today()
    defaulted: list[str] = []

    def pick(
        field_name: str, parse: Callable[[object], object | None], default: object
    ) -> object:
        for alias in FIELD_ALIASES[field_name]:
            if alias not in raw:
                continue
            value = parse(raw[alias])
            if value is not None:
                return value
        defaulted.append(field_name)
        return default

    age = _pick_age(raw, reference_day)
    if age is None:
        defaulted.append("age")
        age = DEFAULT_AGE

    profile = ClientProfile(
        name=pick("name", _text, DEFAULT_NAME),
        email=pick("email", _text, ""),
        age=age,
        sex=pick("sex", _parse_with(parse_sex), Sex.MALE),
        height_cm=pick("height_cm", _positive_number, DEFAULT_HEIGHT_CM),
        weight_kg=pick("weight_kg", _positive_number, DEFAULT_WEIGHT_KG),
        goal=pick("goal", _parse_with(parse_goal), Goal.GENERAL_HEALTH),
        activity_level=pick(
            "activity_level",
            _parse_with(parse_activity_level),
            ActivityLevel.MODERATE,
        ),
        locale=locale_from_form(form_locale),
        **{name: pick(name, _text, UNSPECIFIED) for name in _FREE_TEXT_FIELDS},
    )
    if defaulted:
        _logger.info(
            "Intake fields defaulted: client=%s fields=%s",
            profile.name,
            ",".join(defaulted),
        )
    return profile


def _pick_age(raw: Mapping[str, object], today: date) -> int | None:
    """Derive age from a birth date, else from an explicit age answer."""
    for alias in FIELD_ALIASES["birth_date"]:
        birth = _parse_date(raw.get(alias))
        if birth is None:
            continue
        age = today.year - birth.year
        if 0 < age <= MAX_AGE:
            return age
    for alias in FIELD_ALIASES["age"]:
        value = _positive_number(raw.get(alias))
        if value is not None and value <= MAX_AGE:
            return int(value)
    return None


def _parse_date(value: object) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for date_format in _DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def _positive_number(value: object) -> float | None:
    """Coerce a number or numeric string; reject non-positive values."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def _text(value: object) -> str | None:
    """Render a string, number or list answer as text; blank means missing."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, list | tuple):
        parts = [str(item).strip() for item in value if str(item).strip()]
        return ", ".join(parts) or None
    text = str(value).strip()
    return text or None


def _parse_with(
    parser: Callable[[str], object | None],
) -> Callable[[object], object | None]:
    def parse(value: object) -> object | None:
        text = _text(value)
        return parser(text) if text else None

    return parse
