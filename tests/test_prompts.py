"""Tests for prompt construction."""

import json

from nutrition_planner.domain.generation import GenerationPurpose
from nutrition_planner.domain.plans import MEAL_SLOTS
from nutrition_planner.domain.profiles import Locale
from nutrition_planner.services.calculator import compute_targets
from nutrition_planner.services.prompts import (
    build_diagnostic_request,
    build_generation_request,
)
from tests.conftest import sample_profile


def test_english_request_embeds_profile_and_targets() -> None:
    profile = sample_profile(allergies="peanuts")
    targets = compute_targets(profile)

    request = build_generation_request(profile, targets, max_output_tokens=4000)

    assert request.locale == Locale.EN
    assert request.purpose == GenerationPurpose.PLAN
    assert request.max_output_tokens == 4000
    assert "Dr. Jackie" in request.system_instruction
    assert "Ana Souza" in request.user_instruction
    assert "peanuts" in request.user_instruction
    assert "2836 kcal" in request.user_instruction
    assert "177g" in request.user_instruction
    assert "30-day" in request.user_instruction
    for slot in MEAL_SLOTS:
        assert slot in request.user_instruction


def test_portuguese_request_uses_portuguese_wording() -> None:
    profile = sample_profile(locale=Locale.PT, name="Maria")
    targets = compute_targets(profile)

    request = build_generation_request(profile, targets, max_output_tokens=4000)

    assert "Dra. Jackie" in request.system_instruction
    assert "PERFIL DA CLIENTE" in request.user_instruction
    assert "português" in request.user_instruction
    assert "Brasil" in request.user_instruction


def test_output_schema_is_valid_json_with_targets() -> None:
    profile = sample_profile()
    targets = compute_targets(profile)

    request = build_generation_request(profile, targets, max_output_tokens=4000)
    schema = json.loads(request.output_schema)

    assert schema["overview"]["totalCalories"] == targets.total_calories
    assert schema["overview"]["macros"] == {
        "protein": targets.protein_g,
        "carbs": targets.carbs_g,
        "fats": targets.fats_g,
    }
    assert schema["weeks"][0]["days"][0]["meals"][0]["type"] == "breakfast"
    assert request.output_schema in request.user_instruction


def test_requests_are_deterministic() -> None:
    profile = sample_profile()
    targets = compute_targets(profile)

    first = build_generation_request(profile, targets, max_output_tokens=4000)
    second = build_generation_request(profile, targets, max_output_tokens=4000)

    assert first == second


def test_diagnostic_request_is_small() -> None:
    profile = sample_profile(locale=Locale.PT)

    request = build_diagnostic_request(profile, max_output_tokens=300)

    assert request.purpose == GenerationPurpose.DIAGNOSTIC
    assert request.max_output_tokens == 300
    assert "analysis" in request.user_instruction
    assert "weeks" not in request.user_instruction
