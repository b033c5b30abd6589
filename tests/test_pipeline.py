"""Tests for the end-to-end plan generation pipeline."""

import asyncio

import pytest

from nutrition_planner.containers import AppContainer
from nutrition_planner.domain.errors import GenerationFailed, InvalidGenerationOutput
from nutrition_planner.domain.generation import GenerationFailure
from nutrition_planner.domain.plans import PlanStatus
from nutrition_planner.domain.profiles import Locale
from tests.conftest import FakeGenerationClient, sample_plan_payload

RAW_INTAKE = {
    "nome_completo": "Maria Silva",
    "email": "maria@example.com",
    "idade": 34,
    "sexo": "feminino",
    "altura": 165,
    "peso": 62,
    "objetivo_principal": "emagrecimento",
    "nivel_atividade": "leve",
}


def test_generate_plan_stores_draft(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.queue_json(sample_plan_payload())

    outcome = asyncio.run(
        container.plan_generation_service.generate_plan(RAW_INTAKE, "br")
    )

    assert outcome.profile.locale == Locale.PT
    assert outcome.plan.status == PlanStatus.DRAFT
    assert outcome.plan.client_id == outcome.client_id
    assert outcome.plan.generation_log_id == outcome.result.id
    assert outcome.plan.targets == outcome.targets
    stored = container.lifecycle_service.get_plan(outcome.plan.id)
    assert stored == outcome.plan
    profile_repository = container.plan_generation_service.profile_repository
    assert profile_repository.get_profile(outcome.client_id) == outcome.profile
    assert "Dra. Jackie" in generation_client.calls[0]["system_instruction"]


def test_generate_plan_retries_once_after_malformed_output(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.queue_text("not json")
    generation_client.queue_json(sample_plan_payload())

    outcome = asyncio.run(
        container.plan_generation_service.generate_plan(RAW_INTAKE, "br")
    )

    assert outcome.plan.status == PlanStatus.DRAFT
    assert len(generation_client.calls) == 2
    log_repository = container.generation_service.log_repository
    assert len(log_repository.results) == 2


def test_generate_plan_raises_after_second_failure(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.responses.extend(
        [RuntimeError("connection reset"), RuntimeError("connection reset")]
    )

    with pytest.raises(GenerationFailed) as excinfo:
        asyncio.run(container.plan_generation_service.generate_plan(RAW_INTAKE, "br"))

    assert excinfo.value.retryable
    assert excinfo.value.result.failure == GenerationFailure.TRANSPORT
    assert len(generation_client.calls) == 2
    plans = container.lifecycle_service.plan_repository.list_plans(None, 10)
    assert plans == []


def test_non_object_output_is_not_retried(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.queue_json([1, 2, 3])
    generation_client.queue_json(sample_plan_payload())

    with pytest.raises(InvalidGenerationOutput):
        asyncio.run(container.plan_generation_service.generate_plan(RAW_INTAKE, None))

    assert len(generation_client.calls) == 1


def test_each_attempt_sends_identical_instructions(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.queue_text("")
    generation_client.queue_json(sample_plan_payload())

    asyncio.run(container.plan_generation_service.generate_plan(RAW_INTAKE, "br"))

    first, second = generation_client.calls
    assert first["user_instruction"] == second["user_instruction"]
    assert first["max_output_tokens"] == 4000
