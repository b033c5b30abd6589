"""Tests for the intake and client view endpoints."""

from fastapi.testclient import TestClient

from nutrition_planner.api.app import create_app
from nutrition_planner.containers import AppContainer
from tests.conftest import FakeGenerationClient, make_plan, sample_plan_payload

INTAKE = {
    "answers": {
        "full_name": "John Doe",
        "email": "john@example.com",
        "age": 40,
        "gender": "male",
        "height": 180,
        "weight": 90,
        "primary_goal": "lose weight",
        "activity_level": "sedentary",
    },
    "form_locale": "usa",
}


def test_health_endpoint(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/health").json() == {"status": "ok"}


def test_intake_creates_draft_plan(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.queue_json(sample_plan_payload())
    client = TestClient(create_app(container))

    response = client.post("/intake", json=INTAKE)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "draft"
    plan = container.admin_service.list_plans()[0]
    assert plan["id"] == body["plan_id"]
    assert body["total_calories"] == plan["total_calories"]


def test_intake_generation_failure_returns_retryable_502(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.queue_text("nope")
    generation_client.queue_text("still nope")
    client = TestClient(create_app(container))

    response = client.post("/intake", json=INTAKE)

    assert response.status_code == 502
    assert response.json()["retryable"] is True


def test_intake_non_object_output_returns_422(
    container: AppContainer, generation_client: FakeGenerationClient
) -> None:
    generation_client.queue_json("just a string")
    client = TestClient(create_app(container))

    response = client.post("/intake", json=INTAKE)

    assert response.status_code == 422


def test_diet_view_returns_published_plan(container: AppContainer) -> None:
    lifecycle = container.lifecycle_service
    plan = lifecycle.create_draft(make_plan())
    container.customization_service.save_customization(
        plan.id, sample_plan_payload(days=1), "coach"
    )
    lifecycle.approve(plan.id, "coach")
    _, access = lifecycle.publish(plan.id)
    client = TestClient(create_app(container))

    response = client.get("/diet-view", params={"token": access.access_token})

    assert response.status_code == 200
    body = response.json()
    assert body["plan_id"] == str(plan.id)
    assert body["plan"]["weeks"][0]["days"][0]["totalCalories"] == 2400
    assert body["plan"]["weeks"][0]["days"][0]["day"] == 1


def test_diet_view_rejects_unknown_and_revoked_tokens(
    container: AppContainer,
) -> None:
    lifecycle = container.lifecycle_service
    plan = lifecycle.create_draft(make_plan())
    lifecycle.approve(plan.id, "coach")
    _, access = lifecycle.publish(plan.id)
    lifecycle.revoke_access(plan.id)
    client = TestClient(create_app(container))

    unknown = client.get("/diet-view", params={"token": "unknown"})
    revoked = client.get("/diet-view", params={"token": access.access_token})

    assert unknown.status_code == 404
    assert revoked.status_code == 404
    assert unknown.json() == revoked.json()
    assert unknown.json()["detail"] == (
        "Diet plan not found or access link is expired"
    )
