"""Tests for access token resolution."""

from dataclasses import replace
from datetime import timedelta

import pytest

from nutrition_planner.domain.errors import TokenResolutionFailure
from nutrition_planner.services.access import AccessService
from nutrition_planner.services.customization import CustomizationService
from nutrition_planner.services.lifecycle import LifecycleService
from tests.conftest import (
    InMemoryCustomizationRepository,
    InMemoryDietPlanRepository,
    InMemoryPublishedAccessRepository,
    make_plan,
)


def _published():  # type: ignore[no-untyped-def]
    plans = InMemoryDietPlanRepository()
    accesses = InMemoryPublishedAccessRepository()
    lifecycle = LifecycleService(plans, accesses)
    customization = CustomizationService(
        lifecycle, InMemoryCustomizationRepository()
    )
    service = AccessService(accesses, plans, customization)
    plan = lifecycle.create_draft(make_plan())
    lifecycle.approve(plan.id, "coach")
    published, access = lifecycle.publish(plan.id)
    return service, lifecycle, customization, plans, accesses, published, access


def test_valid_token_resolves_plan() -> None:
    service, _, _, _, _, plan, access = _published()

    view = service.resolve(access.access_token)

    assert view.plan.id == plan.id
    assert view.access.id == access.id
    assert view.document == plan.document


def test_unknown_token_fails() -> None:
    service, *_ = _published()

    with pytest.raises(TokenResolutionFailure) as excinfo:
        service.resolve("does-not-exist")

    assert str(excinfo.value) == "Diet plan not found or access link is expired"


def test_token_is_valid_until_the_instant_of_expiry() -> None:
    service, *_, access = _published()
    just_before = access.expires_at - timedelta(microseconds=1)

    assert service.resolve(access.access_token, now=just_before)
    with pytest.raises(TokenResolutionFailure):
        service.resolve(access.access_token, now=access.expires_at)


def test_revoked_token_fails() -> None:
    service, lifecycle, _, _, _, plan, access = _published()
    lifecycle.revoke_access(plan.id)

    with pytest.raises(TokenResolutionFailure):
        service.resolve(access.access_token)


def test_replaced_token_fails_after_republish() -> None:
    service, lifecycle, _, _, _, plan, first = _published()
    _, second = lifecycle.publish(plan.id)

    with pytest.raises(TokenResolutionFailure):
        service.resolve(first.access_token)
    assert service.resolve(second.access_token).access.id == second.id


def test_missing_plan_fails_like_unknown_token() -> None:
    service, _, _, plans, accesses, plan, access = _published()
    del plans.plans[plan.id]
    accesses.accesses[access.id] = replace(access, is_active=True)

    with pytest.raises(TokenResolutionFailure):
        service.resolve(access.access_token)
