"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from nutrition_planner.config import Settings
from nutrition_planner.containers import AppContainer
from nutrition_planner.domain.access import PublishedAccess
from nutrition_planner.domain.generation import (
    GenerationPurpose,
    GenerationResult,
    GenerationUsage,
    ProviderCompletion,
)
from nutrition_planner.domain.plans import (
    MEAL_SLOTS,
    DietPlan,
    MacroSplit,
    PlanCustomization,
    PlanDocument,
    PlanOverview,
    PlanStatus,
)
from nutrition_planner.domain.profiles import (
    ActivityLevel,
    ClientProfile,
    Goal,
    Locale,
    Sex,
)
from nutrition_planner.domain.targets import NutritionTargets
from nutrition_planner.services.access import AccessService
from nutrition_planner.services.admin import AdminRepository, AdminService
from nutrition_planner.services.customization import (
    CustomizationRepository,
    CustomizationService,
)
from nutrition_planner.services.generation import (
    GenerationClient,
    GenerationLogRepository,
    GenerationService,
)
from nutrition_planner.services.lifecycle import (
    DietPlanRepository,
    LifecycleService,
    PublishedAccessRepository,
)
from nutrition_planner.services.notifications import (
    ClientNotification,
    NotificationService,
    Notifier,
)
from nutrition_planner.services.pipeline import PlanGenerationService
from nutrition_planner.services.profiles import ClientProfileRepository


def sample_profile(**overrides: object) -> ClientProfile:
    """Return a complete profile with optional field overrides."""
    values: dict[str, object] = {
        "name": "Ana Souza",
        "email": "ana@example.com",
        "age": 30,
        "sex": Sex.MALE,
        "height_cm": 175.0,
        "weight_kg": 80.0,
        "goal": Goal.GENERAL_HEALTH,
        "activity_level": ActivityLevel.MODERATE,
        "locale": Locale.EN,
    }
    values.update(overrides)
    return ClientProfile(**values)


def sample_targets() -> NutritionTargets:
    return NutritionTargets(
        bmr=1830,
        total_calories=2836,
        protein_g=177,
        carbs_g=319,
        fats_g=95,
        protein_kcal=709,
        carbs_kcal=1276,
        fats_kcal=851,
    )


def sample_plan_payload(days: int = 2) -> dict[str, object]:
    """Return a well-formed model answer with six meals per day."""
    return {
        "overview": {
            "duration": "30 days",
            "totalCalories": 2836,
            "macros": {"protein": 177, "carbs": 319, "fats": 95},
            "goals": ["Eat better"],
            "clientSummary": "Active adult aiming for general health",
        },
        "weeks": [
            {
                "weekNumber": 1,
                "theme": "Getting Started",
                "days": [
                    {
                        "day": day,
                        "meals": [
                            {
                                "type": slot,
                                "name": f"Meal {slot}",
                                "ingredients": [
                                    {
                                        "item": "Oats",
                                        "quantity": "50g",
                                        "calories": 190,
                                    }
                                ],
                                "instructions": "Mix and serve",
                                "calories": 400,
                                "macros": {"protein": 25, "carbs": 45, "fats": 12},
                                "timing": "7:00",
                                "tips": ["Drink water"],
                            }
                            for slot in MEAL_SLOTS
                        ],
                        "totalCalories": 9999,
                        "waterIntake": "3L",
                        "exercise": "Walk 30 minutes",
                    }
                    for day in range(1, days + 1)
                ],
            }
        ],
        "recommendations": {
            "supplements": ["Vitamin D"],
            "tips": ["Sleep 8 hours"],
            "warnings": [],
        },
    }


def sample_document() -> PlanDocument:
    return PlanDocument(
        overview=PlanOverview(
            duration="30 days",
            total_calories=2836,
            macros=MacroSplit(protein=177, carbs=319, fats=95),
            goals=["Eat better"],
            client_summary="Summary",
        )
    )


def make_plan(
    status: PlanStatus = PlanStatus.DRAFT, client_id: UUID | None = None
) -> DietPlan:
    now = datetime.now(tz=UTC)
    return DietPlan(
        id=uuid4(),
        client_id=client_id or uuid4(),
        status=status,
        targets=sample_targets(),
        document=sample_document(),
        created_at=now,
        updated_at=now,
    )


def make_result(
    parsed: object | None = None, success: bool = True
) -> GenerationResult:
    return GenerationResult(
        id=uuid4(),
        purpose=GenerationPurpose.PLAN,
        model_identifier="gpt-4-turbo-preview",
        raw_json=json.dumps(parsed) if parsed is not None else None,
        parsed=parsed,
        usage=GenerationUsage(prompt_tokens=1000, completion_tokens=2000),
        generation_time_ms=1200,
        cost=0.07,
        success=success,
        error_message=None if success else "Provider error: boom",
        failure=None,
        created_at=datetime.now(tz=UTC),
    )


@dataclass
class InMemoryClientProfileRepository(ClientProfileRepository):
    """In-memory client profile repository for tests."""

    profiles: dict[UUID, ClientProfile] = field(default_factory=dict)

    def create_profile(self, profile: ClientProfile) -> UUID:
        client_id = uuid4()
        self.profiles[client_id] = profile
        return client_id

    def get_profile(self, client_id: UUID) -> ClientProfile | None:
        return self.profiles.get(client_id)


@dataclass
class InMemoryDietPlanRepository(DietPlanRepository):
    """In-memory diet plan repository with conditional updates."""

    plans: dict[UUID, DietPlan] = field(default_factory=dict)
    interfere_next_save: bool = False

    def create_plan(self, plan: DietPlan) -> DietPlan:
        self.plans[plan.id] = plan
        return plan

    def get_plan(self, plan_id: UUID) -> DietPlan | None:
        return self.plans.get(plan_id)

    def list_plans(self, status: PlanStatus | None, limit: int) -> list[DietPlan]:
        plans = [
            plan
            for plan in self.plans.values()
            if status is None or plan.status == status
        ]
        plans.sort(key=lambda plan: plan.created_at, reverse=True)
        return plans[:limit]

    def save_transition(
        self, plan: DietPlan, expected_status: PlanStatus, expected_version: int
    ) -> bool:
        if self.interfere_next_save:
            # Another writer bumps the row between read and update.
            self.interfere_next_save = False
            stored = self.plans[plan.id]
            self.plans[plan.id] = replace(stored, version=stored.version + 1)
        stored = self.plans.get(plan.id)
        if (
            stored is None
            or stored.status != expected_status
            or stored.version != expected_version
        ):
            return False
        self.plans[plan.id] = plan
        return True

    def delete_plan(self, plan_id: UUID) -> None:
        self.plans.pop(plan_id, None)


@dataclass
class InMemoryPublishedAccessRepository(PublishedAccessRepository):
    """In-memory published access repository for tests."""

    accesses: dict[UUID, PublishedAccess] = field(default_factory=dict)

    def create_access(self, access: PublishedAccess) -> PublishedAccess:
        self.accesses[access.id] = access
        return access

    def deactivate_for_plan(
        self, diet_plan_id: UUID, except_id: UUID | None = None
    ) -> int:
        changed = 0
        for access_id, access in list(self.accesses.items()):
            if access_id == except_id:
                continue
            if access.diet_plan_id == diet_plan_id and access.is_active:
                self.accesses[access_id] = replace(access, is_active=False)
                changed += 1
        return changed

    def get_by_token(self, access_token: str) -> PublishedAccess | None:
        for access in self.accesses.values():
            if access.access_token == access_token:
                return access
        return None

    def list_for_plan(self, diet_plan_id: UUID) -> list[PublishedAccess]:
        accesses = [
            access
            for access in self.accesses.values()
            if access.diet_plan_id == diet_plan_id
        ]
        return sorted(accesses, key=lambda access: access.issued_at, reverse=True)


@dataclass
class InMemoryGenerationLogRepository(GenerationLogRepository):
    """In-memory append-only generation log for tests."""

    results: dict[UUID, GenerationResult] = field(default_factory=dict)

    def append(self, result: GenerationResult) -> None:
        self.results.setdefault(result.id, result)

    def list_recent(self, limit: int) -> list[GenerationResult]:
        results = sorted(
            self.results.values(), key=lambda result: result.created_at, reverse=True
        )
        return results[:limit]


@dataclass
class InMemoryCustomizationRepository(CustomizationRepository):
    """In-memory customization repository for tests."""

    customizations: list[PlanCustomization] = field(default_factory=list)

    def create_customization(
        self, customization: PlanCustomization
    ) -> PlanCustomization:
        self.customizations.append(customization)
        return customization

    def get_latest(self, diet_plan_id: UUID) -> PlanCustomization | None:
        matching = [
            item for item in self.customizations if item.diet_plan_id == diet_plan_id
        ]
        return matching[-1] if matching else None


@dataclass
class InMemoryAdminRepository(AdminRepository):
    """Admin aggregates computed from the in-memory repositories."""

    plan_repository: InMemoryDietPlanRepository
    log_repository: InMemoryGenerationLogRepository

    def list_plan_statuses(self) -> list[PlanStatus]:
        return [plan.status for plan in self.plan_repository.plans.values()]

    def list_generation_outcomes(self) -> list[tuple[bool, float]]:
        return [
            (result.success, result.cost)
            for result in self.log_repository.results.values()
        ]


@dataclass
class FakeGenerationClient(GenerationClient):
    """Fake provider returning queued completions or raising queued errors."""

    responses: list[ProviderCompletion | Exception] = field(default_factory=list)
    delay_seconds: float = 0
    calls: list[dict[str, object]] = field(default_factory=list)

    def queue_json(self, payload: object) -> None:
        self.responses.append(
            ProviderCompletion(
                content=json.dumps(payload),
                model="gpt-4-turbo-preview-0125",
                usage=GenerationUsage(
                    prompt_tokens=1500, completion_tokens=3000, total_tokens=4500
                ),
            )
        )

    def queue_text(self, content: str | None) -> None:
        self.responses.append(
            ProviderCompletion(
                content=content,
                model="gpt-4-turbo-preview-0125",
                usage=GenerationUsage(
                    prompt_tokens=100, completion_tokens=50, total_tokens=150
                ),
            )
        )

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_instruction: str,
        user_instruction: str,
        temperature: float,
        max_output_tokens: int,
    ) -> ProviderCompletion:
        self.calls.append(
            {
                "model": model,
                "system_instruction": system_instruction,
                "user_instruction": user_instruction,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if not self.responses:
            raise RuntimeError("No fake response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@dataclass
class FakeNotifier(Notifier):
    """Fake notifier recording deliveries."""

    sent: list[ClientNotification] = field(default_factory=list)
    error: Exception | None = None

    async def notify(self, notification: ClientNotification) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(notification)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
        openai_api_key="openai-key",
        app_url="https://plans.example.com",
    )


@pytest.fixture
def generation_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def container(
    settings: Settings,
    generation_client: FakeGenerationClient,
    notifier: FakeNotifier,
) -> AppContainer:
    profile_repository = InMemoryClientProfileRepository()
    plan_repository = InMemoryDietPlanRepository()
    access_repository = InMemoryPublishedAccessRepository()
    log_repository = InMemoryGenerationLogRepository()
    generation_service = GenerationService(
        client=generation_client,
        log_repository=log_repository,
        model=settings.openai_model,
        temperature=settings.generation_temperature,
        timeout_seconds=settings.generation_timeout_seconds,
    )
    lifecycle_service = LifecycleService(plan_repository, access_repository)
    customization_service = CustomizationService(
        lifecycle_service, InMemoryCustomizationRepository()
    )
    plan_generation_service = PlanGenerationService(
        profile_repository=profile_repository,
        generation_service=generation_service,
        lifecycle_service=lifecycle_service,
        max_output_tokens=settings.generation_max_output_tokens,
        max_attempts=settings.generation_max_attempts,
    )
    access_service = AccessService(
        access_repository, plan_repository, customization_service
    )
    notification_service = NotificationService(
        notifier=notifier,
        profile_repository=profile_repository,
        app_url=settings.app_url,
    )
    admin_service = AdminService(
        admin_repository=InMemoryAdminRepository(plan_repository, log_repository),
        plan_repository=plan_repository,
        access_repository=access_repository,
        log_repository=log_repository,
        customization_service=customization_service,
        generation_service=generation_service,
        diagnostic_max_output_tokens=settings.diagnostic_max_output_tokens,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        generation_service=generation_service,
        plan_generation_service=plan_generation_service,
        lifecycle_service=lifecycle_service,
        customization_service=customization_service,
        access_service=access_service,
        notification_service=notification_service,
        admin_service=admin_service,
        close_resources=close_resources,
    )
