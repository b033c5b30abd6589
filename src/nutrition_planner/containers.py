"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_planner.adapters.openai_generation_client import (
    OpenAIGenerationClient,
)
from nutrition_planner.adapters.supabase_access_repository import (
    SupabasePublishedAccessRepository,
)
from nutrition_planner.adapters.supabase_admin_repository import (
    SupabaseAdminRepository,
)
from nutrition_planner.adapters.supabase_customization_repository import (
    SupabaseCustomizationRepository,
)
from nutrition_planner.adapters.supabase_diet_plan_repository import (
    SupabaseDietPlanRepository,
)
from nutrition_planner.adapters.supabase_generation_log_repository import (
    SupabaseGenerationLogRepository,
)
from nutrition_planner.adapters.supabase_profile_repository import (
    SupabaseClientProfileRepository,
)
from nutrition_planner.adapters.webhook_notifier import HttpxWebhookNotifier
from nutrition_planner.config import Settings
from nutrition_planner.services.access import AccessService
from nutrition_planner.services.admin import AdminService
from nutrition_planner.services.customization import CustomizationService
from nutrition_planner.services.generation import GenerationService, TokenPricing
from nutrition_planner.services.lifecycle import LifecycleService
from nutrition_planner.services.notifications import NotificationService
from nutrition_planner.services.pipeline import PlanGenerationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    generation_service: GenerationService
    plan_generation_service: PlanGenerationService
    lifecycle_service: LifecycleService
    customization_service: CustomizationService
    access_service: AccessService
    notification_service: NotificationService
    admin_service: AdminService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseClientProfileRepository(supabase_client)
    plan_repository = SupabaseDietPlanRepository(supabase_client)
    access_repository = SupabasePublishedAccessRepository(supabase_client)
    log_repository = SupabaseGenerationLogRepository(supabase_client)
    customization_repository = SupabaseCustomizationRepository(supabase_client)
    admin_repository = SupabaseAdminRepository(supabase_client)

    openai_client = OpenAIGenerationClient.create(
        resolved_settings.openai_api_key,
        timeout=resolved_settings.generation_timeout_seconds,
    )
    generation_service = GenerationService(
        client=openai_client,
        log_repository=log_repository,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.generation_temperature,
        timeout_seconds=resolved_settings.generation_timeout_seconds,
        pricing=TokenPricing(
            input_per_1k=resolved_settings.input_cost_per_1k_tokens,
            output_per_1k=resolved_settings.output_cost_per_1k_tokens,
        ),
    )
    lifecycle_service = LifecycleService(plan_repository, access_repository)
    customization_service = CustomizationService(
        lifecycle_service, customization_repository
    )
    plan_generation_service = PlanGenerationService(
        profile_repository=profile_repository,
        generation_service=generation_service,
        lifecycle_service=lifecycle_service,
        max_output_tokens=resolved_settings.generation_max_output_tokens,
        max_attempts=resolved_settings.generation_max_attempts,
    )
    access_service = AccessService(
        access_repository, plan_repository, customization_service
    )
    notifier = (
        HttpxWebhookNotifier.create(resolved_settings.notification_webhook_url)
        if resolved_settings.notification_webhook_url
        else None
    )
    notification_service = NotificationService(
        notifier=notifier,
        profile_repository=profile_repository,
        app_url=resolved_settings.app_url,
    )
    admin_service = AdminService(
        admin_repository=admin_repository,
        plan_repository=plan_repository,
        access_repository=access_repository,
        log_repository=log_repository,
        customization_service=customization_service,
        generation_service=generation_service,
        diagnostic_max_output_tokens=resolved_settings.diagnostic_max_output_tokens,
    )

    async def close_resources() -> None:
        await openai_client.close()
        if notifier is not None:
            await notifier.close()

    return AppContainer(
        settings=resolved_settings,
        generation_service=generation_service,
        plan_generation_service=plan_generation_service,
        lifecycle_service=lifecycle_service,
        customization_service=customization_service,
        access_service=access_service,
        notification_service=notification_service,
        admin_service=admin_service,
        close_resources=close_resources,
    )
