"""End-to-end plan generation for one intake submission."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from uuid import UUID

from nutrition_planner.domain.errors import GenerationFailed
from nutrition_planner.domain.generation import GenerationResult
from nutrition_planner.domain.plans import DietPlan
from nutrition_planner.domain.profiles import ClientProfile
from nutrition_planner.domain.targets import NutritionTargets
from nutrition_planner.services.calculator import compute_targets
from nutrition_planner.services.generation import GenerationService
from nutrition_planner.services.intake import normalize_intake
from nutrition_planner.services.lifecycle import LifecycleService
from nutrition_planner.services.profiles import ClientProfileRepository
from nutrition_planner.services.prompts import build_generation_request
from nutrition_planner.services.structuring import structure_plan

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationOutcome:
    """Everything produced by one successful pipeline run."""

    client_id: UUID
    profile: ClientProfile
    targets: NutritionTargets
    result: GenerationResult
    plan: DietPlan


@dataclass
class PlanGenerationService:
    """Turns a raw intake into a stored draft plan."""

    profile_repository: ClientProfileRepository
    generation_service: GenerationService
    lifecycle_service: LifecycleService
    max_output_tokens: int
    max_attempts: int = 2

    async def generate_plan(
        self, raw: Mapping[str, object], form_locale: str | None
    ) -> GenerationOutcome:
        """Normalize, compute, generate, structure and persist a draft plan.

        Raises `GenerationFailed` once every attempt has failed and
        `InvalidGenerationOutput` (not retried) when the JSON is not an object.
        """
        profile = normalize_intake(raw, form_locale)
        client_id = self.profile_repository.create_profile(profile)
        targets = compute_targets(profile)
        _logger.info(
            "Targets computed: client_id=%s calories=%s locale=%s",
            client_id,
            targets.total_calories,
            profile.locale,
        )
        result = await self._generate(profile, targets)
        plan = self.lifecycle_service.create_draft(
            structure_plan(result, targets, profile, client_id)
        )
        return GenerationOutcome(
            client_id=client_id,
            profile=profile,
            targets=targets,
            result=result,
            plan=plan,
        )

    async def _generate(
        self, profile: ClientProfile, targets: NutritionTargets
    ) -> GenerationResult:
        attempts = max(1, self.max_attempts)
        result: GenerationResult | None = None
        for attempt in range(1, attempts + 1):
            request = build_generation_request(
                profile, targets, self.max_output_tokens
            )
            result = await self.generation_service.generate(request)
            if result.success:
                return result
            _logger.warning(
                "Generation attempt failed: attempt=%s/%s failure=%s",
                attempt,
                attempts,
                result.failure,
            )
        raise GenerationFailed(result)
