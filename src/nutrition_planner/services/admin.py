"""Admin service for plan review dashboards and reporting."""

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from nutrition_planner.domain.access import PublishedAccess
from nutrition_planner.domain.generation import GenerationResult
from nutrition_planner.domain.plans import DietPlan, PlanStatus
from nutrition_planner.services.customization import CustomizationService
from nutrition_planner.services.generation import (
    GenerationLogRepository,
    GenerationService,
)
from nutrition_planner.services.intake import normalize_intake
from nutrition_planner.services.lifecycle import (
    DietPlanRepository,
    PublishedAccessRepository,
)
from nutrition_planner.services.prompts import build_diagnostic_request


class AdminRepository(Protocol):
    """Persistence interface for aggregate admin data."""

    def list_plan_statuses(self) -> list[PlanStatus]:
        """Return the status of every stored plan."""

    def list_generation_outcomes(self) -> list[tuple[bool, float]]:
        """Return `(success, cost)` for every logged generation attempt."""


@dataclass
class AdminService:
    """Service for admin dashboards."""

    admin_repository: AdminRepository
    plan_repository: DietPlanRepository
    access_repository: PublishedAccessRepository
    log_repository: GenerationLogRepository
    customization_service: CustomizationService
    generation_service: GenerationService
    diagnostic_max_output_tokens: int

    def list_plans(
        self, status: PlanStatus | None = None, limit: int = 50
    ) -> list[dict[str, object]]:
        """Return plan summaries, newest first."""
        plans = self.plan_repository.list_plans(status, limit)
        return [_serialize_plan_summary(plan) for plan in plans]

    def get_plan_detail(self, plan: DietPlan) -> dict[str, object]:
        """Return a plan with its access grants and current customization."""
        now = datetime.now(tz=UTC)
        accesses = self.access_repository.list_for_plan(plan.id)
        customization = self.customization_service.get_latest(plan.id)
        return {
            **_serialize_plan_summary(plan),
            "targets": {
                "bmr": plan.targets.bmr,
                "total_calories": plan.targets.total_calories,
                "protein_g": plan.targets.protein_g,
                "carbs_g": plan.targets.carbs_g,
                "fats_g": plan.targets.fats_g,
            },
            "review_notes": list(plan.review_notes),
            "approved_at": plan.approved_at.isoformat() if plan.approved_at else None,
            "generation_log_id": str(plan.generation_log_id)
            if plan.generation_log_id
            else None,
            "document": plan.document.model_dump(mode="json", by_alias=True),
            "customization": {
                "id": str(customization.id),
                "edited_by": customization.edited_by,
                "created_at": customization.created_at.isoformat(),
                "document": customization.document.model_dump(
                    mode="json", by_alias=True
                ),
            }
            if customization
            else None,
            "accesses": [_serialize_access(access, now) for access in accesses],
        }

    def list_generation_logs(self, limit: int = 30) -> list[dict[str, object]]:
        """Return recent generation attempts without their raw payload."""
        return [
            _serialize_generation(result)
            for result in self.log_repository.list_recent(limit)
        ]

    def get_statistics(self) -> dict[str, object]:
        """Return plan counts per status and generation totals."""
        statuses = Counter(self.admin_repository.list_plan_statuses())
        outcomes = self.admin_repository.list_generation_outcomes()
        successes = sum(1 for success, _ in outcomes if success)
        return {
            "plans": {status.value: statuses.get(status, 0) for status in PlanStatus},
            "total_plans": sum(statuses.values()),
            "generations": {
                "total": len(outcomes),
                "successful": successes,
                "failed": len(outcomes) - successes,
            },
            "total_cost": round(sum(cost for _, cost in outcomes), 4),
        }

    async def run_diagnostic(
        self, raw: Mapping[str, object], form_locale: str | None
    ) -> dict[str, object]:
        """Send a short analysis request for an intake and report the outcome."""
        profile = normalize_intake(raw, form_locale)
        request = build_diagnostic_request(profile, self.diagnostic_max_output_tokens)
        result = await self.generation_service.generate(request)
        return {
            **_serialize_generation(result),
            "locale": profile.locale.value,
            "parsed": result.parsed,
        }


def _serialize_plan_summary(plan: DietPlan) -> dict[str, object]:
    return {
        "id": str(plan.id),
        "client_id": str(plan.client_id),
        "status": plan.status.value,
        "total_calories": plan.targets.total_calories,
        "version": plan.version,
        "approved_by": plan.approved_by,
        "created_at": plan.created_at.isoformat(),
        "updated_at": plan.updated_at.isoformat(),
    }


def _serialize_access(access: PublishedAccess, now: datetime) -> dict[str, object]:
    return {
        "id": str(access.id),
        "access_token": access.access_token,
        "issued_at": access.issued_at.isoformat(),
        "expires_at": access.expires_at.isoformat(),
        "is_active": access.is_active,
        "is_valid": access.is_valid_at(now),
    }


def _serialize_generation(result: GenerationResult) -> dict[str, object]:
    return {
        "id": str(result.id),
        "purpose": result.purpose.value,
        "model": result.model_identifier,
        "success": result.success,
        "failure": result.failure.value if result.failure else None,
        "error_message": result.error_message,
        "prompt_tokens": result.usage.prompt_tokens,
        "completion_tokens": result.usage.completion_tokens,
        "total_tokens": result.usage.total_tokens,
        "generation_time_ms": result.generation_time_ms,
        "cost": result.cost,
        "created_at": result.created_at.isoformat(),
    }
